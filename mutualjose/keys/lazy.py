"""Lazily populated key store with an explicit lifecycle."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..errors import KeySourceUnavailable
from .source import KeyMaterialSource
from .store import KeyStore

logger = logging.getLogger(__name__)


class StoreState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"


class LazyKeyStore:
    """Loads a :class:`KeyStore` from ``location`` on first use.

    Concurrent callers that arrive while loading is in flight share the same
    task, so the location is fetched at most once. A failed load leaves the
    store uninitialized; the next call starts a new attempt.
    """

    def __init__(self, location: Optional[str], source: KeyMaterialSource, name: str) -> None:
        self.location = location
        self.name = name
        self._source = source
        self._store: Optional[KeyStore] = None
        self._pending: Optional["asyncio.Future[KeyStore]"] = None

    @property
    def state(self) -> StoreState:
        return StoreState.READY if self._store is not None else StoreState.UNINITIALIZED

    @property
    def store(self) -> Optional[KeyStore]:
        return self._store

    def install(self, store: KeyStore) -> None:
        """Replace the current store wholesale with an already parsed one."""
        self._store = store
        logger.info(f"Installed {self.name} key store with {len(store)} key(s)")

    async def get(self) -> KeyStore:
        if self._store is not None:
            return self._store

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._populate())
        pending = self._pending
        try:
            return await asyncio.shield(pending)
        finally:
            if self._pending is pending and pending.done():
                self._pending = None

    async def _populate(self) -> KeyStore:
        if not self.location:
            raise KeySourceUnavailable(
                f"<{self.name} key set>", f"no {self.name} key set location configured"
            )
        logger.debug(f"Loading {self.name} key store from {self.location}")
        try:
            document = await self._source.fetch(self.location)
            store = KeyStore.parse(document, location=self.location)
        except Exception as e:
            logger.warning(f"Failed to load {self.name} key store from {self.location}: {e}")
            raise
        if self._store is not None:
            logger.debug(f"Discarding fetched {self.name} key store, one was installed meanwhile")
            return self._store
        self.install(store)
        return store
