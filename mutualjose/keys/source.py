"""Resolve key set locations to raw JWK set documents."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlparse

import httpx

from ..constants import DEFAULT_HTTP_TIMEOUT
from ..errors import KeySourceUnavailable

logger = logging.getLogger(__name__)

KeySetDocument = Union[str, bytes, Mapping[str, Any]]

URL_SCHEMES = ("http", "https")


class KeyMaterialSource:
    """Reads JWK sets either from a local file or from an HTTP(S) URL.

    A location with an ``http``/``https`` scheme is only ever fetched over the
    network; anything else is only ever read from the filesystem.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._client = client
        self.timeout = timeout

    @staticmethod
    def is_url(location: str) -> bool:
        return urlparse(location).scheme.lower() in URL_SCHEMES

    async def fetch(self, location: str) -> KeySetDocument:
        """Return the key set document stored at ``location``."""
        try:
            is_url = self.is_url(location)
        except ValueError as e:
            raise KeySourceUnavailable(location, str(e)) from e
        if is_url:
            return await self._fetch_url(location)
        return self._read_file(location)

    async def is_reachable(self, url: str) -> bool:
        """Return ``True`` only when a GET on ``url`` answers with HTTP 200."""
        try:
            response = await self._get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Key set URL {url} is not reachable: {e}")
            return False
        return response.status_code == 200

    def _read_file(self, location: str) -> str:
        path = Path(location).expanduser()
        if not path.is_file():
            raise KeySourceUnavailable(location, "no such file")
        try:
            data = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise KeySourceUnavailable(location, str(e)) from e
        logger.debug(f"Read JWK set from file {location}")
        return data

    async def _fetch_url(self, location: str) -> KeySetDocument:
        try:
            response = await self._get(location)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise KeySourceUnavailable(location, str(e)) from e

        logger.debug(f"Fetched JWK set from {location} (status {response.status_code})")
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, Mapping) and body:
            return body
        return response.text

    async def _get(self, url: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url)
