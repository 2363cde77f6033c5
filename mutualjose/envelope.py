"""Sign-then-encrypt / decrypt-then-verify envelope orchestration."""

from __future__ import annotations

import logging
import time
from typing import Any, Optional, Union

from .config import EnvelopeConfig, load_config
from .constants import (
    DEFAULT_ENCRYPTION_ALGORITHM,
    DEFAULT_ENCRYPTION_METHOD,
    DEFAULT_JWS_EXPIRATION_MINUTES,
    DEFAULT_SIGNING_ALGORITHM,
)
from .keys import KeyMaterialSource, KeySetDocument, KeyStore, LazyKeyStore
from .security import EncryptionCodec, SignatureCodec, VerificationResult
from .utils.clock import Clock

logger = logging.getLogger(__name__)


class EnvelopeOrchestrator:
    """Exchanges signed and encrypted payloads with a remote party.

    The client key set holds the local private keys: they sign outbound
    payloads and decrypt inbound envelopes. The server key set holds the
    remote public keys: they encrypt outbound payloads and verify inbound
    signatures. Each key set is loaded once, on first use.
    """

    def __init__(
        self,
        client_key_set_location: Optional[str],
        server_key_set_location: Optional[str],
        encryption_algorithm: str = DEFAULT_ENCRYPTION_ALGORITHM,
        signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM,
        encryption_method: str = DEFAULT_ENCRYPTION_METHOD,
        jws_expiration_minutes: float = DEFAULT_JWS_EXPIRATION_MINUTES,
        source: Optional[KeyMaterialSource] = None,
        clock: Clock = time.time,
    ) -> None:
        self.client_key_set_location = client_key_set_location
        self.server_key_set_location = server_key_set_location
        self.encryption_algorithm = encryption_algorithm
        self.signing_algorithm = signing_algorithm
        self.encryption_method = encryption_method
        self.jws_expiration_minutes = jws_expiration_minutes

        self.source = source or KeyMaterialSource()
        self.signatures = SignatureCodec(signing_algorithm, jws_expiration_minutes, clock)
        self.encryption = EncryptionCodec(encryption_algorithm, encryption_method)
        self._client_keys = LazyKeyStore(client_key_set_location, self.source, name="client")
        self._server_keys = LazyKeyStore(server_key_set_location, self.source, name="server")

    @classmethod
    def from_config(
        cls,
        config: Optional[EnvelopeConfig] = None,
        source: Optional[KeyMaterialSource] = None,
        clock: Clock = time.time,
    ) -> "EnvelopeOrchestrator":
        config = config or load_config()
        return cls(
            config.client_key_set_location,
            config.server_key_set_location,
            encryption_algorithm=config.encryption_algorithm,
            signing_algorithm=config.signing_algorithm,
            encryption_method=config.encryption_method,
            jws_expiration_minutes=config.jws_expiration_minutes,
            source=source or KeyMaterialSource(timeout=config.http_timeout),
            clock=clock,
        )

    @property
    def client_key_store(self) -> Optional[KeyStore]:
        return self._client_keys.store

    @property
    def server_key_store(self) -> Optional[KeyStore]:
        return self._server_keys.store

    # ------------------------------------------------------------------
    async def encrypt(self, payload: Any) -> str:
        """Sign ``payload`` with the client key, then encrypt it for the server."""
        await self.load_key_stores()
        signed = await self.sign_body(payload)
        return await self.encrypt_body(signed)

    async def decrypt(self, envelope: Union[str, bytes]) -> VerificationResult:
        """Decrypt ``envelope`` with the client key, then verify the server signature."""
        decrypted = await self.decrypt_body(envelope)
        return await self.check_signature(decrypted)

    # ------------------------------------------------------------------
    async def sign_body(self, payload: Any) -> str:
        store = await self._client_keys.get()
        key = store.require(self.signing_algorithm)
        return self.signatures.sign(payload, key)

    async def encrypt_body(self, body: Union[str, bytes]) -> str:
        store = await self._server_keys.get()
        key = store.require(self.encryption_algorithm)
        return self.encryption.encrypt(
            body, key, self.encryption_algorithm, self.encryption_method
        )

    async def decrypt_body(self, envelope: Union[str, bytes]) -> bytes:
        store = await self._client_keys.get()
        key = store.require(self.encryption_algorithm)
        return self.encryption.decrypt(envelope, key)

    async def check_signature(self, body: Union[str, bytes]) -> VerificationResult:
        store = await self._server_keys.get()
        key = store.require(self.signing_algorithm)
        return self.signatures.verify(body, key)

    # ------------------------------------------------------------------
    async def load_key_stores(self) -> None:
        """Populate both key stores unless they are already loaded."""
        await self._server_keys.get()
        await self._client_keys.get()

    def load_key_set(self, location: str, document: KeySetDocument) -> KeyStore:
        """Install a key store from an in-memory JWK set.

        The store replaces the client store when ``location`` is the client key
        set location, and the server store otherwise.
        """
        store = KeyStore.parse(document, location=location)
        if location == self.client_key_set_location:
            self._client_keys.install(store)
        else:
            self._server_keys.install(store)
        return store

    async def check_url_is_valid(self, url: str) -> bool:
        return await self.source.is_reachable(url)
