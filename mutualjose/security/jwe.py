"""JWE encryption and decryption services."""

from __future__ import annotations

import logging
from typing import Optional, Union

from jwcrypto import jwe, jwk
from jwcrypto.common import json_encode

from ..constants import DEFAULT_ENCRYPTION_ALGORITHM, DEFAULT_ENCRYPTION_METHOD
from ..errors import DecryptionFailed, EncryptionFailed
from .context import EncryptionContext

logger = logging.getLogger(__name__)


class EncryptionCodec:
    """Produces and opens compact JSON Web Encryption envelopes."""

    def __init__(
        self,
        algorithm: str = DEFAULT_ENCRYPTION_ALGORITHM,
        encryption_method: str = DEFAULT_ENCRYPTION_METHOD,
    ) -> None:
        self.algorithm = algorithm
        self.encryption_method = encryption_method

    def context_for(
        self,
        key: jwk.JWK,
        algorithm: Optional[str] = None,
        encryption_method: Optional[str] = None,
    ) -> EncryptionContext:
        return EncryptionContext(
            algorithm=algorithm or key.get("alg") or self.algorithm,
            encryption_method=encryption_method or self.encryption_method,
            key_id=key.get("kid"),
        )

    def encrypt(
        self,
        body: Union[str, bytes],
        key: jwk.JWK,
        algorithm: Optional[str] = None,
        encryption_method: Optional[str] = None,
    ) -> str:
        """Encrypt ``body`` for the holder of ``key``."""
        context = self.context_for(key, algorithm, encryption_method)
        if isinstance(body, str):
            body = body.encode("utf-8")
        try:
            token = jwe.JWE(body, protected=json_encode(context.protected_header()))
            token.add_recipient(key)
            encrypted = token.serialize(compact=True)
        except Exception as e:
            raise EncryptionFailed(context.key_id, str(e)) from e
        logger.debug(
            f"Encrypted payload with key id = {context.key_id} "
            f"({context.algorithm}/{context.encryption_method})"
        )
        return encrypted

    def decrypt(self, envelope: Union[str, bytes], key: jwk.JWK) -> bytes:
        """Decrypt ``envelope`` with the private part of ``key``."""
        key_id = key.get("kid")
        token = jwe.JWE()
        try:
            if isinstance(envelope, bytes):
                envelope = envelope.decode("utf-8")
            token.deserialize(envelope, key=key)
            plaintext = token.payload
        except Exception as e:
            raise DecryptionFailed(key_id, str(e)) from e
        logger.debug(f"Decrypted payload with key id = {key_id}")
        return plaintext
