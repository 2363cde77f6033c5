"""JWS signing and verification services."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional, Union

from jwcrypto import jwk, jws
from jwcrypto.common import JWSEHeaderParameter, json_encode

from ..constants import (
    DEFAULT_JWS_EXPIRATION_MINUTES,
    DEFAULT_SIGNING_ALGORITHM,
    EXPIRATION_HEADER,
)
from ..errors import SignatureExpired, SignatureInvalid, SigningFailed
from ..utils.clock import Clock, current_time, expiration_time
from .context import SigningContext, VerificationResult

logger = logging.getLogger(__name__)

# ``exp`` is declared critical, so both sides must register it as understood.
EXPIRATION_HEADER_REGISTRY = {
    EXPIRATION_HEADER: JWSEHeaderParameter("Expiration Time", True, True, None),
}


class SignatureCodec:
    """Signs and verifies JSON payloads as compact JSON Web Signatures.

    Every signature carries an ``exp`` protected header listed in ``crit``.
    Verification is two independent gates on the same parsed envelope: the
    cryptographic check first, then freshness of ``exp``. Each gate fails with
    its own error type.
    """

    def __init__(
        self,
        algorithm: str = DEFAULT_SIGNING_ALGORITHM,
        validity_minutes: float = DEFAULT_JWS_EXPIRATION_MINUTES,
        clock: Clock = time.time,
    ) -> None:
        self.algorithm = algorithm
        self.validity_minutes = validity_minutes
        self.clock = clock

    def current_time(self) -> int:
        return current_time(self.clock)

    def expiration_time(self, validity_minutes: Optional[float] = None) -> int:
        if validity_minutes is None:
            validity_minutes = self.validity_minutes
        return expiration_time(validity_minutes, self.clock)

    def context_for(self, key: jwk.JWK, validity_minutes: Optional[float] = None) -> SigningContext:
        return SigningContext(
            algorithm=key.get("alg") or self.algorithm,
            key_id=key.get("kid"),
            expires_at=self.expiration_time(validity_minutes),
        )

    def sign(
        self, payload: Any, key: jwk.JWK, validity_minutes: Optional[float] = None
    ) -> str:
        """Sign ``payload`` and return the compact JWS."""
        context = self.context_for(key, validity_minutes)
        try:
            body = json.dumps(payload, separators=(",", ":"))
            token = jws.JWS(body.encode("utf-8"), header_registry=EXPIRATION_HEADER_REGISTRY)
            token.add_signature(
                key, alg=context.algorithm, protected=json_encode(context.protected_header())
            )
            signed = token.serialize(compact=True)
        except Exception as e:
            raise SigningFailed(context.key_id, str(e)) from e
        logger.debug(f"Signed payload with key id = {context.key_id}, exp = {context.expires_at}")
        return signed

    def verify(self, envelope: Union[str, bytes], key: jwk.JWK) -> VerificationResult:
        """Verify ``envelope`` against ``key`` and return its payload and header."""
        key_id = key.get("kid")
        token = jws.JWS(header_registry=EXPIRATION_HEADER_REGISTRY)
        try:
            if isinstance(envelope, bytes):
                envelope = envelope.decode("utf-8")
            token.deserialize(envelope)
            token.verify(key)
        except Exception as e:
            raise SignatureInvalid(key_id, str(e)) from e

        header = dict(token.jose_header)
        self.check_expiration(header, key_id)

        try:
            payload = json.loads(token.payload)
        except ValueError as e:
            raise SignatureInvalid(key_id, "payload is not JSON") from e
        logger.debug(f"Verified signature with key id = {key_id}")
        return VerificationResult(payload=payload, header=header, key_id=key_id)

    def check_expiration(self, header: dict, key_id: Optional[str] = None) -> None:
        """Raise unless ``header`` carries an ``exp`` that is not in the past."""
        expires_at = header.get(EXPIRATION_HEADER)
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise SignatureInvalid(key_id, "missing or malformed exp header")
        now = self.current_time()
        if expires_at < now:
            raise SignatureExpired(key_id, expires_at, now)
