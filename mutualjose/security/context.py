"""Per-call contexts and results for the envelope pipeline."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..constants import COMPACT_FORMAT, EXPIRATION_HEADER


class SigningContext(BaseModel):
    """Parameters for a single JWS signing call.

    Built from the clock and the configured validity window each time a
    payload is signed; it is never stored.
    """

    algorithm: str = Field(..., description="JWS algorithm")
    key_id: Optional[str] = Field(default=None, description="Key identifier used for signing")
    expires_at: int = Field(..., description="Expiry as epoch seconds")

    def protected_header(self) -> Dict[str, Any]:
        header: Dict[str, Any] = {"alg": self.algorithm}
        if self.key_id is not None:
            header["kid"] = self.key_id
        critical: List[str] = [EXPIRATION_HEADER]
        header["crit"] = critical
        header[EXPIRATION_HEADER] = self.expires_at
        return header


class EncryptionContext(BaseModel):
    """Parameters for a single JWE encryption call."""

    algorithm: str = Field(..., description="Key management algorithm")
    encryption_method: str = Field(..., description="Content encryption method")
    key_id: Optional[str] = Field(default=None, description="Recipient key identifier")
    format: str = COMPACT_FORMAT

    def protected_header(self) -> Dict[str, Any]:
        header: Dict[str, Any] = {"alg": self.algorithm, "enc": self.encryption_method}
        if self.key_id is not None:
            header["kid"] = self.key_id
        return header


class VerificationResult(BaseModel):
    """Verified payload together with the header that verified it."""

    payload: Any = None
    header: Dict[str, Any] = Field(default_factory=dict)
    key_id: Optional[str] = None
