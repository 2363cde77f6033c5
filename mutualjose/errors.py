"""Typed failures raised by the envelope pipeline."""

from __future__ import annotations

from typing import Optional


class MutualJoseError(Exception):
    """Base class for every failure raised by mutualjose."""


class KeySourceUnavailable(MutualJoseError):
    """The key set location is neither a readable file nor a reachable URL."""

    def __init__(self, location: str, reason: str = "") -> None:
        self.location = location
        self.reason = reason
        message = f"Wrong JWK set location path = {location}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class MalformedKeySet(MutualJoseError):
    """The key set document is not a valid JWK set."""

    def __init__(self, reason: str, location: Optional[str] = None) -> None:
        self.reason = reason
        self.location = location
        message = f"Failed to create keyStore from given jwkSet: {reason}"
        if location:
            message = f"{message} (location = {location})"
        super().__init__(message)


class AlgorithmNotProvisioned(MutualJoseError):
    """No key in the store matches the required algorithm."""

    def __init__(self, algorithm: str, location: Optional[str] = None) -> None:
        self.algorithm = algorithm
        self.location = location
        super().__init__(f"JWK set doesn't contain key with algorithm = {algorithm}")


class KeyOperationError(MutualJoseError):
    """A cryptographic operation failed for a specific key."""

    action = "process payload"

    def __init__(self, key_id: Optional[str], reason: str = "") -> None:
        self.key_id = key_id
        self.reason = reason
        message = f"Failed to {self.action} with key id = {key_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class SigningFailed(KeyOperationError):
    action = "sign"


class SignatureInvalid(KeyOperationError):
    action = "verify signature"


class EncryptionFailed(KeyOperationError):
    action = "encrypt payload"


class DecryptionFailed(KeyOperationError):
    action = "decrypt payload"


class SignatureExpired(MutualJoseError):
    """The signature verified but its ``exp`` header lies in the past."""

    def __init__(self, key_id: Optional[str], expires_at: float, now: float) -> None:
        self.key_id = key_id
        self.expires_at = expires_at
        self.now = now
        super().__init__(
            f"JWS signature has expired (key id = {key_id}, exp = {expires_at}, now = {now})"
        )


__all__ = [
    "MutualJoseError",
    "KeySourceUnavailable",
    "MalformedKeySet",
    "AlgorithmNotProvisioned",
    "KeyOperationError",
    "SigningFailed",
    "SignatureInvalid",
    "SignatureExpired",
    "EncryptionFailed",
    "DecryptionFailed",
]
