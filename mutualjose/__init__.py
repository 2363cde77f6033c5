"""mutualjose: mutual JWS + JWE envelopes for payload exchange."""

from .config import EnvelopeConfig, load_config
from .envelope import EnvelopeOrchestrator
from .errors import (
    AlgorithmNotProvisioned,
    DecryptionFailed,
    EncryptionFailed,
    KeySourceUnavailable,
    MalformedKeySet,
    MutualJoseError,
    SignatureExpired,
    SignatureInvalid,
    SigningFailed,
)
from .keys import KeyMaterialSource, KeyStore
from .security import EncryptionCodec, SignatureCodec, VerificationResult

__version__ = "0.1.0"
__all__ = [
    "EnvelopeConfig",
    "EnvelopeOrchestrator",
    "EncryptionCodec",
    "KeyMaterialSource",
    "KeyStore",
    "SignatureCodec",
    "VerificationResult",
    "load_config",
    "MutualJoseError",
    "KeySourceUnavailable",
    "MalformedKeySet",
    "AlgorithmNotProvisioned",
    "SigningFailed",
    "SignatureExpired",
    "SignatureInvalid",
    "EncryptionFailed",
    "DecryptionFailed",
]
