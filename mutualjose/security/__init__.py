"""JOSE signing and encryption codecs."""

from .context import EncryptionContext, SigningContext, VerificationResult
from .jwe import EncryptionCodec
from .jws import SignatureCodec

__all__ = [
    "EncryptionCodec",
    "EncryptionContext",
    "SignatureCodec",
    "SigningContext",
    "VerificationResult",
]
