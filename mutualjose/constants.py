"""Default values shared across mutualjose."""

DEFAULT_SIGNING_ALGORITHM = "RS256"
DEFAULT_ENCRYPTION_ALGORITHM = "RSA-OAEP-256"
DEFAULT_ENCRYPTION_METHOD = "A256CBC-HS512"
DEFAULT_JWS_EXPIRATION_MINUTES = 5
DEFAULT_HTTP_TIMEOUT = 10.0

COMPACT_FORMAT = "compact"
EXPIRATION_HEADER = "exp"
