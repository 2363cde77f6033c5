from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_ENCRYPTION_ALGORITHM,
    DEFAULT_ENCRYPTION_METHOD,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_JWS_EXPIRATION_MINUTES,
    DEFAULT_SIGNING_ALGORITHM,
)


class EnvelopeConfig(BaseModel):
    """Settings for signing, encrypting and locating key sets."""

    client_key_set_location: Optional[str] = Field(
        default=None, description="Path or URL of the client's private JWK set"
    )
    server_key_set_location: Optional[str] = Field(
        default=None, description="Path or URL of the server's public JWK set"
    )
    signing_algorithm: str = DEFAULT_SIGNING_ALGORITHM
    encryption_algorithm: str = DEFAULT_ENCRYPTION_ALGORITHM
    encryption_method: str = DEFAULT_ENCRYPTION_METHOD
    jws_expiration_minutes: float = Field(default=DEFAULT_JWS_EXPIRATION_MINUTES, ge=0)
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)


def load_config(path: Optional[str] = None) -> EnvelopeConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to MUTUALJOSE_CONFIG env
            variable or 'mutualjose.yaml' in the current directory.
    """

    config_path = path or os.getenv("MUTUALJOSE_CONFIG", "mutualjose.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = EnvelopeConfig(**data)
    else:
        config = EnvelopeConfig()

    env_client = os.getenv("MUTUALJOSE_CLIENT_KEY_SET")
    if env_client:
        config.client_key_set_location = env_client
    env_server = os.getenv("MUTUALJOSE_SERVER_KEY_SET")
    if env_server:
        config.server_key_set_location = env_server
    return config
