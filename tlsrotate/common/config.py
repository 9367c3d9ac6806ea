"""Run configuration.

Defaults come from the environment (a `.env` file in the working
directory is loaded first); command line flags override them.

Environment:
    TLS_SECRET_NAME       secret to update (default: foobar-tls)
    TLS_SECRET_NAMESPACE  namespace holding the secret (default: default)
    KUBECONFIG            kubeconfig path used when not running in-cluster
    LOG_LEVEL             logging level name (default: INFO)
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator
from pydantic.config import ConfigDict

from .errors import ConfigurationError

load_dotenv()

DEFAULT_SECRET_NAME = "foobar-tls"
DEFAULT_NAMESPACE = "default"
DEFAULT_LOG_LEVEL = "INFO"


class RotateConfig(BaseModel):
    """Settings for one rotation run, resolved once at startup."""
    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        str_strip_whitespace=True,
    )

    secret_name: str = DEFAULT_SECRET_NAME
    namespace: str = DEFAULT_NAMESPACE
    kubeconfig: Optional[str] = None
    log_level: str = DEFAULT_LOG_LEVEL
    dry_run: bool = False

    @field_validator("secret_name", "namespace")
    @classmethod
    def _not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"unknown log level {v!r}")
        return v


def env_defaults() -> dict:
    """Read configuration defaults from the environment."""
    return {
        "secret_name": os.getenv("TLS_SECRET_NAME", DEFAULT_SECRET_NAME),
        "namespace": os.getenv("TLS_SECRET_NAMESPACE", DEFAULT_NAMESPACE),
        "kubeconfig": os.getenv("KUBECONFIG") or None,
        "log_level": os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
    }


def build_config(**overrides) -> RotateConfig:
    """Merge environment defaults with non-None overrides. Raises ConfigurationError."""
    values = env_defaults()
    values.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return RotateConfig(**values)
    except ValidationError as e:
        raise ConfigurationError("invalid configuration") from e
