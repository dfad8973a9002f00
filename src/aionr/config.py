"""Server configuration — backend endpoint, credential, and runtime knobs."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, SecretStr, ValidationError, field_validator

from aionr.errors import ConfigError

ENV_API_URL = "AION_R_API_URL"
ENV_API_KEY = "AION_R_API_KEY"
ENV_TIMEOUT = "AION_R_TIMEOUT"
ENV_LOG_LEVEL = "AION_R_LOG_LEVEL"

DEFAULT_TIMEOUT = 60.0


class ServerConfig(BaseModel):
    """Configuration read once at startup.

    ``api_key`` is kept as a :class:`~pydantic.SecretStr` so it never ends up
    in a log line or a ``repr``.
    """

    api_url: str
    api_key: SecretStr | None = None
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"
    discover_resources: bool = True
    otlp_endpoint: str | None = None
    trace_console: bool = False

    @field_validator("api_url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            msg = "backend URL must start with http:// or https://"
            raise ValueError(msg)
        return value

    @field_validator("timeout")
    @classmethod
    def _check_timeout(cls, value: float) -> float:
        if value <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            msg = f"unknown log level: {value}"
            raise ValueError(msg)
        return level

    @property
    def bearer_token(self) -> str | None:
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value() or None

    @classmethod
    def load(cls, **values: Any) -> ServerConfig:
        """Build and validate a config, raising :class:`ConfigError` on failure."""
        if not values.get("api_url"):
            msg = f"Backend URL is required (set {ENV_API_URL} or pass --api-url)"
            raise ConfigError(msg)
        try:
            return cls.model_validate({k: v for k, v in values.items() if v is not None})
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise ConfigError(f"Invalid configuration: {details}") from exc
