from __future__ import annotations

import structlog
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from retry_entry.logging import configure_structlog, get_log_level_value


def prefixed_settings_config(prefix: str) -> SettingsConfigDict:
    """Build standard Pydantic settings config for prefixed environments."""
    return SettingsConfigDict(env_prefix=prefix, case_sensitive=False)


class RetrySettings(BaseSettings):
    """Environment-driven defaults for retry entries (``RETRY_*``)."""

    model_config = prefixed_settings_config("RETRY_")

    max_attempts: int = 3
    log_level: str = "INFO"

    @field_validator("max_attempts")
    @classmethod
    def _validate_max_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_attempts must be >= 1")
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if not isinstance(value, str):
            return value
        normalized = value.strip().upper()
        get_log_level_value(normalized)
        return normalized

    def configure_logging(self) -> structlog.stdlib.BoundLogger:
        """Configure structlog at ``log_level`` and return the package logger."""
        return configure_structlog(log_level=self.log_level)
