"""
Settings for Kickstand.

Environment-driven settings shared by the bootstrap layer and the
default runner. All variables use the ``KICKSTAND_`` prefix.
"""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field, field_validator


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str) -> list[str]:
    value = os.getenv(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


class BootstrapSettings(BaseModel):
    """
    Bootstrap settings model.

    Used for type-safe settings access by the application context and
    the runner. Command line options given to the runner take precedence
    over ``address``, ``port`` and ``log_level``.
    """

    environment: str = Field("development", description="Runtime environment name")
    app_class: str | None = Field(None, description="Explicit application class name")
    run_on_exit: bool = Field(True, description="Launch the app from finalize()")
    ignore_callers: list[str] = Field(
        default_factory=list,
        description="Extra regex patterns for frames to skip when finding the app file",
    )
    log_level: str = Field("INFO", description="Root log level")

    # Runner defaults
    address: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(9000, ge=0, le=65535, description="Bind port")

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("environment must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache()
def get_settings() -> BootstrapSettings:
    """
    Get bootstrap settings from environment.

    Uses lru_cache for singleton pattern.
    """
    return BootstrapSettings(
        environment=os.getenv("KICKSTAND_ENV", "development"),
        app_class=os.getenv("KICKSTAND_APP_CLASS") or None,
        run_on_exit=_env_flag("KICKSTAND_RUN_ON_EXIT", True),
        ignore_callers=_env_list("KICKSTAND_IGNORE_CALLERS"),
        log_level=os.getenv("KICKSTAND_LOG_LEVEL", "INFO"),
        address=os.getenv("KICKSTAND_ADDRESS", "0.0.0.0"),
        port=os.getenv("KICKSTAND_PORT", "9000"),
    )


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    get_settings.cache_clear()


def is_test_environment() -> bool:
    """Whether the process runs in the ``test`` environment."""
    return get_settings().is_test
