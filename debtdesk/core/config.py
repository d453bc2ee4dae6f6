"""
DebtDesk - Core Config

Settings are read from the process environment only; no .env file is
auto-loaded. The alias table and validation rules of the import pipeline
are compiled in and are NOT configurable here. These settings cover the
service layer around it.

Usage:
    from debtdesk.core.config import get_settings

    settings = get_settings()
    if len(content) > settings.IMPORT_MAX_UPLOAD_BYTES:
        ...
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class Settings(BaseSettings):
    """Service settings, populated from os.environ."""

    model_config = SettingsConfigDict(
        env_file=None,
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    # =========================================================================
    # ENVIRONMENT CONTROL
    # =========================================================================

    DEBTDESK_ENV: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Deployment environment",
    )
    DEBTDESK_SERVICE: str = Field(
        default="debtdesk-api",
        description="Service name stamped on every log line",
    )
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # =========================================================================
    # CORS CONFIGURATION
    # =========================================================================

    DEBTDESK_CORS_ORIGINS: str | None = Field(default=None)

    # =========================================================================
    # IMPORTS
    # =========================================================================

    IMPORT_MAX_UPLOAD_BYTES: int = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        gt=0,
        description="Largest accepted upload, in bytes",
    )
    IMPORT_ACCUMULATE_ROW_ERRORS: bool = Field(
        default=False,
        description="Report every failing check per row instead of the first",
    )

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    # =========================================================================
    # PROPERTY ALIASES
    # =========================================================================

    @property
    def environment(self) -> str:
        return self.DEBTDESK_ENV

    @property
    def log_level(self) -> str:
        return self.LOG_LEVEL

    @property
    def is_production(self) -> bool:
        return self.DEBTDESK_ENV == "prod"

    @property
    def cors_allowed_origins(self) -> list[str]:
        """
        Parse DEBTDESK_CORS_ORIGINS into a list.

        Missing or empty means [] (deny all).
        """
        if self.DEBTDESK_CORS_ORIGINS:
            raw = self.DEBTDESK_CORS_ORIGINS.replace(",", " ")
            return [o.strip().rstrip("/") for o in raw.split() if o.strip().startswith("http")]
        return []


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()  # type: ignore[call-arg]


def reset_settings() -> None:
    """Clear the cached settings (for testing or environment switch)."""
    get_settings.cache_clear()


__all__ = [
    "Settings",
    "get_settings",
    "reset_settings",
]
