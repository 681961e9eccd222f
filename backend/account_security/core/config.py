# backend/account_security/core/config.py

import logging
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", case_sensitive=False
    )

    # --- Environment & Debug ---
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", validation_alias="APP_ENV"
    )
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG_MODE", "DEBUG"))
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
    )

    # --- Database Settings ---
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./account_security.db",
        description="Async SQLAlchemy URL of the record store.",
        validation_alias="DATABASE_URL",
    )
    DB_ECHO: bool = Field(default=False, validation_alias="DB_ECHO")

    # --- Brute Force Protection ---
    MAX_FAILED_ATTEMPTS: int = Field(
        default=5,
        description="Failed logins before the account is locked and the IP blocked",
        validation_alias="MAX_FAILED_ATTEMPTS",
    )
    LOCKOUT_DURATION_MINUTES: int = Field(
        default=15,
        description="Automatic account lock duration in minutes",
        validation_alias="LOCKOUT_DURATION_MINUTES",
    )
    IP_BLOCK_DURATION_MINUTES: int = Field(
        default=60,
        description="Default IP block duration in minutes",
        validation_alias="IP_BLOCK_DURATION_MINUTES",
    )

    # --- Password Reset ---
    PASSWORD_RESET_TOKEN_TTL_MINUTES: int = Field(
        default=60, validation_alias="PASSWORD_RESET_TOKEN_TTL_MINUTES"
    )
    PASSWORD_RESET_TOKEN_BYTES: int = Field(
        default=32,
        description="Random bytes behind each reset token (before url-safe encoding)",
        validation_alias="PASSWORD_RESET_TOKEN_BYTES",
    )

    # --- Security Log (fail2ban) ---
    SECURITY_LOG_FILE: Path | None = Field(default=None, validation_alias="SECURITY_LOG_FILE")
    SUPPORT_EMAIL: str = Field(default="security@example.com", validation_alias="SUPPORT_EMAIL")

    @field_validator(
        "MAX_FAILED_ATTEMPTS",
        "LOCKOUT_DURATION_MINUTES",
        "IP_BLOCK_DURATION_MINUTES",
        "PASSWORD_RESET_TOKEN_TTL_MINUTES",
        "PASSWORD_RESET_TOKEN_BYTES",
    )
    @classmethod
    def _must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("DATABASE_URL")
    @classmethod
    def _use_async_driver(cls, v: str) -> str:
        # asyncpg is the only Postgres driver the async engine can use
        for prefix in ("postgres://", "postgresql://"):
            if v.startswith(prefix):
                return "postgresql+asyncpg://" + v[len(prefix) :]
        return v

    @model_validator(mode="after")
    def _apply_debug_overrides(self) -> "Settings":
        if self.DEBUG:
            if self.LOG_LEVEL != "DEBUG":
                logger.info("DEBUG mode is ON. Overriding LOG_LEVEL to DEBUG.")
                self.LOG_LEVEL = "DEBUG"
            if not self.DB_ECHO:
                logger.info("DEBUG mode is ON. Overriding DB_ECHO to True.")
                self.DB_ECHO = True
        return self


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger for applications embedding this package."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


settings = Settings()
