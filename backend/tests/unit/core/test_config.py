# backend/tests/unit/core/test_config.py
import logging

import pytest
from pydantic import ValidationError

from account_security.core.config import Settings, configure_logging


def test_defaults():
    s = Settings(_env_file=None)
    assert s.MAX_FAILED_ATTEMPTS == 5
    assert s.LOCKOUT_DURATION_MINUTES == 15
    assert s.IP_BLOCK_DURATION_MINUTES == 60
    assert s.PASSWORD_RESET_TOKEN_TTL_MINUTES == 60
    assert s.PASSWORD_RESET_TOKEN_BYTES == 32
    assert s.SECURITY_LOG_FILE is None


@pytest.mark.parametrize(
    "field",
    ["MAX_FAILED_ATTEMPTS", "LOCKOUT_DURATION_MINUTES", "PASSWORD_RESET_TOKEN_TTL_MINUTES"],
)
def test_thresholds_must_be_positive(field):
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field: 0})


def test_postgres_url_uses_asyncpg():
    s = Settings(_env_file=None, DATABASE_URL="postgresql://app:secret@db:5432/security")
    assert s.DATABASE_URL == "postgresql+asyncpg://app:secret@db:5432/security"


def test_sqlite_url_untouched():
    s = Settings(_env_file=None, DATABASE_URL="sqlite+aiosqlite:///./x.db")
    assert s.DATABASE_URL == "sqlite+aiosqlite:///./x.db"


def test_debug_forces_debug_logging_and_echo():
    s = Settings(_env_file=None, DEBUG=True, LOG_LEVEL="WARNING")
    assert s.LOG_LEVEL == "DEBUG"
    assert s.DB_ECHO is True


def test_environment_read_from_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "production")
    assert Settings(_env_file=None).ENVIRONMENT == "production"


def test_configure_logging_sets_root_level(monkeypatch):
    captured = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))

    configure_logging("warning")

    assert captured["level"] == "WARNING"
    assert "%(name)s" in captured["format"]
