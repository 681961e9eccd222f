# backend/account_security/core/security.py

import logging
import secrets

from fastapi_users.password import PasswordHelper

from account_security.core.config import settings

logger = logging.getLogger(__name__)

# --- Password Hashing ---
password_helper = PasswordHelper()

# Compared against when the account does not exist, so a miss costs the same
# as a wrong password.
_DUMMY_PASSWORD_HASH = password_helper.hash(secrets.token_urlsafe(16))


def get_password_hash(password: str) -> str:
    """Hashes a password using the configured password helper."""
    return password_helper.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verifies a plain password against a hashed password."""
    if not hashed_password:
        burn_password_check(plain_password)
        return False
    verified, _ = password_helper.verify_and_update(plain_password, hashed_password)
    return verified


def burn_password_check(plain_password: str) -> None:
    """Run a throwaway verification for an unknown account."""
    password_helper.verify_and_update(plain_password, _DUMMY_PASSWORD_HASH)


# --- Reset Tokens ---
def generate_reset_token() -> str:
    """Generate an unguessable, URL-safe password reset token."""
    return secrets.token_urlsafe(settings.PASSWORD_RESET_TOKEN_BYTES)
