# backend/account_security/services/password_reset.py
"""
Password reset token lifecycle: issue, verify, consume.

Tokens are single use and valid for PASSWORD_RESET_TOKEN_TTL_MINUTES.
Issuing a new token does not revoke older ones.
"""

import logging
import uuid
from datetime import timedelta

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, is_active, system_clock
from account_security.core.config import settings
from account_security.core.request_info import normalize_ip_address
from account_security.core.security import generate_reset_token
from account_security.core.security_logger import mask_email
from account_security.db.models.security_log import SecurityEventSeverity, SecurityEventType
from account_security.exceptions import InvalidEmailError, UserNotFoundError
from account_security.schemas.security import PasswordResetRequest
from account_security.services.security_events import log_security_event

logger = logging.getLogger(__name__)


async def create_password_reset_token(
    db: AsyncSession,
    user_id: uuid.UUID,
    ip_address: str,
    *,
    clock: Clock = system_clock,
) -> str:
    """Issue a reset token for ``user_id`` and record the request."""
    user = await crud.user.get(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)

    token = generate_reset_token()
    expires_at = clock.now() + timedelta(minutes=settings.PASSWORD_RESET_TOKEN_TTL_MINUTES)

    await crud.password_reset_log.create(
        db,
        obj_in={
            "user_id": user_id,
            "ip_address": normalize_ip_address(ip_address),
            "token": token,
            "expires_at": expires_at,
            "created_at": clock.now(),
        },
    )
    await crud.verification_token.create(
        db,
        obj_in={"identifier": str(user_id), "token": token, "expires": expires_at},
    )
    await log_security_event(
        db,
        SecurityEventType.PASSWORD_RESET_REQUEST,
        SecurityEventSeverity.MEDIUM,
        "Password reset requested",
        user_id=user_id,
        ip_address=ip_address,
        clock=clock,
        commit=False,
    )
    await db.commit()
    return token


async def verify_password_reset_token(
    db: AsyncSession, token: str, *, clock: Clock = system_clock
) -> uuid.UUID | None:
    """
    Resolve a reset token to its user without consuming it.

    Unknown, expired and already used tokens all yield None.
    """
    if not token:
        return None
    reset_log = await crud.password_reset_log.get_pending_by_token(db, token=token)
    if reset_log is None or not is_active(reset_log.expires_at, clock.now()):
        return None
    return reset_log.user_id


async def complete_password_reset(
    db: AsyncSession,
    token: str,
    new_password_hash: str,
    *,
    clock: Clock = system_clock,
) -> bool:
    """
    Consume ``token`` and install ``new_password_hash``.

    Returns False, writing nothing, for an invalid token. Completing a reset
    also clears the failure counter and any automatic lockout; a manual lock
    stays in place.
    """
    user_id = await verify_password_reset_token(db, token, clock=clock)
    if user_id is None:
        return False

    reset_log = await crud.password_reset_log.get_pending_by_token(db, token=token)
    if reset_log is None:
        return False

    now = clock.now()
    claimed = await crud.password_reset_log.mark_consumed(db, log_id=reset_log.id, completed_at=now)
    if not claimed:
        # Another request consumed the token between verify and claim.
        await db.rollback()
        return False

    user = await crud.user.get(db, user_id)
    if user is None:
        await db.rollback()
        return False

    await crud.user.update(
        db,
        db_obj=user,
        obj_in={
            "hashed_password": new_password_hash,
            "password_changed_at": now,
            "failed_login_attempts": 0,
            "account_locked_until": None,
        },
    )
    await crud.verification_token.remove_by_token(db, token=token)
    await log_security_event(
        db,
        SecurityEventType.PASSWORD_RESET_COMPLETE,
        SecurityEventSeverity.MEDIUM,
        "Password reset completed successfully",
        user_id=user_id,
        clock=clock,
        commit=False,
    )
    await db.commit()
    logger.info(f"Password reset completed for user {user_id}.")
    return True


async def request_password_reset(
    db: AsyncSession,
    email: str,
    ip_address: str,
    *,
    clock: Clock = system_clock,
) -> str | None:
    """
    Forgot-password entry point.

    Raises InvalidEmailError for a malformed address before any lookup.
    Returns a fresh token for a known account and None otherwise. Callers must
    answer both cases with the same response so account existence is not
    disclosed; delivering the token is theirs to do.
    """
    try:
        email = PasswordResetRequest(email=email.strip()).email
    except ValidationError as exc:
        raise InvalidEmailError(email) from exc

    user = await crud.user.get_by_email(db, email=email)
    if user is None:
        logger.info(f"Password reset requested for unknown address {mask_email(email)}.")
        return None
    return await create_password_reset_token(db, user.id, ip_address, clock=clock)
