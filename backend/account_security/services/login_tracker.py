# backend/account_security/services/login_tracker.py
"""
Failed login tracking.

Counts consecutive failures per account. Crossing MAX_FAILED_ATTEMPTS locks
the account for LOCKOUT_DURATION_MINUTES and blocks the source IP. A
successful login resets the counter.
"""

import logging
import uuid
from datetime import timedelta
from typing import NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, system_clock
from account_security.core.config import settings
from account_security.db.models.security_log import SecurityEventSeverity, SecurityEventType
from account_security.exceptions import UserNotFoundError
from account_security.services.ip_guard import block_ip
from account_security.services.security_events import log_security_event

logger = logging.getLogger(__name__)


class FailedLoginResult(NamedTuple):
    """Outcome of recording a failed login."""

    should_block: bool
    attempts_remaining: int


async def track_failed_login(
    db: AsyncSession,
    identifier: str,
    ip_address: str,
    user_agent: str | None = None,
    *,
    clock: Clock = system_clock,
) -> FailedLoginResult:
    """
    Record a failed login against ``identifier`` (an email).

    Unknown identifiers are only logged: they never lock anything or block
    the IP, and report the full attempt budget so the caller's response
    cannot tell them apart from a first failure on a real account.
    """
    max_attempts = settings.MAX_FAILED_ATTEMPTS
    user = await crud.user.get_by_email(db, email=identifier)

    if user is None:
        await log_security_event(
            db,
            SecurityEventType.FAILED_LOGIN,
            SecurityEventSeverity.LOW,
            f"Failed login attempt for non-existent user: {identifier}",
            ip_address=ip_address,
            user_agent=user_agent,
            clock=clock,
        )
        return FailedLoginResult(should_block=False, attempts_remaining=max_attempts)

    user_id = user.id
    new_attempts = await crud.user.increment_failed_attempts(db, user_id=user_id)
    if new_attempts is None:
        raise UserNotFoundError(user_id)

    should_block = new_attempts >= max_attempts

    await log_security_event(
        db,
        SecurityEventType.FAILED_LOGIN,
        SecurityEventSeverity.HIGH if should_block else SecurityEventSeverity.MEDIUM,
        f"Failed login attempt #{new_attempts} for {identifier}",
        user_id=user_id,
        ip_address=ip_address,
        user_agent=user_agent,
        clock=clock,
        commit=False,
    )

    if should_block:
        await block_ip(
            db,
            ip_address,
            f"Too many failed login attempts ({new_attempts})",
            new_attempts,
            clock=clock,
            commit=False,
        )

        lock_until = clock.now() + timedelta(minutes=settings.LOCKOUT_DURATION_MINUTES)
        await crud.user.update(db, db_obj=user, obj_in={"account_locked_until": lock_until})

        await log_security_event(
            db,
            SecurityEventType.ACCOUNT_LOCKED,
            SecurityEventSeverity.HIGH,
            f"Account locked due to {new_attempts} failed login attempts",
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            metadata={"lock_until": lock_until},
            clock=clock,
            commit=False,
        )
        logger.warning(
            f"ACCOUNT LOCKED: user {user_id} for {settings.LOCKOUT_DURATION_MINUTES}m "
            f"after {new_attempts} failures."
        )

    await db.commit()
    return FailedLoginResult(
        should_block=should_block,
        attempts_remaining=max(0, max_attempts - new_attempts),
    )


async def reset_failed_attempts(
    db: AsyncSession, user_id: uuid.UUID, *, clock: Clock = system_clock
) -> None:
    """
    Clear the failure counter and automatic lockout after a successful login.

    The manual lock is left alone; only an administrator lifts that.
    """
    login_count = await crud.user.record_successful_login(db, user_id=user_id)
    if login_count is None:
        raise UserNotFoundError(user_id)
    await db.commit()
