# backend/account_security/services/account_lockout.py
"""
Account lock management.

Two independent lock axes on the User model:
- Manual lock (account_locked): set and lifted only by an administrator
- Automatic lockout (account_locked_until): set by the login tracker and
  cleared lazily the first time it is read after expiry
"""

import logging
import uuid
from datetime import datetime
from typing import NamedTuple

from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, is_active, system_clock
from account_security.core.config import settings
from account_security.db.models.security_log import SecurityEventSeverity, SecurityEventType
from account_security.db.models.user import User
from account_security.exceptions import UserNotFoundError
from account_security.services.security_events import log_security_event

logger = logging.getLogger(__name__)


class LockStatus(NamedTuple):
    """Result of a lock check."""

    is_locked: bool
    is_manual: bool = False
    locked_until: datetime | None = None
    reason: str | None = None
    message: str | None = None


UNLOCKED = LockStatus(is_locked=False)


def locked_message(status: LockStatus) -> str:
    """User-facing explanation for a locked account."""
    if status.is_manual:
        return f"Account is locked. Please contact support at {settings.SUPPORT_EMAIL}."
    until = status.locked_until.strftime("%Y-%m-%d %H:%M UTC") if status.locked_until else "later"
    return (
        f"Account is temporarily locked after too many failed login attempts. "
        f"Try again after {until} or contact support at {settings.SUPPORT_EMAIL}."
    )


async def _evaluate(db: AsyncSession, user: User, clock: Clock) -> LockStatus:
    if user.account_locked:
        status = LockStatus(
            is_locked=True,
            is_manual=True,
            locked_until=user.account_locked_until,
            reason=user.account_locked_reason,
        )
        return status._replace(message=locked_message(status))

    if user.account_locked_until is None:
        return UNLOCKED

    if is_active(user.account_locked_until, clock.now()):
        status = LockStatus(is_locked=True, locked_until=user.account_locked_until)
        return status._replace(message=locked_message(status))

    # Expired automatic lockout: clear it on read.
    logger.info(f"Automatic lockout for user {user.id} expired; clearing.")
    await crud.user.update(db, db_obj=user, obj_in={"account_locked_until": None})
    await db.commit()
    return UNLOCKED


async def get_lock_status(
    db: AsyncSession, user_id: uuid.UUID, *, clock: Clock = system_clock
) -> LockStatus:
    """
    Check both lock axes for ``user_id``.

    An unknown user is reported as not locked. Writes only when clearing an
    expired automatic lockout.
    """
    user = await crud.user.get(db, user_id)
    if user is None:
        return UNLOCKED
    return await _evaluate(db, user, clock)


async def is_account_locked(
    db: AsyncSession, user_id: uuid.UUID, *, clock: Clock = system_clock
) -> bool:
    return (await get_lock_status(db, user_id, clock=clock)).is_locked


async def lock_user_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    reason: str,
    locked_by: str,
    *,
    clock: Clock = system_clock,
) -> None:
    """Manually lock an account until an administrator unlocks it."""
    user = await crud.user.get(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)

    await crud.user.update(
        db, db_obj=user, obj_in={"account_locked": True, "account_locked_reason": reason}
    )
    await log_security_event(
        db,
        SecurityEventType.ACCOUNT_LOCKED,
        SecurityEventSeverity.HIGH,
        f"Account manually locked by admin: {reason}",
        user_id=user_id,
        metadata={"locked_by": locked_by, "reason": reason},
        clock=clock,
        commit=False,
    )
    await db.commit()
    logger.warning(f"User {user_id} manually locked by {locked_by}.")


async def unlock_user_account(
    db: AsyncSession,
    user_id: uuid.UUID,
    unlocked_by: str,
    *,
    clock: Clock = system_clock,
) -> None:
    """Lift both lock axes and restart the failure count from zero."""
    user = await crud.user.get(db, user_id)
    if user is None:
        raise UserNotFoundError(user_id)

    await crud.user.update(
        db,
        db_obj=user,
        obj_in={
            "account_locked": False,
            "account_locked_reason": None,
            "account_locked_until": None,
            "failed_login_attempts": 0,
        },
    )
    await log_security_event(
        db,
        SecurityEventType.ACCOUNT_UNLOCKED,
        SecurityEventSeverity.MEDIUM,
        "Account unlocked by admin",
        user_id=user_id,
        metadata={"unlocked_by": unlocked_by},
        clock=clock,
        commit=False,
    )
    await db.commit()
    logger.info(f"User {user_id} unlocked by {unlocked_by}.")
