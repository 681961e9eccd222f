# backend/account_security/services/authentication.py
"""
Credential sign-in guarded by the IP block list and account locks.

Order of checks:
1. Client IP blocked -> IPBlockedError
2. Account locked (manual or automatic) -> AccountLockedError
3. Password wrong or account unknown -> InvalidCredentialsError
4. Otherwise the failure counter is reset and the user returned
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, system_clock
from account_security.core.security import burn_password_check, verify_password
from account_security.core.security_logger import security_log
from account_security.db.models.security_log import SecurityEventSeverity, SecurityEventType
from account_security.db.models.user import User
from account_security.exceptions import (
    AccountLockedError,
    InvalidCredentialsError,
    IPBlockedError,
)
from account_security.services.account_lockout import get_lock_status
from account_security.services.ip_guard import is_ip_blocked
from account_security.services.login_tracker import reset_failed_attempts, track_failed_login
from account_security.services.security_events import log_security_event

logger = logging.getLogger(__name__)

IP_BLOCKED_MESSAGE = "Too many failed login attempts from this address. Please try again later."


async def authenticate(
    db: AsyncSession,
    identifier: str,
    password: str,
    ip_address: str,
    user_agent: str | None = None,
    *,
    clock: Clock = system_clock,
) -> User:
    """
    Verify ``identifier``/``password`` coming from ``ip_address``.

    Returns the authenticated user or raises an AuthenticationError subclass.
    Unknown accounts and wrong passwords raise the same
    InvalidCredentialsError.
    """
    if await is_ip_blocked(db, ip_address, clock=clock):
        user = await crud.user.get_by_email(db, email=identifier)
        await log_security_event(
            db,
            SecurityEventType.FAILED_LOGIN,
            SecurityEventSeverity.HIGH,
            "Login attempt blocked - IP address is blocked",
            user_id=user.id if user else None,
            ip_address=ip_address,
            user_agent=user_agent,
            clock=clock,
        )
        security_log.failed_login(ip_address, identifier, "IP_BLOCKED")
        raise IPBlockedError(IP_BLOCKED_MESSAGE)

    user = await crud.user.get_by_email(db, email=identifier)

    if user is not None:
        lock = await get_lock_status(db, user.id, clock=clock)
        if lock.is_locked:
            await log_security_event(
                db,
                SecurityEventType.FAILED_LOGIN,
                SecurityEventSeverity.HIGH,
                "Login attempt blocked - account is locked",
                user_id=user.id,
                ip_address=ip_address,
                user_agent=user_agent,
                clock=clock,
            )
            security_log.failed_login(ip_address, identifier, "ACCOUNT_LOCKED")
            raise AccountLockedError(lock.message)

    if user is None:
        burn_password_check(password)
        valid = False
    else:
        valid = verify_password(password, user.hashed_password)

    if not valid:
        result = await track_failed_login(db, identifier, ip_address, user_agent, clock=clock)
        security_log.failed_login(ip_address, identifier, "BAD_CREDENTIALS")
        raise InvalidCredentialsError(result.attempts_remaining)

    await reset_failed_attempts(db, user.id, clock=clock)
    await crud.user.update(db, db_obj=user, obj_in={"last_active_at": clock.now()})
    await log_security_event(
        db,
        SecurityEventType.SUCCESSFUL_LOGIN,
        SecurityEventSeverity.LOW,
        "User logged in successfully",
        user_id=user.id,
        ip_address=ip_address,
        user_agent=user_agent,
        clock=clock,
    )
    security_log.successful_login(ip_address, user.id)
    logger.debug(f"User {user.id} authenticated.")
    return user
