# backend/account_security/services/security_stats.py
"""
Read-only aggregates for the admin security overview.
"""

import uuid
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, system_clock
from account_security.db.models.security_log import SecurityEventType
from account_security.schemas.security import SecurityLogRead, SecurityStats

HIGH_ACTIVITY_THRESHOLD = 20
NORMAL_ACTIVITY_THRESHOLD = 10


def activity_level(recent_failed_logins: int) -> str:
    if recent_failed_logins > HIGH_ACTIVITY_THRESHOLD:
        return "high"
    if recent_failed_logins > NORMAL_ACTIVITY_THRESHOLD:
        return "normal"
    return "low"


async def get_security_stats(db: AsyncSession, *, clock: Clock = system_clock) -> SecurityStats:
    """
    Summarise blocks, lockouts and recent events.

    Failed logins cover the last 24 hours, password reset requests the last
    7 days.
    """
    now = clock.now()
    recent_failed = await crud.security_log.count(
        db, event_type=SecurityEventType.FAILED_LOGIN, since=now - timedelta(hours=24)
    )

    return SecurityStats(
        total_blocked_ips=await crud.blocked_ip.count(db),
        active_blocked_ips=await crud.blocked_ip.count(db, active_at=now),
        total_security_events=await crud.security_log.count(db),
        recent_failed_logins=recent_failed,
        locked_accounts=await crud.user.count_locked(db, at=now),
        recent_password_resets=await crud.security_log.count(
            db,
            event_type=SecurityEventType.PASSWORD_RESET_REQUEST,
            since=now - timedelta(days=7),
        ),
        activity_level=activity_level(recent_failed),
    )


async def list_security_logs(
    db: AsyncSession,
    *,
    limit: int = 50,
    event_type: SecurityEventType | None = None,
    user_id: uuid.UUID | None = None,
) -> list[SecurityLogRead]:
    """Most recent security events first, optionally filtered."""
    rows = await crud.security_log.list_recent(
        db, limit=limit, event_type=event_type, user_id=user_id
    )
    return [SecurityLogRead.model_validate(row) for row in rows]
