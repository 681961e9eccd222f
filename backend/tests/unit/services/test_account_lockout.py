# backend/tests/unit/services/test_account_lockout.py
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select

from account_security.db.models.security_log import (
    SecurityEventSeverity,
    SecurityEventType,
    SecurityLog,
)
from account_security.exceptions import UserNotFoundError
from account_security.services.account_lockout import (
    get_lock_status,
    is_account_locked,
    lock_user_account,
    unlock_user_account,
)


async def _events(db, event_type):
    result = await db.execute(select(SecurityLog).filter(SecurityLog.event_type == event_type))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_unlocked_account(db_session, make_user, clock):
    user = await make_user()
    assert await is_account_locked(db_session, user.id, clock=clock) is False


@pytest.mark.asyncio
async def test_unknown_user_is_not_locked(db_session, clock):
    assert await is_account_locked(db_session, uuid.uuid4(), clock=clock) is False


@pytest.mark.asyncio
async def test_temporary_lock_active_then_cleared_lazily(db_session, make_user, clock):
    user = await make_user(account_locked_until=clock.now() + timedelta(minutes=15))

    status = await get_lock_status(db_session, user.id, clock=clock)
    assert status.is_locked is True
    assert status.is_manual is False
    assert status.locked_until == clock.now() + timedelta(minutes=15)
    assert "temporarily locked" in status.message

    clock.advance(minutes=15)
    assert await is_account_locked(db_session, user.id, clock=clock) is False

    await db_session.refresh(user)
    assert user.account_locked_until is None


@pytest.mark.asyncio
async def test_manual_lock_outlives_lockout_window(db_session, make_user, clock):
    user = await make_user()

    await lock_user_account(db_session, user.id, "chargeback", "admin1", clock=clock)
    clock.advance(days=30)

    status = await get_lock_status(db_session, user.id, clock=clock)
    assert status.is_locked is True
    assert status.is_manual is True
    assert status.reason == "chargeback"
    assert "contact support" in status.message


@pytest.mark.asyncio
async def test_lock_user_account_logs_event(db_session, make_user, clock):
    user = await make_user()

    await lock_user_account(db_session, user.id, "chargeback", "admin1", clock=clock)

    await db_session.refresh(user)
    assert user.account_locked is True
    assert user.account_locked_reason == "chargeback"

    events = await _events(db_session, SecurityEventType.ACCOUNT_LOCKED)
    assert len(events) == 1
    assert events[0].severity == SecurityEventSeverity.HIGH
    assert events[0].description == "Account manually locked by admin: chargeback"
    assert events[0].event_metadata == {"locked_by": "admin1", "reason": "chargeback"}


@pytest.mark.asyncio
async def test_unlock_user_account_clears_everything(db_session, make_user, clock):
    user = await make_user(
        account_locked=True,
        account_locked_reason="chargeback",
        account_locked_until=clock.now() + timedelta(minutes=10),
        failed_login_attempts=6,
    )

    await unlock_user_account(db_session, user.id, "admin2", clock=clock)

    await db_session.refresh(user)
    assert user.account_locked is False
    assert user.account_locked_reason is None
    assert user.account_locked_until is None
    assert user.failed_login_attempts == 0
    assert await is_account_locked(db_session, user.id, clock=clock) is False

    events = await _events(db_session, SecurityEventType.ACCOUNT_UNLOCKED)
    assert len(events) == 1
    assert events[0].severity == SecurityEventSeverity.MEDIUM
    assert events[0].event_metadata == {"unlocked_by": "admin2"}


@pytest.mark.asyncio
async def test_admin_operations_require_existing_user(db_session, clock):
    with pytest.raises(UserNotFoundError):
        await lock_user_account(db_session, uuid.uuid4(), "x", "admin1", clock=clock)
    with pytest.raises(UserNotFoundError):
        await unlock_user_account(db_session, uuid.uuid4(), "admin1", clock=clock)
