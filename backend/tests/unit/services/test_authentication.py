# backend/tests/unit/services/test_authentication.py
from datetime import timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import select

from account_security.db.models.security_log import (
    SecurityEventSeverity,
    SecurityEventType,
    SecurityLog,
)
from account_security.exceptions import (
    AccountLockedError,
    AuthenticationError,
    InvalidCredentialsError,
    IPBlockedError,
)
from account_security.services import authentication
from account_security.services.authentication import authenticate
from account_security.services.ip_guard import block_ip
from tests.factories.user_factory import DEFAULT_PASSWORD

IP = "203.0.113.200"


async def _events(db, event_type):
    result = await db.execute(
        select(SecurityLog).filter(SecurityLog.event_type == event_type).order_by(SecurityLog.id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_successful_login(db_session, make_user, clock):
    user = await make_user(email="gina@example.com", failed_login_attempts=3)

    with patch.object(authentication.security_log, "successful_login") as mock_success:
        result = await authenticate(
            db_session, "gina@example.com", DEFAULT_PASSWORD, IP, "Firefox", clock=clock
        )

    assert result.id == user.id
    await db_session.refresh(user)
    assert user.failed_login_attempts == 0
    assert user.login_count == 1
    assert user.last_active_at == clock.now()
    mock_success.assert_called_once_with(IP, user.id)

    events = await _events(db_session, SecurityEventType.SUCCESSFUL_LOGIN)
    assert len(events) == 1
    assert events[0].severity == SecurityEventSeverity.LOW
    assert events[0].user_agent == "Firefox"


@pytest.mark.asyncio
async def test_wrong_password(db_session, make_user, clock):
    user = await make_user(email="hank@example.com")

    with pytest.raises(InvalidCredentialsError) as exc_info:
        await authenticate(db_session, "hank@example.com", "wrong", IP, clock=clock)

    assert exc_info.value.attempts_remaining == 4
    await db_session.refresh(user)
    assert user.failed_login_attempts == 1


@pytest.mark.asyncio
async def test_unknown_account_gets_same_error(db_session, make_user, clock):
    await make_user(email="ivy@example.com")

    with pytest.raises(InvalidCredentialsError) as unknown:
        await authenticate(db_session, "nobody@example.com", "wrong", IP, clock=clock)
    with pytest.raises(InvalidCredentialsError) as known:
        await authenticate(db_session, "ivy@example.com", "wrong", IP, clock=clock)

    assert str(unknown.value) == str(known.value) == "Invalid email or password."


@pytest.mark.asyncio
async def test_blocked_ip_rejected_before_credentials(db_session, make_user, clock):
    user = await make_user(email="jack@example.com")
    await block_ip(db_session, IP, "manual", 0, clock=clock)

    with pytest.raises(IPBlockedError):
        await authenticate(db_session, "jack@example.com", DEFAULT_PASSWORD, IP, clock=clock)

    await db_session.refresh(user)
    assert user.login_count == 0
    events = await _events(db_session, SecurityEventType.FAILED_LOGIN)
    assert len(events) == 1
    assert events[0].severity == SecurityEventSeverity.HIGH
    assert events[0].description == "Login attempt blocked - IP address is blocked"


@pytest.mark.asyncio
async def test_locked_account_rejected_even_with_right_password(db_session, make_user, clock):
    await make_user(
        email="kim@example.com", account_locked_until=clock.now() + timedelta(minutes=5)
    )

    with pytest.raises(AccountLockedError) as exc_info:
        await authenticate(db_session, "kim@example.com", DEFAULT_PASSWORD, IP, clock=clock)

    assert "security@example.com" in str(exc_info.value)
    events = await _events(db_session, SecurityEventType.FAILED_LOGIN)
    assert events[-1].description == "Login attempt blocked - account is locked"
    assert events[-1].severity == SecurityEventSeverity.HIGH


@pytest.mark.asyncio
async def test_login_allowed_after_lockout_expires(db_session, make_user, clock):
    user = await make_user(
        email="lee@example.com", account_locked_until=clock.now() + timedelta(minutes=5)
    )
    clock.advance(minutes=5)

    result = await authenticate(db_session, "lee@example.com", DEFAULT_PASSWORD, IP, clock=clock)
    assert result.id == user.id


@pytest.mark.asyncio
async def test_all_rejections_share_base_class(db_session, clock):
    with pytest.raises(AuthenticationError):
        await authenticate(db_session, "nobody@example.com", "pw", IP, clock=clock)
