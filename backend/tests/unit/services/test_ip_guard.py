# backend/tests/unit/services/test_ip_guard.py
from datetime import timedelta

import pytest
from sqlalchemy import select

from account_security.db.models.blocked_ip import BlockedIP
from account_security.db.models.security_log import (
    SecurityEventSeverity,
    SecurityEventType,
    SecurityLog,
)
from account_security.services.ip_guard import (
    block_ip,
    is_ip_blocked,
    list_blocked_ips,
    unblock_ip,
)

IP = "203.0.113.10"


async def _events(db, event_type):
    result = await db.execute(select(SecurityLog).filter(SecurityLog.event_type == event_type))
    return list(result.scalars().all())


async def _rows(db, ip=IP):
    result = await db.execute(select(BlockedIP).filter(BlockedIP.ip_address == ip))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_unknown_ip_is_not_blocked(db_session, clock):
    assert await is_ip_blocked(db_session, IP, clock=clock) is False


@pytest.mark.asyncio
async def test_block_ip_creates_row_and_event(db_session, clock):
    block = await block_ip(db_session, IP, "manual review", 0, 30, "admin1", clock=clock)

    assert block.expires_at == clock.now() + timedelta(minutes=30)
    assert block.blocked_at == clock.now()
    assert block.blocked_by == "admin1"
    assert await is_ip_blocked(db_session, IP, clock=clock) is True

    events = await _events(db_session, SecurityEventType.IP_BLOCKED)
    assert len(events) == 1
    assert events[0].severity == SecurityEventSeverity.HIGH
    assert events[0].description == f"IP {IP} blocked: manual review"
    assert events[0].event_metadata == {"failed_attempts": 0, "duration_minutes": 30}


@pytest.mark.asyncio
async def test_block_expires_lazily(db_session, clock):
    await block_ip(db_session, IP, "burst", 5, 60, clock=clock)

    clock.advance(minutes=59)
    assert await is_ip_blocked(db_session, IP, clock=clock) is True

    clock.advance(minutes=1)
    assert await is_ip_blocked(db_session, IP, clock=clock) is False


@pytest.mark.asyncio
async def test_block_uses_default_duration(db_session, clock):
    block = await block_ip(db_session, IP, "burst", 5, clock=clock)
    assert (block.expires_at - block.blocked_at).total_seconds() == 60 * 60


@pytest.mark.asyncio
async def test_indefinite_block_never_expires(db_session, clock):
    block = await block_ip(db_session, IP, "abuse", 0, indefinite=True, clock=clock)
    assert block.expires_at is None

    clock.advance(days=365)
    assert await is_ip_blocked(db_session, IP, clock=clock) is True


@pytest.mark.asyncio
async def test_second_block_refreshes_existing_row(db_session, clock):
    first = await block_ip(db_session, IP, "first", 5, 60, clock=clock)
    clock.advance(minutes=10)
    second = await block_ip(db_session, IP, "second", 7, 60, clock=clock)

    rows = await _rows(db_session)
    assert len(rows) == 1
    assert second.id == first.id
    assert rows[0].reason == "second"
    assert rows[0].failed_attempts == 7
    assert rows[0].blocked_at == clock.now()
    assert len(await _events(db_session, SecurityEventType.IP_BLOCKED)) == 2


@pytest.mark.asyncio
async def test_unblock_active_block(db_session, clock):
    await block_ip(db_session, IP, "burst", 5, clock=clock)

    assert await unblock_ip(db_session, IP, "admin1", clock=clock) is True
    assert await is_ip_blocked(db_session, IP, clock=clock) is False

    row = (await _rows(db_session))[0]
    assert row.unblocked is True
    assert row.unblocked_by == "admin1"
    assert row.unblocked_at == clock.now()

    events = await _events(db_session, SecurityEventType.IP_UNBLOCKED)
    assert len(events) == 1
    assert events[0].severity == SecurityEventSeverity.MEDIUM
    assert events[0].description == f"IP {IP} unblocked by admin"


@pytest.mark.asyncio
async def test_unblock_without_active_block_is_noop(db_session, clock):
    assert await unblock_ip(db_session, IP, "admin1", clock=clock) is False
    assert await _events(db_session, SecurityEventType.IP_UNBLOCKED) == []


@pytest.mark.asyncio
async def test_unblock_expired_block_is_noop(db_session, clock):
    await block_ip(db_session, IP, "burst", 5, 10, clock=clock)
    clock.advance(minutes=11)

    assert await unblock_ip(db_session, IP, "admin1", clock=clock) is False
    assert await _events(db_session, SecurityEventType.IP_UNBLOCKED) == []


@pytest.mark.asyncio
async def test_block_after_unblock_creates_new_row(db_session, clock):
    await block_ip(db_session, IP, "first", 5, clock=clock)
    await unblock_ip(db_session, IP, "admin1", clock=clock)
    await block_ip(db_session, IP, "again", 5, clock=clock)

    rows = await _rows(db_session)
    assert len(rows) == 2
    assert sum(1 for r in rows if not r.unblocked) == 1


@pytest.mark.asyncio
async def test_list_blocked_ips(db_session, clock):
    await block_ip(db_session, "198.51.100.1", "old", 5, 10, clock=clock)
    clock.advance(minutes=5)
    await block_ip(db_session, IP, "new", 5, 60, clock=clock)
    clock.advance(minutes=6)

    active = await list_blocked_ips(db_session, clock=clock)
    assert [b.ip_address for b in active] == [IP]

    everything = await list_blocked_ips(db_session, active_only=False, clock=clock)
    assert [b.ip_address for b in everything] == [IP, "198.51.100.1"]


@pytest.mark.asyncio
async def test_oversized_ip_is_clipped_consistently(db_session, clock):
    spoofed = "203.0.113.10" + "x" * 60

    await block_ip(db_session, spoofed, "Too many failed login attempts (5)", 5, clock=clock)

    rows = await _rows(db_session, spoofed[:45])
    assert len(rows) == 1
    assert await is_ip_blocked(db_session, spoofed, clock=clock) is True
    event = (await _events(db_session, SecurityEventType.IP_BLOCKED))[0]
    assert event.ip_address == spoofed[:45]
