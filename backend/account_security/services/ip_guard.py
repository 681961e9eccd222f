# backend/account_security/services/ip_guard.py
"""
IP blocking for brute force protection.

A block is active while ``unblocked`` is False and its expiry (if any) is
still ahead of the clock. Expiry is evaluated on read; there is no sweeper.
"""

import logging
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from account_security import crud
from account_security.core.clock import Clock, is_active, system_clock
from account_security.core.config import settings
from account_security.core.request_info import normalize_ip_address
from account_security.db.models.blocked_ip import BlockedIP
from account_security.db.models.security_log import SecurityEventSeverity, SecurityEventType
from account_security.schemas.security import BlockedIPRead
from account_security.services.security_events import log_security_event

logger = logging.getLogger(__name__)


def block_in_force(block: BlockedIP, clock: Clock = system_clock) -> bool:
    if block.unblocked:
        return False
    return block.expires_at is None or is_active(block.expires_at, clock.now())


async def _get_active_block(
    db: AsyncSession, ip_address: str, clock: Clock
) -> BlockedIP | None:
    ip_address = normalize_ip_address(ip_address)
    for block in await crud.blocked_ip.get_not_unblocked(db, ip_address=ip_address):
        if block_in_force(block, clock):
            return block
    return None


async def is_ip_blocked(db: AsyncSession, ip_address: str, *, clock: Clock = system_clock) -> bool:
    """Check whether ``ip_address`` is currently blocked. Read-only."""
    return await _get_active_block(db, ip_address, clock) is not None


async def block_ip(
    db: AsyncSession,
    ip_address: str,
    reason: str,
    failed_attempts: int,
    duration_minutes: int | None = None,
    blocked_by: str | None = None,
    *,
    indefinite: bool = False,
    clock: Clock = system_clock,
    commit: bool = True,
) -> BlockedIP:
    """
    Block an IP address, or refresh the block it already has.

    An existing row that was never lifted is updated in place (new reason,
    attempt snapshot, ``blocked_at`` and expiry), so an IP never accumulates
    parallel blocks. Without ``duration_minutes`` the block lasts
    IP_BLOCK_DURATION_MINUTES; ``indefinite=True`` sets no expiry at all.
    """
    ip_address = normalize_ip_address(ip_address)
    if indefinite:
        duration_minutes = None
    elif duration_minutes is None:
        duration_minutes = settings.IP_BLOCK_DURATION_MINUTES

    now = clock.now()
    expires_at = None if duration_minutes is None else now + timedelta(minutes=duration_minutes)

    existing = await crud.blocked_ip.get_not_unblocked(db, ip_address=ip_address)
    if existing:
        block = await crud.blocked_ip.update(
            db,
            db_obj=existing[0],
            obj_in={
                "failed_attempts": failed_attempts,
                "expires_at": expires_at,
                "reason": reason,
                "blocked_at": now,
            },
        )
        logger.info(f"Refreshed block on IP {ip_address} until {expires_at or 'further notice'}.")
    else:
        block = await crud.blocked_ip.create(
            db,
            obj_in={
                "ip_address": ip_address,
                "reason": reason,
                "failed_attempts": failed_attempts,
                "blocked_at": now,
                "expires_at": expires_at,
                "blocked_by": blocked_by,
            },
        )
        logger.warning(f"Blocked IP {ip_address} until {expires_at or 'further notice'}.")

    await log_security_event(
        db,
        SecurityEventType.IP_BLOCKED,
        SecurityEventSeverity.HIGH,
        f"IP {ip_address} blocked: {reason}",
        ip_address=ip_address,
        metadata={"failed_attempts": failed_attempts, "duration_minutes": duration_minutes},
        clock=clock,
        commit=False,
    )
    if commit:
        await db.commit()
    return block


async def unblock_ip(
    db: AsyncSession, ip_address: str, unblocked_by: str, *, clock: Clock = system_clock
) -> bool:
    """
    Lift the active block on ``ip_address``.

    Returns False, writing nothing, when there is no block in force.
    """
    block = await _get_active_block(db, ip_address, clock)
    if block is None:
        return False

    await crud.blocked_ip.update(
        db,
        db_obj=block,
        obj_in={"unblocked": True, "unblocked_at": clock.now(), "unblocked_by": unblocked_by},
    )
    await log_security_event(
        db,
        SecurityEventType.IP_UNBLOCKED,
        SecurityEventSeverity.MEDIUM,
        f"IP {ip_address} unblocked by admin",
        ip_address=ip_address,
        metadata={"unblocked_by": unblocked_by},
        clock=clock,
        commit=False,
    )
    await db.commit()
    logger.info(f"IP {ip_address} unblocked by {unblocked_by}.")
    return True


async def list_blocked_ips(
    db: AsyncSession, *, active_only: bool = True, clock: Clock = system_clock
) -> list[BlockedIPRead]:
    """Blocks for the admin overview, newest first."""
    rows = await crud.blocked_ip.list_blocks(db, active_at=clock.now() if active_only else None)
    return [BlockedIPRead.model_validate(row) for row in rows]
