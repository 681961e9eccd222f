# backend/account_security/core/clock.py
"""
Time source and temporal validity helper.

Every expiry in this package (IP blocks, automatic account locks, reset
tokens) is evaluated lazily against a Clock at read time. Services accept a
``clock`` keyword so tests can substitute a fixed or advancing clock.
"""

from datetime import UTC, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(UTC)


system_clock = SystemClock()


def is_active(expires_at: datetime | None, now: datetime) -> bool:
    """
    Return True while a validity window is still open.

    A missing end means there is no window to be inside of. The comparison is
    strict: at exactly ``expires_at`` the window is already closed.
    """
    if expires_at is None:
        return False
    return expires_at > now
