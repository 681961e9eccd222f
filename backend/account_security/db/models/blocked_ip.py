# backend/account_security/db/models/blocked_ip.py
"""
Model for IP addresses barred from authenticating.
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from account_security.db.base_class import Base
from account_security.db.types import UTCDateTime


class BlockedIP(Base):
    """
    A block placed on a client IP address.

    Rows are never deleted: lifting a block flips ``unblocked`` and keeps the
    row for the audit history. Expiry is not swept; readers compare
    ``expires_at`` against the clock (None means the block is indefinite).
    """

    __tablename__ = "blocked_ips"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    ip_address: Mapped[str] = mapped_column(String(45), nullable=False, index=True)  # IPv6 max
    reason: Mapped[str] = mapped_column(String(255), nullable=False)

    # Snapshot of the failure count when the block was (re)applied
    failed_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    blocked_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=lambda: datetime.now(UTC)
    )
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    blocked_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    unblocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    unblocked_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    unblocked_by: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (Index("ix_blocked_ips_ip_unblocked", "ip_address", "unblocked"),)

    def __repr__(self) -> str:
        return (
            f"<BlockedIP(ip={self.ip_address}, expires_at={self.expires_at}, "
            f"unblocked={self.unblocked})>"
        )
