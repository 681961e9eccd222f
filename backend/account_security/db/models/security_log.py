# backend/account_security/db/models/security_log.py
"""
Append-only audit trail of security events.
"""

import enum
import uuid
from datetime import UTC, datetime
from typing import Any

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Enum as SQLAlchemyEnum
from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from account_security.db.base_class import Base
from account_security.db.types import JSONType, UTCDateTime


class SecurityEventType(str, enum.Enum):
    IP_BLOCKED = "IP_BLOCKED"
    IP_UNBLOCKED = "IP_UNBLOCKED"
    FAILED_LOGIN = "FAILED_LOGIN"
    ACCOUNT_LOCKED = "ACCOUNT_LOCKED"
    ACCOUNT_UNLOCKED = "ACCOUNT_UNLOCKED"
    SUCCESSFUL_LOGIN = "SUCCESSFUL_LOGIN"
    PASSWORD_RESET_REQUEST = "PASSWORD_RESET_REQUEST"
    PASSWORD_RESET_COMPLETE = "PASSWORD_RESET_COMPLETE"
    SUSPICIOUS_ACTIVITY = "SUSPICIOUS_ACTIVITY"


class SecurityEventSeverity(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class SecurityLog(Base):
    """
    One security-relevant action. Rows are inserted, never updated or deleted.
    """

    __tablename__ = "security_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[uuid.UUID | None] = mapped_column(
        GUID,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    event_type: Mapped[SecurityEventType] = mapped_column(
        SQLAlchemyEnum(
            SecurityEventType,
            name="security_event_type_enum",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
        index=True,
    )
    severity: Mapped[SecurityEventSeverity] = mapped_column(
        SQLAlchemyEnum(
            SecurityEventSeverity,
            name="security_event_severity_enum",
            values_callable=lambda obj: [e.value for e in obj],
        ),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)

    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True, index=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)

    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSONType, nullable=False, default=dict
    )

    timestamp: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )

    __table_args__ = (Index("ix_security_logs_type_ts", "event_type", "timestamp"),)

    def __repr__(self) -> str:
        return f"<SecurityLog({self.event_type}, {self.severity}, user_id={self.user_id})>"
