# backend/account_security/db/models/password_reset.py
"""
Models backing the password reset flow.
"""

import uuid
from datetime import UTC, datetime

from fastapi_users_db_sqlalchemy.generics import GUID
from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from account_security.db.base_class import Base
from account_security.db.types import UTCDateTime


class PasswordResetLog(Base):
    """
    One issued reset token and its outcome.

    ``successful`` is None while the token is pending, True once consumed.
    False is reserved for explicitly recorded failures.
    """

    __tablename__ = "password_reset_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    ip_address: Mapped[str] = mapped_column(String(45), nullable=False)
    token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    successful: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, default=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<PasswordResetLog(user_id={self.user_id}, successful={self.successful})>"


class VerificationToken(Base):
    """
    Generic single-use token shared with other verification flows.

    Reset tokens are mirrored here and deleted once consumed.
    """

    __tablename__ = "verification_tokens"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identifier: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    expires: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    def __repr__(self) -> str:
        return f"<VerificationToken(identifier={self.identifier}, expires={self.expires})>"
