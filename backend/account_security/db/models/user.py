# backend/account_security/db/models/user.py

from datetime import datetime

from fastapi_users_db_sqlalchemy import SQLAlchemyBaseUserTableUUID
from sqlalchemy import Boolean, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from account_security.db.base_class import Base
from account_security.db.types import UTCDateTime


class User(SQLAlchemyBaseUserTableUUID, Base):
    """
    Account record, reduced to the fields the security core reads and writes.

    Two independent lock axes live here: ``account_locked`` is the manual,
    administrator-imposed lock; ``account_locked_until`` is the automatic
    lockout that expires on its own.
    """

    __tablename__ = "users"
    __mapper_args__ = {"eager_defaults": True}

    failed_login_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )
    account_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    account_locked_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    account_locked_until: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    login_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")

    password_changed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    last_active_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return (
            f"<User(id={self.id!r}, email={self.email!r}, "
            f"failed_login_attempts={self.failed_login_attempts!r}, "
            f"account_locked={self.account_locked!r})>"
        )
