# backend/account_security/crud/crud_user.py
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from account_security.crud.base import CRUDBase
from account_security.db.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


class CRUDUser(CRUDBase[User]):
    async def get_by_email(self, db: AsyncSession, *, email: str) -> User | None:
        """
        Get a user by email, ignoring case and surrounding whitespace.
        """
        result = await db.execute(
            select(self.model).filter(func.lower(self.model.email) == normalize_email(email))
        )
        user = result.scalars().first()
        if user is None:
            logger.debug("No user found for login identifier.")
        return user

    async def increment_failed_attempts(self, db: AsyncSession, *, user_id: Any) -> int | None:
        """
        Atomically add one failed attempt and return the new count.

        A single UPDATE ... RETURNING, so concurrent failures against the same
        account are never lost to a read-modify-write race. Returns None if
        the user vanished.
        """
        stmt = (
            update(self.model)
            .where(self.model.id == user_id)
            .values(failed_login_attempts=self.model.failed_login_attempts + 1)
            .returning(self.model.failed_login_attempts)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def record_successful_login(self, db: AsyncSession, *, user_id: Any) -> int | None:
        """
        Clear the failure counter and automatic lockout, and bump login_count.

        Same single-statement shape as increment_failed_attempts. Returns the
        new login count, or None if the user vanished.
        """
        stmt = (
            update(self.model)
            .where(self.model.id == user_id)
            .values(
                failed_login_attempts=0,
                account_locked_until=None,
                login_count=self.model.login_count + 1,
            )
            .returning(self.model.login_count)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def count_locked(self, db: AsyncSession, *, at: datetime) -> int:
        """Accounts under a manual lock or an automatic lockout still running at ``at``."""
        result = await db.execute(
            select(func.count())
            .select_from(self.model)
            .filter(
                or_(self.model.account_locked.is_(True), self.model.account_locked_until > at)
            )
        )
        return result.scalar_one()


user = CRUDUser(User)
