# backend/account_security/crud/crud_password_reset.py
from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from account_security.crud.base import CRUDBase
from account_security.db.models.password_reset import PasswordResetLog, VerificationToken


class CRUDPasswordResetLog(CRUDBase[PasswordResetLog]):
    async def get_pending_by_token(self, db: AsyncSession, *, token: str) -> PasswordResetLog | None:
        """The reset log for ``token`` if it has not been consumed yet."""
        result = await db.execute(
            select(self.model).filter(self.model.token == token, self.model.successful.is_(None))
        )
        return result.scalars().first()

    async def mark_consumed(self, db: AsyncSession, *, log_id: int, completed_at: datetime) -> bool:
        """
        Flip a pending log to consumed.

        Conditional on ``successful IS NULL``, so of two concurrent consumers
        only one sees a row updated. Returns whether this caller won.
        """
        result = await db.execute(
            update(self.model)
            .where(self.model.id == log_id, self.model.successful.is_(None))
            .values(successful=True, completed_at=completed_at)
            .execution_options(synchronize_session="evaluate")
        )
        return result.rowcount == 1


class CRUDVerificationToken(CRUDBase[VerificationToken]):
    async def remove_by_token(self, db: AsyncSession, *, token: str) -> int:
        result = await db.execute(
            delete(self.model).where(self.model.token == token)
        )
        return result.rowcount or 0


password_reset_log = CRUDPasswordResetLog(PasswordResetLog)
verification_token = CRUDVerificationToken(VerificationToken)
