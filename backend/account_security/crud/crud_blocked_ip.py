# backend/account_security/crud/crud_blocked_ip.py
from datetime import datetime

from sqlalchemy import Select, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from account_security.crud.base import CRUDBase
from account_security.db.models.blocked_ip import BlockedIP


class CRUDBlockedIP(CRUDBase[BlockedIP]):
    def _in_force_at(self, stmt: Select, at: datetime) -> Select:
        return stmt.filter(
            self.model.unblocked.is_(False),
            or_(self.model.expires_at.is_(None), self.model.expires_at > at),
        )

    async def get_not_unblocked(self, db: AsyncSession, *, ip_address: str) -> list[BlockedIP]:
        """
        Rows for ``ip_address`` that were never lifted, newest first.

        Includes rows whose expiry has passed; whether they still bite is
        decided by the caller against the clock.
        """
        result = await db.execute(
            select(self.model)
            .filter(self.model.ip_address == ip_address, self.model.unblocked.is_(False))
            .order_by(desc(self.model.blocked_at), desc(self.model.id))
        )
        return list(result.scalars().all())

    async def list_blocks(
        self, db: AsyncSession, *, active_at: datetime | None = None, limit: int = 500
    ) -> list[BlockedIP]:
        """List blocks newest first; with ``active_at`` only those in force then."""
        stmt = select(self.model)
        if active_at is not None:
            stmt = self._in_force_at(stmt, active_at)
        stmt = stmt.order_by(desc(self.model.blocked_at), desc(self.model.id)).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, *, active_at: datetime | None = None) -> int:
        stmt = select(func.count()).select_from(self.model)
        if active_at is not None:
            stmt = self._in_force_at(stmt, active_at)
        result = await db.execute(stmt)
        return result.scalar_one()


blocked_ip = CRUDBlockedIP(BlockedIP)
