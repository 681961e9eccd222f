# backend/account_security/crud/crud_security_log.py
import uuid
from datetime import datetime

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from account_security.crud.base import CRUDBase
from account_security.db.models.security_log import SecurityEventType, SecurityLog


class CRUDSecurityLog(CRUDBase[SecurityLog]):
    async def list_recent(
        self,
        db: AsyncSession,
        *,
        limit: int = 50,
        event_type: SecurityEventType | None = None,
        user_id: uuid.UUID | None = None,
    ) -> list[SecurityLog]:
        stmt = select(self.model)
        if event_type is not None:
            stmt = stmt.filter(self.model.event_type == event_type)
        if user_id is not None:
            stmt = stmt.filter(self.model.user_id == user_id)
        stmt = stmt.order_by(desc(self.model.timestamp), desc(self.model.id)).limit(limit)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def count(
        self,
        db: AsyncSession,
        *,
        event_type: SecurityEventType | None = None,
        since: datetime | None = None,
    ) -> int:
        stmt = select(func.count()).select_from(self.model)
        if event_type is not None:
            stmt = stmt.filter(self.model.event_type == event_type)
        if since is not None:
            stmt = stmt.filter(self.model.timestamp >= since)
        result = await db.execute(stmt)
        return result.scalar_one()


security_log = CRUDSecurityLog(SecurityLog)
