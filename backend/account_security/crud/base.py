# backend/account_security/crud/base.py
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from account_security.db.base_class import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    def __init__(self, model: type[ModelType]):
        """
        Record store access for one model: get, insert and update.

        Writes are flushed, never committed. The calling service owns the unit
        of work and commits once the whole operation has succeeded.

        **Parameters**

        * `model`: A SQLAlchemy model class
        """
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> ModelType | None:
        """
        Get a single record by ID.
        """
        result = await db.execute(select(self.model).filter(self.model.id == id))
        return result.scalars().first()

    async def create(self, db: AsyncSession, *, obj_in: dict[str, Any]) -> ModelType:
        """
        Insert a new record.
        """
        db_obj = self.model(**obj_in)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: dict[str, Any],
    ) -> ModelType:
        """
        Update an existing record in place.
        """
        for field, value in obj_in.items():
            if not hasattr(db_obj, field):
                raise AttributeError(f"{self.model.__name__} has no field {field!r}")
            setattr(db_obj, field, value)
        db.add(db_obj)
        await db.flush()
        return db_obj

