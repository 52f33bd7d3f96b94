"""Base repository shared by the per-table repositories."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from specforge.db.base import Base

RowT = TypeVar("RowT", bound=Base)


class BaseRepository(Generic[RowT]):
    """Async CRUD over one ORM row class.

    Subclasses set ``model_class`` and ``pk_field``. Writes only flush;
    committing is left to the caller so one request can group its writes.
    """

    model_class: type[RowT]
    pk_field: str

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, pk_value: str) -> RowT | None:
        stmt = select(self.model_class).where(getattr(self.model_class, self.pk_field) == pk_value)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> RowT:
        row = self.model_class(**kwargs)
        self.session.add(row)
        await self.session.flush()
        return row

    async def update(self, row: RowT, **kwargs: Any) -> RowT:
        for key, value in kwargs.items():
            setattr(row, key, value)
        await self.session.flush()
        return row

    async def newest_first(self, field: str, value: Any, limit: int | None = None) -> list[RowT]:
        """Rows where ``field == value``, most recently created first."""
        stmt = (
            select(self.model_class)
            .where(getattr(self.model_class, field) == value)
            .order_by(self.model_class.created_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
