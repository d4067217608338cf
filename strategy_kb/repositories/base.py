"""Generic repository over one ORM table.

Repositories call add()/flush()/refresh() only, never commit().
The session owner handles commit/rollback (Unit-of-Work).

The repository speaks in SQLAlchemy predicates; translating public filters
into predicates is the connector's job.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

TRow = TypeVar("TRow", bound=DeclarativeBase)


class EntityRepository(Generic[TRow]):
    """CRUD, count and predicate search over a single table."""

    def __init__(self, session: AsyncSession, row_type: type[TRow]) -> None:
        self._session = session
        self._row_type = row_type
        self._pk = inspect(row_type).primary_key[0]

    @property
    def primary_key(self):
        return self._pk

    async def get(self, entity_id: UUID) -> TRow | None:
        return await self._session.get(self._row_type, entity_id)

    async def find(
        self,
        where: Sequence[ColumnElement[bool]] = (),
        *,
        order_by: Sequence[Any] = (),
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[TRow]:
        stmt = select(self._row_type).where(*where)
        if order_by:
            stmt = stmt.order_by(*order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, where: Sequence[ColumnElement[bool]] = ()) -> int:
        stmt = select(func.count()).select_from(self._row_type).where(*where)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    async def list_all(self) -> list[TRow]:
        return await self.find(order_by=(self._pk,))

    async def add(self, row: TRow) -> TRow:
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def apply(self, row: TRow, changes: Mapping[str, Any]) -> TRow:
        """Set only the given attributes, then flush."""
        for key, value in changes.items():
            setattr(row, key, value)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def delete(self, row: TRow) -> None:
        await self._session.delete(row)
        await self._session.flush()
