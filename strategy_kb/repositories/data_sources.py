"""Data source registry repository."""

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.db.tables import DataSourceRow
from strategy_kb.models.common import new_uuid7, utc_now


class DataSourceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        kind: str,
        entity_kind: str | None = None,
        connection_info: dict[str, Any] | None = None,
        sync_frequency: str | None = None,
        sync_status: str = "IDLE",
    ) -> DataSourceRow:
        now = utc_now()
        row = DataSourceRow(
            source_id=new_uuid7(),
            name=name,
            kind=kind,
            entity_kind=entity_kind,
            connection_info=connection_info or {},
            sync_frequency=sync_frequency,
            sync_status=sync_status,
            last_sync_at=None,
            created_at=now,
            updated_at=now,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get(self, source_id: UUID) -> DataSourceRow | None:
        return await self._session.get(DataSourceRow, source_id)

    async def list_all(self) -> list[DataSourceRow]:
        """All sources ordered by name."""
        result = await self._session.execute(
            select(DataSourceRow).order_by(DataSourceRow.name.asc())
        )
        return list(result.scalars().all())

    async def search_by_name(self, query: str) -> list[DataSourceRow]:
        result = await self._session.execute(
            select(DataSourceRow)
            .where(DataSourceRow.name.icontains(query, autoescape=True))
            .order_by(DataSourceRow.name.asc())
        )
        return list(result.scalars().all())

    async def update(
        self, source_id: UUID, changes: Mapping[str, Any],
    ) -> DataSourceRow | None:
        row = await self.get(source_id)
        if row is None:
            return None
        for key, value in changes.items():
            setattr(row, key, value)
        row.updated_at = utc_now()
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def delete(self, source_id: UUID) -> bool:
        """Delete a source. Returns True if a row was removed."""
        row = await self.get(source_id)
        if row is None:
            return False
        await self._session.delete(row)
        await self._session.flush()
        return True
