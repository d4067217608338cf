"""Metadata Registry: registered data sources, schemas, lineage, statistics.

Independent of entity content and not in the CRUD hot path. Flushes but
never commits; the session owner handles commit/rollback.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.connectors.base import coerce_id
from strategy_kb.db.tables import DataSourceRow
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.metadata.catalog import lineage_for, predefined_schema
from strategy_kb.models.common import EntityKind, as_utc, utc_now
from strategy_kb.models.metadata import (
    DataLineage,
    DataSourceConfig,
    DataSourceConfigUpdate,
    DataSourceMetadata,
    DataSourceType,
    SchemaField,
    SourceStatistics,
    SyncRecency,
    SyncStatus,
)
from strategy_kb.repositories.data_sources import DataSourceRepository

logger = structlog.get_logger(__name__)

DATA_SOURCE = "DATA_SOURCE"


def to_metadata(row: DataSourceRow) -> DataSourceMetadata:
    """Public view of a source row; ``schema`` is its connection info."""
    return DataSourceMetadata(
        source_id=row.source_id,
        name=row.name,
        kind=row.kind,
        entity_kind=row.entity_kind,
        sync_frequency=row.sync_frequency,
        last_sync_at=row.last_sync_at,
        sync_status=row.sync_status,
        source_schema=dict(row.connection_info or {}),
    )


class MetadataService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._sources = DataSourceRepository(session)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register_data_source(
        self, config: DataSourceConfig | dict[str, Any],
    ) -> DataSourceMetadata:
        config = DataSourceConfig.model_validate(config)
        row = await self._sources.create(
            name=config.name,
            kind=config.kind.value,
            entity_kind=config.entity_kind.value if config.entity_kind else None,
            connection_info=config.connection_info,
            sync_frequency=config.sync_frequency,
            sync_status=SyncStatus.IDLE.value,
        )
        logger.info(
            "data_source_registered",
            source_id=str(row.source_id),
            name=row.name,
            kind=row.kind,
        )
        return to_metadata(row)

    async def get_data_sources(self) -> list[DataSourceMetadata]:
        """All sources ordered by name."""
        return [to_metadata(row) for row in await self._sources.list_all()]

    async def get_data_source(self, source_id: UUID | str) -> DataSourceMetadata | None:
        key = coerce_id(source_id)
        row = await self._sources.get(key) if key is not None else None
        return to_metadata(row) if row is not None else None

    async def update_data_source(
        self,
        source_id: UUID | str,
        config: DataSourceConfigUpdate | dict[str, Any],
    ) -> DataSourceMetadata:
        """Change only the supplied, non-empty settings.

        Raises
        ------
        EntityNotFoundError
            If the data source does not exist.
        """
        config = DataSourceConfigUpdate.model_validate(config)
        changes = {
            key: value
            for key, value in config.model_dump(mode="json", exclude_unset=True).items()
            if value is not None
        }
        row = await self._require(source_id)
        row = await self._sources.update(row.source_id, changes)
        logger.info(
            "data_source_updated",
            source_id=str(row.source_id),
            fields=sorted(changes),
        )
        return to_metadata(row)

    async def delete_data_source(self, source_id: UUID | str) -> None:
        """Delete a source and, by cascade, its quality snapshots.

        Raises
        ------
        EntityNotFoundError
            If the data source does not exist.
        """
        row = await self._require(source_id)
        await self._sources.delete(row.source_id)
        logger.info("data_source_deleted", source_id=str(source_id))

    async def update_sync_status(
        self,
        source_id: UUID | str,
        status: SyncStatus,
        synced_at: datetime | None = None,
    ) -> DataSourceMetadata:
        """Set the sync status; ``last_sync_at`` changes only when *synced_at* is given.

        Raises
        ------
        EntityNotFoundError
            If the data source does not exist.
        """
        row = await self._require(source_id)
        changes: dict[str, Any] = {"sync_status": SyncStatus(status).value}
        if synced_at is not None:
            changes["last_sync_at"] = synced_at
        row = await self._sources.update(row.source_id, changes)
        logger.info(
            "data_source_sync_status",
            source_id=str(row.source_id),
            status=row.sync_status,
        )
        return to_metadata(row)

    async def search_data_sources(self, query: str) -> list[DataSourceMetadata]:
        """Sources whose name contains *query*, case-insensitively."""
        return [to_metadata(row) for row in await self._sources.search_by_name(query)]

    # ------------------------------------------------------------------
    # Schemas and lineage
    # ------------------------------------------------------------------

    async def get_schema(self, source_id: UUID | str) -> dict[str, list[SchemaField]]:
        """Predefined schema for the source's kind.

        Raises
        ------
        EntityNotFoundError
            If the data source does not exist.
        """
        row = await self._require(source_id)
        return self.get_predefined_schema(DataSourceType(row.kind))

    @staticmethod
    def get_predefined_schema(kind: DataSourceType) -> dict[str, list[SchemaField]]:
        return predefined_schema(DataSourceType(kind))

    @staticmethod
    def get_data_lineage(entity_kind: EntityKind | str) -> list[DataLineage]:
        """Static lineage for an entity kind; empty when none is recorded."""
        try:
            kind = EntityKind(str(entity_kind).upper())
        except ValueError:
            return []
        return lineage_for(kind)

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    async def get_statistics(self, now: datetime | None = None) -> SourceStatistics:
        """Counts by kind and status, plus sync recency relative to *now*."""
        now = as_utc(now) if now is not None else utc_now()
        stats = SourceStatistics()
        recency = SyncRecency()

        rows = await self._sources.list_all()
        for row in rows:
            stats.by_kind[DataSourceType(row.kind)] += 1
            stats.by_status[SyncStatus(row.sync_status)] += 1
            if row.last_sync_at is None:
                recency.never_synced += 1
                continue
            age = now - as_utc(row.last_sync_at)
            if age < timedelta(days=1):
                recency.synced_24h += 1
            elif age < timedelta(days=7):
                recency.synced_7d += 1

        stats.total_sources = len(rows)
        stats.last_sync_overview = recency
        return stats

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require(self, source_id: UUID | str) -> DataSourceRow:
        key = coerce_id(source_id)
        row = await self._sources.get(key) if key is not None else None
        if row is None:
            raise EntityNotFoundError(DATA_SOURCE, source_id)
        return row
