"""Data quality snapshot repository.

Snapshots are append-only: every quality check inserts a new row per
source and nothing here updates or deletes them.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.db.tables import DataQualitySnapshotRow
from strategy_kb.models.common import new_uuid7, utc_now


class QualitySnapshotRepository:
    """Repository for immutable per-source quality snapshots."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def save_snapshot(
        self,
        *,
        source_id: UUID,
        completeness: float,
        accuracy: float,
        consistency: float,
        timeliness: float,
        overall_score: float,
        issues: list[str],
        checked_at: datetime | None = None,
    ) -> DataQualitySnapshotRow:
        row = DataQualitySnapshotRow(
            snapshot_id=new_uuid7(),
            source_id=source_id,
            completeness=completeness,
            accuracy=accuracy,
            consistency=consistency,
            timeliness=timeliness,
            overall_score=overall_score,
            issues=list(issues),
            checked_at=checked_at or utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get_latest(
        self, source_id: UUID, *, limit: int = 1,
    ) -> list[DataQualitySnapshotRow]:
        """The *limit* most recent snapshots for a source, newest first."""
        result = await self._session.execute(
            select(DataQualitySnapshotRow)
            .where(DataQualitySnapshotRow.source_id == source_id)
            .order_by(
                DataQualitySnapshotRow.checked_at.desc(),
                DataQualitySnapshotRow.snapshot_id.desc(),
            )
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_since(
        self, source_id: UUID, since: datetime,
    ) -> list[DataQualitySnapshotRow]:
        """Snapshots checked on or after *since*, oldest first."""
        result = await self._session.execute(
            select(DataQualitySnapshotRow)
            .where(
                DataQualitySnapshotRow.source_id == source_id,
                DataQualitySnapshotRow.checked_at >= since,
            )
            .order_by(
                DataQualitySnapshotRow.checked_at.asc(),
                DataQualitySnapshotRow.snapshot_id.asc(),
            )
        )
        return list(result.scalars().all())
