"""Operational activity repositories: competitor moves and template applications."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.db.tables import CompetitorMoveRow, ValueApplicationRow
from strategy_kb.models.common import new_uuid7, utc_now


class CompetitorMoveRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        competitor_id: UUID,
        type: str,
        description: str,
        date: datetime,
        impact: str,
        response: str | None = None,
    ) -> CompetitorMoveRow:
        row = CompetitorMoveRow(
            move_id=new_uuid7(),
            competitor_id=competitor_id,
            type=type,
            description=description,
            date=date,
            impact=impact,
            response=response,
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get_by_competitor(
        self, competitor_id: UUID, *, limit: int | None = None,
    ) -> list[CompetitorMoveRow]:
        """Moves for one competitor, most recent first."""
        stmt = (
            select(CompetitorMoveRow)
            .where(CompetitorMoveRow.competitor_id == competitor_id)
            .order_by(CompetitorMoveRow.date.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_since(self, since: datetime) -> list[CompetitorMoveRow]:
        """Moves across all competitors dated on or after *since*."""
        result = await self._session.execute(
            select(CompetitorMoveRow)
            .where(CompetitorMoveRow.date >= since)
            .order_by(CompetitorMoveRow.date.desc())
        )
        return list(result.scalars().all())


class ValueApplicationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        template_id: UUID,
        context: str,
        customization: str,
        results: str | None = None,
    ) -> ValueApplicationRow:
        row = ValueApplicationRow(
            application_id=new_uuid7(),
            template_id=template_id,
            context=context,
            customization=customization,
            results=results,
            applied_at=utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def get_by_template(self, template_id: UUID) -> list[ValueApplicationRow]:
        result = await self._session.execute(
            select(ValueApplicationRow)
            .where(ValueApplicationRow.template_id == template_id)
            .order_by(ValueApplicationRow.applied_at.desc())
        )
        return list(result.scalars().all())
