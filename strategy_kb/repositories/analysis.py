"""Analysis history repositories (append-only).

Every analysis run inserts new rows; nothing here updates or deletes
history. Listing is newest first (priority order for need insights).
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.db.tables import CompetitorAnalysisRow, MegatrendAnalysisRow, NeedInsightRow
from strategy_kb.models.common import new_uuid7, utc_now


class AnalysisHistoryRepository:
    """Repository for immutable megatrend, hidden-need and competitor analyses."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Megatrends ---

    async def save_megatrend_analysis(
        self,
        *,
        megatrend_id: UUID,
        score: float,
        opportunity_level: str,
        insights: str,
        opportunities: list[str],
        threats: list[str],
        analysis_date: datetime | None = None,
    ) -> MegatrendAnalysisRow:
        row = MegatrendAnalysisRow(
            analysis_id=new_uuid7(),
            megatrend_id=megatrend_id,
            score=score,
            opportunity_level=opportunity_level,
            insights=insights,
            opportunities=list(opportunities),
            threats=list(threats),
            analysis_date=analysis_date or utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def list_megatrend_analyses(
        self, megatrend_id: UUID,
    ) -> list[MegatrendAnalysisRow]:
        result = await self._session.execute(
            select(MegatrendAnalysisRow)
            .where(MegatrendAnalysisRow.megatrend_id == megatrend_id)
            .order_by(
                MegatrendAnalysisRow.analysis_date.desc(),
                MegatrendAnalysisRow.analysis_id.desc(),
            )
        )
        return list(result.scalars().all())

    # --- Hidden needs ---

    async def save_need_insights(
        self,
        *,
        need_id: UUID,
        insights: list[tuple[str, bool, int]],
    ) -> list[NeedInsightRow]:
        """Insert one row per ``(insight, actionable, priority)`` tuple."""
        now = utc_now()
        rows = [
            NeedInsightRow(
                insight_id=new_uuid7(),
                need_id=need_id,
                insight=text,
                actionable=actionable,
                priority=priority,
                created_at=now,
            )
            for text, actionable, priority in insights
        ]
        self._session.add_all(rows)
        await self._session.flush()
        for row in rows:
            await self._session.refresh(row)
        return rows

    async def list_need_insights(self, need_id: UUID) -> list[NeedInsightRow]:
        result = await self._session.execute(
            select(NeedInsightRow)
            .where(NeedInsightRow.need_id == need_id)
            .order_by(NeedInsightRow.priority.asc(), NeedInsightRow.created_at.desc())
        )
        return list(result.scalars().all())

    # --- Competitors ---

    async def save_competitor_analysis(
        self,
        *,
        competitor_id: UUID,
        competitor_name: str,
        strength_score: float,
        threat_level: str,
        recent_activity: list[dict],
        recommendations: list[str],
        analysis_date: datetime | None = None,
    ) -> CompetitorAnalysisRow:
        row = CompetitorAnalysisRow(
            analysis_id=new_uuid7(),
            competitor_id=competitor_id,
            competitor_name=competitor_name,
            strength_score=strength_score,
            threat_level=threat_level,
            recent_activity=recent_activity,
            recommendations=list(recommendations),
            analysis_date=analysis_date or utc_now(),
        )
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def list_competitor_analyses(
        self, competitor_id: UUID,
    ) -> list[CompetitorAnalysisRow]:
        result = await self._session.execute(
            select(CompetitorAnalysisRow)
            .where(CompetitorAnalysisRow.competitor_id == competitor_id)
            .order_by(
                CompetitorAnalysisRow.analysis_date.desc(),
                CompetitorAnalysisRow.analysis_id.desc(),
            )
        )
        return list(result.scalars().all())
