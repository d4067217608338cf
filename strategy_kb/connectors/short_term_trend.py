"""Short-term trend connector.

A trend may name its parent megatrend by identifier string; the megatrend
itself is looked up on demand through the megatrend connector.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.connectors.base import (
    EntityConnector,
    EntityId,
    check_min_length,
    check_unit_range,
    validation_values,
    warn_if_empty,
)
from strategy_kb.connectors.megatrend import MegatrendConnector
from strategy_kb.connectors.search import SearchMixin
from strategy_kb.db.tables import ShortTermTrendRow
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
)
from strategy_kb.models.knowledge import (
    Megatrend,
    ShortTermTrend,
    ShortTermTrendCreate,
    ShortTermTrendUpdate,
    TrendPhase,
)

EMERGING_PHASES = (TrendPhase.EMERGING, TrendPhase.GROWING)


class ShortTermTrendConnector(
    SearchMixin[ShortTermTrend],
    EntityConnector[ShortTermTrend, ShortTermTrendCreate, ShortTermTrendUpdate],
):
    kind = EntityKind.SHORT_TERM_TREND
    row_type = ShortTermTrendRow
    entity_model = ShortTermTrend
    create_model = ShortTermTrendCreate
    update_model = ShortTermTrendUpdate
    required_fields = ("name", "description", "category", "current_phase", "sources")

    search_fields = ("name", "description", "category")
    keyword_fields = ("name", "description")

    def __init__(
        self,
        session: AsyncSession,
        megatrends: MegatrendConnector | None = None,
    ) -> None:
        super().__init__(session)
        self._megatrends = megatrends or MegatrendConnector(session)

    def validate(
        self,
        data: ShortTermTrendCreate | ShortTermTrendUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []
        check_min_length(
            values, "name", 3, errors, "Name must be at least 3 characters",
        )
        check_unit_range(
            values, "relevance", errors, "Relevance must be between 0 and 1",
        )
        warn_if_empty(values, "sources", warnings, "Consider adding trend sources")
        return DataValidationResult(errors=errors, warnings=warnings)

    @classmethod
    def record_issues(cls, record: Mapping[str, Any]) -> list[str]:
        if record.get("sources"):
            return []
        return [f'Trend "{record.get("name")}" has no sources']

    async def find_by_phase(self, phase: TrendPhase) -> list[ShortTermTrend]:
        rows = await self._repo.find(
            (ShortTermTrendRow.current_phase == TrendPhase(phase).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def find_emerging_trends(self) -> list[ShortTermTrend]:
        """EMERGING and GROWING trends, most relevant first."""
        rows = await self._repo.find(
            (ShortTermTrendRow.current_phase.in_([p.value for p in EMERGING_PHASES]),),
            order_by=(
                ShortTermTrendRow.relevance.desc(),
                ShortTermTrendRow.trend_id.desc(),
            ),
        )
        return [self._to_entity(row) for row in rows]

    async def find_by_megatrend(self, megatrend_id: EntityId) -> list[ShortTermTrend]:
        rows = await self._repo.find(
            (ShortTermTrendRow.megatrend_id == str(megatrend_id),),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def get_megatrend(self, trend_id: EntityId) -> Megatrend | None:
        """Resolve the trend's parent megatrend; ``None`` if unlinked or dangling.

        Raises
        ------
        EntityNotFoundError
            If the trend itself does not exist.
        """
        row = await self._get_row(trend_id)
        if not row.megatrend_id:
            return None
        return await self._megatrends.find_by_id(row.megatrend_id)
