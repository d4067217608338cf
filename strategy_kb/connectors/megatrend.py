"""Megatrend connector: CRUD, search, opportunity analysis and history."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.analysis import heuristics
from strategy_kb.connectors.base import (
    ALL_OPERATORS,
    AnalyzableMixin,
    EntityConnector,
    EntityId,
    check_min_length,
    check_unit_range,
    coerce_id,
    json_array_has,
    validation_values,
    warn_if_empty,
)
from strategy_kb.connectors.search import SearchMixin
from strategy_kb.db.tables import MegatrendRow
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
)
from strategy_kb.models.knowledge import (
    Megatrend,
    MegatrendAnalysis,
    MegatrendCreate,
    MegatrendUpdate,
)
from strategy_kb.repositories.analysis import AnalysisHistoryRepository

logger = structlog.get_logger(__name__)


class MegatrendConnector(
    SearchMixin[Megatrend],
    AnalyzableMixin[Megatrend, MegatrendAnalysis],
    EntityConnector[Megatrend, MegatrendCreate, MegatrendUpdate],
):
    kind = EntityKind.MEGATREND
    row_type = MegatrendRow
    entity_model = Megatrend
    create_model = MegatrendCreate
    update_model = MegatrendUpdate
    required_fields = (
        "name",
        "description",
        "category",
        "impact",
        "timeframe",
        "confidence",
        "sources",
        "keywords",
    )
    filter_operators = ALL_OPERATORS

    search_fields = ("name", "description", "category")
    search_list_fields = ("keywords",)
    keyword_list_fields = ("keywords",)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self._history = AnalysisHistoryRepository(session)

    def validate(
        self, data: MegatrendCreate | MegatrendUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        check_min_length(
            values, "name", 3, errors, "Name must be at least 3 characters",
        )
        check_unit_range(
            values, "confidence", errors, "Confidence must be between 0 and 1",
        )
        warn_if_empty(
            values, "sources", warnings,
            "Consider adding sources for credibility",
            "Add at least one source",
        )
        return DataValidationResult(errors=errors, warnings=warnings)

    @classmethod
    def record_issues(cls, record: Mapping[str, Any]) -> list[str]:
        if record.get("sources"):
            return []
        return [f'Megatrend "{record.get("name")}" has no sources']

    # --- Analysis ---

    async def analyze(self, entity_id: EntityId) -> MegatrendAnalysis:
        """Score the opportunity and append a new analysis to the history.

        Raises
        ------
        EntityNotFoundError
            If the megatrend does not exist.
        """
        megatrend = await self.find_by_id(entity_id)
        if megatrend is None:
            raise EntityNotFoundError(self.kind.value, entity_id)

        score = heuristics.megatrend_score(megatrend.impact, megatrend.confidence)
        level = heuristics.classify_level(score)
        row = await self._history.save_megatrend_analysis(
            megatrend_id=megatrend.megatrend_id,
            score=score,
            opportunity_level=level.value,
            insights=heuristics.megatrend_insight(
                megatrend.impact,
                megatrend.category,
                megatrend.confidence,
                megatrend.timeframe,
            ),
            opportunities=heuristics.megatrend_opportunities(megatrend.impact),
            threats=heuristics.megatrend_threats(megatrend.confidence),
        )
        logger.info(
            "megatrend_analyzed",
            megatrend_id=str(megatrend.megatrend_id),
            score=score,
            opportunity_level=level.value,
        )
        return MegatrendAnalysis.model_validate(row)

    async def get_related(self, entity_id: EntityId, limit: int = 5) -> list[Megatrend]:
        """Megatrends in the same category or sharing a keyword."""
        megatrend = await self.find_by_id(entity_id)
        if megatrend is None:
            return []
        similar = [MegatrendRow.category == megatrend.category]
        similar.extend(
            json_array_has(MegatrendRow.keywords, keyword)
            for keyword in megatrend.keywords
        )
        rows = await self._repo.find(
            (MegatrendRow.megatrend_id != megatrend.megatrend_id, or_(*similar)),
            order_by=self._default_order(),
            limit=limit,
        )
        return [self._to_entity(row) for row in rows]

    async def get_analyses(self, entity_id: EntityId) -> list[MegatrendAnalysis]:
        """Analysis history, newest first."""
        key = coerce_id(entity_id)
        if key is None:
            return []
        rows = await self._history.list_megatrend_analyses(key)
        return [MegatrendAnalysis.model_validate(row) for row in rows]
