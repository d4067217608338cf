"""Competitor connector: CRUD, search, move tracking and threat analysis."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import timedelta
from typing import Any

import structlog
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.analysis import heuristics
from strategy_kb.connectors.base import (
    AnalyzableMixin,
    EntityConnector,
    EntityId,
    check_min_length,
    coerce_id,
    json_array_has,
    validation_values,
    warn_if_empty,
)
from strategy_kb.connectors.search import SearchMixin
from strategy_kb.db.tables import CompetitorRow
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
    utc_now,
)
from strategy_kb.models.knowledge import (
    Competitor,
    CompetitorAnalysis,
    CompetitorCreate,
    CompetitorMove,
    CompetitorMoveCreate,
    CompetitorUpdate,
)
from strategy_kb.repositories.activity import CompetitorMoveRepository
from strategy_kb.repositories.analysis import AnalysisHistoryRepository

logger = structlog.get_logger(__name__)


class CompetitorConnector(
    SearchMixin[Competitor],
    AnalyzableMixin[Competitor, CompetitorAnalysis],
    EntityConnector[Competitor, CompetitorCreate, CompetitorUpdate],
):
    kind = EntityKind.COMPETITOR
    row_type = CompetitorRow
    entity_model = Competitor
    create_model = CompetitorCreate
    update_model = CompetitorUpdate
    required_fields = (
        "name",
        "description",
        "industry",
        "strengths",
        "weaknesses",
        "products",
    )

    search_fields = ("name", "description")
    keyword_fields = ("name",)
    keyword_list_fields = ("products", "industry")

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self._moves = CompetitorMoveRepository(session)
        self._history = AnalysisHistoryRepository(session)

    def validate(
        self, data: CompetitorCreate | CompetitorUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []
        check_min_length(
            values, "name", 2, errors, "Name must be at least 2 characters",
        )
        warn_if_empty(
            values, "strengths", warnings, "Consider identifying competitor strengths",
        )
        warn_if_empty(
            values, "weaknesses", warnings, "Consider identifying competitor weaknesses",
        )
        return DataValidationResult(errors=errors, warnings=warnings)

    @classmethod
    def record_issues(cls, record: Mapping[str, Any]) -> list[str]:
        if record.get("strengths") and record.get("weaknesses"):
            return []
        return [f'Competitor "{record.get("name")}" missing SWOT data']

    async def find_by_industry(self, industry: str) -> list[Competitor]:
        rows = await self._repo.find(
            (json_array_has(CompetitorRow.industry, industry),),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    # --- Moves ---

    async def add_move(
        self,
        competitor_id: EntityId,
        move: CompetitorMoveCreate | Mapping[str, Any],
    ) -> CompetitorMove:
        """Record a market move.

        Raises
        ------
        EntityNotFoundError
            If the competitor does not exist.
        """
        row = await self._get_row(competitor_id)
        move = self._coerce(CompetitorMoveCreate, move)
        created = await self._moves.create(
            competitor_id=row.competitor_id,
            type=move.type.value,
            description=move.description,
            date=move.date,
            impact=move.impact.value,
            response=move.response,
        )
        logger.info(
            "competitor_move_added",
            competitor_id=str(row.competitor_id),
            move_type=move.type.value,
        )
        return CompetitorMove.model_validate(created)

    async def get_moves(
        self, competitor_id: EntityId, limit: int = 10,
    ) -> list[CompetitorMove]:
        """Most recent moves first."""
        key = coerce_id(competitor_id)
        if key is None:
            return []
        rows = await self._moves.get_by_competitor(key, limit=limit)
        return [CompetitorMove.model_validate(row) for row in rows]

    async def get_recent_moves(self, days: int = 30) -> list[CompetitorMove]:
        """Moves by any competitor within the last *days* days."""
        rows = await self._moves.get_since(utc_now() - timedelta(days=days))
        return [CompetitorMove.model_validate(row) for row in rows]

    # --- Analysis ---

    async def analyze(self, entity_id: EntityId) -> CompetitorAnalysis:
        """Score the competitor's strength from its profile and recent moves.

        Raises
        ------
        EntityNotFoundError
            If the competitor does not exist.
        """
        competitor = await self.find_by_id(entity_id)
        if competitor is None:
            raise EntityNotFoundError(self.kind.value, entity_id)

        moves = await self.get_moves(
            competitor.competitor_id, limit=heuristics.COMPETITOR_RECENT_MOVES,
        )
        strength = heuristics.competitor_strength(
            len(competitor.strengths), len(competitor.products), len(moves),
        )
        threat = heuristics.classify_level(strength)
        row = await self._history.save_competitor_analysis(
            competitor_id=competitor.competitor_id,
            competitor_name=competitor.name,
            strength_score=strength,
            threat_level=threat.value,
            recent_activity=[move.model_dump(mode="json") for move in moves],
            recommendations=heuristics.competitor_recommendations(
                competitor.strengths, competitor.weaknesses, len(moves),
            ),
        )
        logger.info(
            "competitor_analyzed",
            competitor_id=str(competitor.competitor_id),
            strength_score=strength,
            threat_level=threat.value,
        )
        return CompetitorAnalysis.model_validate(row)

    async def get_related(self, entity_id: EntityId, limit: int = 5) -> list[Competitor]:
        """Competitors sharing at least one industry."""
        competitor = await self.find_by_id(entity_id)
        if competitor is None or not competitor.industry:
            return []
        rows = await self._repo.find(
            (
                CompetitorRow.competitor_id != competitor.competitor_id,
                or_(*(
                    json_array_has(CompetitorRow.industry, industry)
                    for industry in competitor.industry
                )),
            ),
            order_by=self._default_order(),
            limit=limit,
        )
        return [self._to_entity(row) for row in rows]

    async def get_analyses(self, entity_id: EntityId) -> list[CompetitorAnalysis]:
        """Analysis history, newest first."""
        key = coerce_id(entity_id)
        if key is None:
            return []
        rows = await self._history.list_competitor_analyses(key)
        return [CompetitorAnalysis.model_validate(row) for row in rows]
