"""Hidden need connector: CRUD, search, insight generation and validation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.analysis import heuristics
from strategy_kb.connectors.base import (
    SET_OPERATORS,
    AnalyzableMixin,
    EntityConnector,
    EntityId,
    check_min_length,
    coerce_id,
    given_fields,
    validation_values,
    warn_if_empty,
)
from strategy_kb.connectors.search import SearchMixin
from strategy_kb.db.tables import HiddenNeedRow
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
    utc_now,
)
from strategy_kb.models.knowledge import (
    HiddenNeed,
    HiddenNeedCreate,
    HiddenNeedUpdate,
    NeedInsight,
    ValidationLevel,
)
from strategy_kb.repositories.analysis import AnalysisHistoryRepository

logger = structlog.get_logger(__name__)

DRIVER_FIELDS = ("emotional_driver", "functional_driver", "social_driver")
MIN_HIDDEN_NEED = 20


class HiddenNeedConnector(
    SearchMixin[HiddenNeed],
    AnalyzableMixin[HiddenNeed, list[NeedInsight]],
    EntityConnector[HiddenNeed, HiddenNeedCreate, HiddenNeedUpdate],
):
    kind = EntityKind.HIDDEN_NEED
    row_type = HiddenNeedRow
    entity_model = HiddenNeed
    create_model = HiddenNeedCreate
    update_model = HiddenNeedUpdate
    required_fields = (
        "surface_need",
        "hidden_need",
        "root_cause",
        "customer_segment",
        *DRIVER_FIELDS,
        "validation_level",
        "evidence",
    )
    filter_operators = SET_OPERATORS

    search_fields = ("surface_need", "hidden_need", "root_cause", "customer_segment")
    keyword_fields = ("surface_need", "hidden_need")

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self._history = AnalysisHistoryRepository(session)

    def validate(
        self, data: HiddenNeedCreate | HiddenNeedUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        check_min_length(
            values, "surface_need", 10, errors,
            "Surface need description is too short",
        )

        hidden = values.get("hidden_need")
        if isinstance(hidden, str) and len(hidden) < MIN_HIDDEN_NEED:
            warnings.append(ValidationWarning(
                field="hidden_need",
                message="Hidden need description seems brief",
                suggestion="Provide more detail to capture the underlying motivation",
            ))

        warn_if_empty(
            values, "evidence", warnings,
            "No evidence provided",
            "Add evidence to support the hidden need hypothesis",
        )

        # Partial updates only get the driver check when they touch a driver.
        supplied = given_fields(data)
        if "surface_need" in supplied or supplied.intersection(DRIVER_FIELDS):
            if not any(values.get(field) for field in DRIVER_FIELDS):
                warnings.append(ValidationWarning(
                    field="drivers",
                    message="No drivers specified",
                    suggestion="Identify at least one emotional, functional, or social driver",
                ))
        return DataValidationResult(errors=errors, warnings=warnings)

    @classmethod
    def record_issues(cls, record: Mapping[str, Any]) -> list[str]:
        label = f'Need "{str(record.get("surface_need") or "")[:30]}..."'
        issues: list[str] = []
        if record.get("validation_level") == ValidationLevel.HYPOTHESIS:
            issues.append(f"{label} is still a hypothesis")
        if not record.get("evidence"):
            issues.append(f"{label} has no evidence")
        return issues

    # --- Lookups ---

    async def find_by_segment(self, segment: str) -> list[HiddenNeed]:
        rows = await self._repo.find(
            (HiddenNeedRow.customer_segment.icontains(segment, autoescape=True),),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def find_by_validation_level(self, level: ValidationLevel) -> list[HiddenNeed]:
        rows = await self._repo.find(
            (HiddenNeedRow.validation_level == ValidationLevel(level).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def update_validation(
        self,
        entity_id: EntityId,
        level: ValidationLevel,
        evidence: Sequence[str],
    ) -> HiddenNeed:
        """Set the validation level and append *evidence* to the existing list.

        Raises
        ------
        EntityNotFoundError
            If the hidden need does not exist.
        """
        row = await self._get_row(entity_id)
        row = await self._repo.apply(row, {
            "validation_level": ValidationLevel(level).value,
            "evidence": [*(row.evidence or []), *evidence],
            "updated_at": utc_now(),
        })
        logger.info(
            "need_validation_updated",
            need_id=str(row.need_id),
            validation_level=row.validation_level,
            evidence_added=len(evidence),
        )
        return self._to_entity(row)

    # --- Analysis ---

    async def analyze(self, entity_id: EntityId) -> list[NeedInsight]:
        """Generate insights from the need's drivers and root cause.

        Each run appends a new batch of insights. Returned by priority.

        Raises
        ------
        EntityNotFoundError
            If the hidden need does not exist.
        """
        need = await self.find_by_id(entity_id)
        if need is None:
            raise EntityNotFoundError(self.kind.value, entity_id)

        drafts = heuristics.need_insights(
            need.root_cause,
            emotional_driver=need.emotional_driver,
            functional_driver=need.functional_driver,
            social_driver=need.social_driver,
        )
        rows = await self._history.save_need_insights(
            need_id=need.need_id,
            insights=[(d.insight, d.actionable, d.priority) for d in drafts],
        )
        logger.info("need_analyzed", need_id=str(need.need_id), insights=len(rows))
        return [NeedInsight.model_validate(row) for row in rows]

    async def get_related(self, entity_id: EntityId, limit: int = 5) -> list[HiddenNeed]:
        """Needs whose customer segment contains this need's segment."""
        need = await self.find_by_id(entity_id)
        if need is None:
            return []
        rows = await self._repo.find(
            (
                HiddenNeedRow.need_id != need.need_id,
                HiddenNeedRow.customer_segment.icontains(
                    need.customer_segment, autoescape=True,
                ),
            ),
            order_by=self._default_order(),
            limit=limit,
        )
        return [self._to_entity(row) for row in rows]

    async def get_insights(self, entity_id: EntityId) -> list[NeedInsight]:
        """All stored insights for a need, most urgent first."""
        key = coerce_id(entity_id)
        if key is None:
            return []
        rows = await self._history.list_need_insights(key)
        return [NeedInsight.model_validate(row) for row in rows]
