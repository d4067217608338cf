"""Success case connector."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from strategy_kb.connectors.base import (
    EntityConnector,
    check_min_length,
    validation_values,
    warn_if_empty,
)
from strategy_kb.connectors.search import SearchMixin
from strategy_kb.db.tables import SuccessCaseRow
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
)
from strategy_kb.models.knowledge import (
    SuccessCase,
    SuccessCaseCreate,
    SuccessCaseUpdate,
)


class SuccessCaseConnector(
    SearchMixin[SuccessCase],
    EntityConnector[SuccessCase, SuccessCaseCreate, SuccessCaseUpdate],
):
    kind = EntityKind.SUCCESS_CASE
    row_type = SuccessCaseRow
    entity_model = SuccessCase
    create_model = SuccessCaseCreate
    update_model = SuccessCaseUpdate
    required_fields = (
        "title",
        "description",
        "challenge",
        "solution",
        "results",
        "key_factors",
    )

    search_fields = ("title", "description", "industry")
    keyword_list_fields = ("key_factors",)

    def validate(
        self, data: SuccessCaseCreate | SuccessCaseUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []
        check_min_length(
            values, "title", 5, errors, "Title must be at least 5 characters",
        )
        warn_if_empty(
            values, "key_factors", warnings, "Consider adding key success factors",
        )
        return DataValidationResult(errors=errors, warnings=warnings)

    async def find_by_industry(self, industry: str) -> list[SuccessCase]:
        rows = await self._repo.find(
            (SuccessCaseRow.industry.icontains(industry, autoescape=True),),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]
