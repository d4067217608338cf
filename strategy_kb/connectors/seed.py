"""Seed connector: in-house capabilities that could be taken to market."""

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
from strategy_kb.db.tables import SeedRow
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
)
from strategy_kb.models.knowledge import (
    MaturityLevel,
    Seed,
    SeedCreate,
    SeedType,
    SeedUpdate,
)


class SeedConnector(
    SearchMixin[Seed],
    EntityConnector[Seed, SeedCreate, SeedUpdate],
):
    kind = EntityKind.SEED
    row_type = SeedRow
    entity_model = Seed
    create_model = SeedCreate
    update_model = SeedUpdate
    required_fields = (
        "name",
        "description",
        "type",
        "maturity_level",
        "potential_markets",
        "risks",
    )

    search_fields = ("name", "description")
    keyword_fields = ("name",)
    keyword_list_fields = ("potential_markets",)

    def validate(
        self, data: SeedCreate | SeedUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []
        check_min_length(
            values, "name", 3, errors, "Name must be at least 3 characters",
        )
        warn_if_empty(
            values, "potential_markets", warnings,
            "Consider identifying potential markets",
        )
        return DataValidationResult(errors=errors, warnings=warnings)

    async def find_by_type(self, seed_type: SeedType) -> list[Seed]:
        rows = await self._repo.find(
            (SeedRow.type == SeedType(seed_type).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def find_by_maturity(self, level: MaturityLevel) -> list[Seed]:
        rows = await self._repo.find(
            (SeedRow.maturity_level == MaturityLevel(level).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]
