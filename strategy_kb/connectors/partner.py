"""Partner connector."""

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
from strategy_kb.db.tables import PartnerRow
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
)
from strategy_kb.models.knowledge import (
    Partner,
    PartnerCreate,
    PartnerType,
    PartnerUpdate,
    RelationshipStatus,
)


class PartnerConnector(
    SearchMixin[Partner],
    EntityConnector[Partner, PartnerCreate, PartnerUpdate],
):
    kind = EntityKind.PARTNER
    row_type = PartnerRow
    entity_model = Partner
    create_model = PartnerCreate
    update_model = PartnerUpdate
    required_fields = ("name", "description", "type", "industry", "capabilities")

    search_fields = ("name", "description")
    keyword_fields = ("name",)
    keyword_list_fields = ("capabilities", "industry")

    def validate(
        self, data: PartnerCreate | PartnerUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []
        check_min_length(
            values, "name", 2, errors, "Name must be at least 2 characters",
        )
        warn_if_empty(
            values, "capabilities", warnings, "Consider adding partner capabilities",
        )
        return DataValidationResult(errors=errors, warnings=warnings)

    async def find_by_type(self, partner_type: PartnerType) -> list[Partner]:
        rows = await self._repo.find(
            (PartnerRow.type == PartnerType(partner_type).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def find_by_status(self, status: RelationshipStatus) -> list[Partner]:
        rows = await self._repo.find(
            (PartnerRow.relationship_status == RelationshipStatus(status).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def find_active_partners(self) -> list[Partner]:
        return await self.find_by_status(RelationshipStatus.ACTIVE)
