"""Value template connector: CRUD, search and template applications."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.connectors.base import (
    SET_OPERATORS,
    EntityConnector,
    EntityId,
    check_min_length,
    coerce_id,
    sequence_value,
    validation_values,
    warn_if_empty,
)
from strategy_kb.connectors.search import SearchMixin
from strategy_kb.db.tables import ValueTemplateRow
from strategy_kb.models.common import (
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    ValidationWarning,
)
from strategy_kb.models.knowledge import (
    ValueApplication,
    ValueCategory,
    ValueTemplate,
    ValueTemplateCreate,
    ValueTemplateUpdate,
)
from strategy_kb.repositories.activity import ValueApplicationRepository

logger = structlog.get_logger(__name__)

MIN_VALUE_PROPOSITION = 20
MIN_KEY_BENEFITS = 2


class ValueTemplateConnector(
    SearchMixin[ValueTemplate],
    EntityConnector[ValueTemplate, ValueTemplateCreate, ValueTemplateUpdate],
):
    kind = EntityKind.VALUE_TEMPLATE
    row_type = ValueTemplateRow
    entity_model = ValueTemplate
    create_model = ValueTemplateCreate
    update_model = ValueTemplateUpdate
    required_fields = (
        "name",
        "description",
        "category",
        "target_segment",
        "value_proposition",
        "key_benefits",
        "use_cases",
        "success_metrics",
    )
    filter_operators = SET_OPERATORS

    search_fields = ("name", "description", "value_proposition", "target_segment")
    keyword_fields = ("name", "description")
    keyword_list_fields = ("key_benefits",)

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self._applications = ValueApplicationRepository(session)

    def validate(
        self, data: ValueTemplateCreate | ValueTemplateUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        values = validation_values(data)
        errors: list[ValidationIssue] = []
        warnings: list[ValidationWarning] = []

        check_min_length(
            values, "name", 3, errors, "Name must be at least 3 characters",
        )

        proposition = values.get("value_proposition")
        if isinstance(proposition, str) and len(proposition) < MIN_VALUE_PROPOSITION:
            warnings.append(ValidationWarning(
                field="value_proposition",
                message="Value proposition seems short",
                suggestion="Consider adding more detail to clearly communicate the value",
            ))

        benefits = sequence_value(values, "key_benefits")
        if benefits is not None and len(benefits) < MIN_KEY_BENEFITS:
            warnings.append(ValidationWarning(
                field="key_benefits",
                message="Consider adding more key benefits",
                suggestion="Templates with 3-5 key benefits tend to be more effective",
            ))

        warn_if_empty(
            values, "success_metrics", warnings,
            "No success metrics defined",
            "Define measurable success metrics to track value delivery",
        )
        return DataValidationResult(errors=errors, warnings=warnings)

    @classmethod
    def record_issues(cls, record: Mapping[str, Any]) -> list[str]:
        name = record.get("name")
        issues: list[str] = []
        if not record.get("success_metrics"):
            issues.append(f'Template "{name}" has no success metrics')
        if not record.get("use_cases"):
            issues.append(f'Template "{name}" has no use cases')
        return issues

    # --- Lookups ---

    async def find_by_category(self, category: ValueCategory) -> list[ValueTemplate]:
        rows = await self._repo.find(
            (ValueTemplateRow.category == ValueCategory(category).value,),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    async def find_by_target_segment(self, segment: str) -> list[ValueTemplate]:
        rows = await self._repo.find(
            (ValueTemplateRow.target_segment.icontains(segment, autoescape=True),),
            order_by=self._default_order(),
        )
        return [self._to_entity(row) for row in rows]

    # --- Applications ---

    async def apply_template(
        self,
        template_id: EntityId,
        context: str,
        customization: str,
        results: str | None = None,
    ) -> ValueApplication:
        """Record that a template was applied to a concrete context.

        Raises
        ------
        EntityNotFoundError
            If the template does not exist.
        """
        row = await self._get_row(template_id)
        application = await self._applications.create(
            template_id=row.template_id,
            context=context,
            customization=customization,
            results=results,
        )
        logger.info(
            "template_applied",
            template_id=str(row.template_id),
            application_id=str(application.application_id),
        )
        return ValueApplication.model_validate(application)

    async def get_applications(self, template_id: EntityId) -> list[ValueApplication]:
        """Applications of a template, most recent first."""
        key = coerce_id(template_id)
        if key is None:
            return []
        rows = await self._applications.get_by_template(key)
        return [ValueApplication.model_validate(row) for row in rows]
