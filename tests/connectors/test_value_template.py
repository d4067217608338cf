"""Tests for ValueTemplateConnector: validation, lookups, applications."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from strategy_kb.connectors.value_template import ValueTemplateConnector
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.knowledge import ValueCategory, ValueTemplateCreate


def _template(**overrides) -> ValueTemplateCreate:
    data = {
        "name": "Back-office Automation",
        "description": "Automate finance processes.",
        "category": ValueCategory.COST_REDUCTION,
        "target_segment": "Mid-size manufacturers",
        "value_proposition": "Halve the cost of processing invoices.",
        "key_benefits": ["Lower cost", "Fewer errors"],
        "use_cases": ["Invoice matching"],
        "success_metrics": ["Cost per invoice"],
    }
    data.update(overrides)
    return ValueTemplateCreate(**data)


class TestValidate:
    def test_valid(self, offline_session: AsyncSession) -> None:
        result = ValueTemplateConnector(offline_session).validate(_template())
        assert result.is_valid is True
        assert result.warnings == []

    def test_short_name(self, offline_session: AsyncSession) -> None:
        result = ValueTemplateConnector(offline_session).validate(_template(name="AB"))
        assert result.is_valid is False
        assert result.errors[0].code == "MIN_LENGTH"

    def test_soft_checks(self, offline_session: AsyncSession) -> None:
        result = ValueTemplateConnector(offline_session).validate(
            _template(
                value_proposition="Cheaper",
                key_benefits=["Lower cost"],
                success_metrics=[],
            ),
        )
        assert result.is_valid is True
        assert [w.field for w in result.warnings] == [
            "value_proposition",
            "key_benefits",
            "success_metrics",
        ]

    def test_non_list_fields_do_not_raise(
        self, offline_session: AsyncSession,
    ) -> None:
        result = ValueTemplateConnector(offline_session).validate(
            {"key_benefits": 3, "success_metrics": 0},
        )
        assert result.is_valid is True
        assert result.warnings == []


class TestRecordIssues:
    def test_missing_metrics_and_use_cases(self) -> None:
        record = _template(name="Bare", use_cases=[], success_metrics=[]).model_dump()
        assert ValueTemplateConnector.record_issues(record) == [
            'Template "Bare" has no success metrics',
            'Template "Bare" has no use cases',
        ]


class TestLookups:
    @pytest.mark.anyio
    async def test_find_by_category(self, db_session: AsyncSession) -> None:
        connector = ValueTemplateConnector(db_session)
        await connector.create(_template(name="Cost"))
        await connector.create(
            _template(name="Growth", category=ValueCategory.REVENUE_GROWTH),
        )
        found = await connector.find_by_category(ValueCategory.REVENUE_GROWTH)
        assert [t.name for t in found] == ["Growth"]

    @pytest.mark.anyio
    async def test_find_by_target_segment(self, db_session: AsyncSession) -> None:
        connector = ValueTemplateConnector(db_session)
        await connector.create(_template(target_segment="Mid-size manufacturers"))
        await connector.create(_template(target_segment="Retail banks"))
        found = await connector.find_by_target_segment("MANUFACTURERS")
        assert [t.target_segment for t in found] == ["Mid-size manufacturers"]

    @pytest.mark.anyio
    async def test_find_by_keywords_matches_benefit(
        self, db_session: AsyncSession,
    ) -> None:
        connector = ValueTemplateConnector(db_session)
        await connector.create(_template(name="Cost"))
        await connector.create(
            _template(name="Service", description="Self-service", key_benefits=["Shorter waits"]),
        )
        found = await connector.find_by_keywords(["Shorter waits"])
        assert [t.name for t in found] == ["Service"]


class TestApplications:
    @pytest.mark.anyio
    async def test_apply_and_list(self, db_session: AsyncSession) -> None:
        connector = ValueTemplateConnector(db_session)
        template = await connector.create(_template())
        first = await connector.apply_template(
            template.template_id, "Plant A", "Added payroll checks",
        )
        await connector.apply_template(
            template.template_id, "Plant B", "Standard", results="Saved 30%",
        )

        assert first.template_id == template.template_id
        assert first.context == "Plant A"
        assert first.results is None

        applications = await connector.get_applications(template.template_id)
        assert {a.context for a in applications} == {"Plant A", "Plant B"}

    @pytest.mark.anyio
    async def test_apply_missing_raises(self, db_session: AsyncSession) -> None:
        with pytest.raises(EntityNotFoundError):
            await ValueTemplateConnector(db_session).apply_template(
                uuid7(), "Context", "None",
            )

    @pytest.mark.anyio
    async def test_no_applications(self, db_session: AsyncSession) -> None:
        connector = ValueTemplateConnector(db_session)
        template = await connector.create(_template())
        assert await connector.get_applications(template.template_id) == []
