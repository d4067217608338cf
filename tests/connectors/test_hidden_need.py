"""Tests for HiddenNeedConnector: validation, lookups, insights."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from strategy_kb.connectors.hidden_need import HiddenNeedConnector
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import FilterOperator, QueryFilter
from strategy_kb.models.knowledge import (
    HiddenNeedCreate,
    HiddenNeedUpdate,
    ValidationLevel,
)


def _need(**overrides) -> HiddenNeedCreate:
    data = {
        "surface_need": "Managers ask for a faster reporting tool",
        "hidden_need": "Managers want to feel in control before reviews",
        "root_cause": "Reports arrive too late",
        "customer_segment": "Operations managers",
        "emotional_driver": "Confidence",
        "validation_level": ValidationLevel.OBSERVED,
        "evidence": ["Interviews"],
    }
    data.update(overrides)
    return HiddenNeedCreate(**data)


class TestValidate:
    def test_valid(self, offline_session: AsyncSession) -> None:
        result = HiddenNeedConnector(offline_session).validate(_need())
        assert result.is_valid is True
        assert result.warnings == []

    def test_short_surface_need(self, offline_session: AsyncSession) -> None:
        result = HiddenNeedConnector(offline_session).validate(
            _need(surface_need="Faster"),
        )
        assert result.is_valid is False
        assert result.errors[0].field == "surface_need"
        assert result.errors[0].code == "MIN_LENGTH"

    def test_brief_hidden_need_warns(self, offline_session: AsyncSession) -> None:
        result = HiddenNeedConnector(offline_session).validate(
            _need(hidden_need="Control"),
        )
        assert result.is_valid is True
        assert [w.field for w in result.warnings] == ["hidden_need"]

    def test_no_evidence_warns(self, offline_session: AsyncSession) -> None:
        result = HiddenNeedConnector(offline_session).validate(_need(evidence=[]))
        assert [w.field for w in result.warnings] == ["evidence"]

    def test_no_drivers_warns(self, offline_session: AsyncSession) -> None:
        result = HiddenNeedConnector(offline_session).validate(
            _need(emotional_driver=None),
        )
        assert [w.field for w in result.warnings] == ["drivers"]

    def test_partial_update_without_drivers(
        self, offline_session: AsyncSession,
    ) -> None:
        result = HiddenNeedConnector(offline_session).validate(
            HiddenNeedUpdate(evidence=["Survey"]),
        )
        assert result.is_valid is True
        assert result.warnings == []


class TestRecordIssues:
    def test_hypothesis_without_evidence(self) -> None:
        record = _need(
            validation_level=ValidationLevel.HYPOTHESIS, evidence=[],
        ).model_dump()
        issues = HiddenNeedConnector.record_issues(record)
        assert issues == [
            'Need "Managers ask for a faster repo..." is still a hypothesis',
            'Need "Managers ask for a faster repo..." has no evidence',
        ]

    def test_validated_with_evidence(self) -> None:
        assert HiddenNeedConnector.record_issues(_need().model_dump()) == []

    @pytest.mark.anyio
    async def test_issues_reach_quality_metrics(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        await connector.create(_need(validation_level=ValidationLevel.HYPOTHESIS, evidence=[]))
        metrics = await connector.get_quality_metrics()
        assert metrics.accuracy == 0.0
        assert any("is still a hypothesis" in issue for issue in metrics.issues)
        assert any("has no evidence" in issue for issue in metrics.issues)


class TestLookups:
    @pytest.mark.anyio
    async def test_find_by_segment(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        await connector.create(_need(customer_segment="Operations managers"))
        await connector.create(_need(customer_segment="Retail staff"))
        found = await connector.find_by_segment("operations")
        assert [n.customer_segment for n in found] == ["Operations managers"]

    @pytest.mark.anyio
    async def test_find_by_validation_level(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        await connector.create(_need(validation_level=ValidationLevel.PROVEN))
        await connector.create(_need(validation_level=ValidationLevel.HYPOTHESIS))
        found = await connector.find_by_validation_level(ValidationLevel.PROVEN)
        assert [n.validation_level for n in found] == [ValidationLevel.PROVEN]

    @pytest.mark.anyio
    async def test_in_filter_on_level(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        for level in ValidationLevel:
            await connector.create(_need(validation_level=level))
        result = await connector.find_many([
            QueryFilter(
                field="validation_level",
                operator=FilterOperator.IN,
                value=["VALIDATED", "PROVEN"],
            ),
        ])
        assert result.total == 2

    @pytest.mark.anyio
    async def test_search(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        await connector.create(_need())
        await connector.create(
            _need(surface_need="Staff want more training", root_cause="No career path"),
        )
        found = await connector.search("career")
        assert [n.surface_need for n in found] == ["Staff want more training"]


class TestUpdateValidation:
    @pytest.mark.anyio
    async def test_appends_evidence(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        need = await connector.create(_need(evidence=["Interviews"]))
        updated = await connector.update_validation(
            need.need_id, ValidationLevel.VALIDATED, ["Survey", "Pilot"],
        )
        assert updated.validation_level == ValidationLevel.VALIDATED
        assert updated.evidence == ["Interviews", "Survey", "Pilot"]

    @pytest.mark.anyio
    async def test_missing_raises(self, db_session: AsyncSession) -> None:
        with pytest.raises(EntityNotFoundError):
            await HiddenNeedConnector(db_session).update_validation(
                uuid7(), ValidationLevel.PROVEN, [],
            )


class TestAnalyze:
    @pytest.mark.anyio
    async def test_insights_by_priority(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        need = await connector.create(
            _need(functional_driver="Same-day figures", social_driver="Standing"),
        )
        insights = await connector.analyze(need.need_id)
        assert [i.priority for i in insights] == [0, 1, 2, 3]
        assert insights[0].insight == "Root cause to address: Reports arrive too late"
        assert all(i.need_id == need.need_id for i in insights)

    @pytest.mark.anyio
    async def test_stored_insights(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        need = await connector.create(_need())
        await connector.analyze(need.need_id)
        await connector.analyze(need.need_id)
        stored = await connector.get_insights(need.need_id)
        assert len(stored) == 4
        assert [i.priority for i in stored] == [0, 0, 1, 1]

    @pytest.mark.anyio
    async def test_missing_raises(self, db_session: AsyncSession) -> None:
        with pytest.raises(EntityNotFoundError):
            await HiddenNeedConnector(db_session).analyze(uuid7())


class TestRelated:
    @pytest.mark.anyio
    async def test_segment_match(self, db_session: AsyncSession) -> None:
        connector = HiddenNeedConnector(db_session)
        base = await connector.create(_need(customer_segment="Managers"))
        await connector.create(_need(customer_segment="Operations managers"))
        await connector.create(_need(customer_segment="Retail staff"))
        related = await connector.get_related(base.need_id)
        assert [n.customer_segment for n in related] == ["Operations managers"]
