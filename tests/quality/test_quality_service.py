"""Tests for DataQualityService.

Pure operations (standardize, validate_data, detect_duplicates,
recommendations) plus source scoring, history and the dashboard.
"""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from strategy_kb.errors import EntityNotFoundError
from strategy_kb.knowledge_base import KnowledgeBase
from strategy_kb.models.common import DataQualityMetrics, EntityKind, ImpactLevel, utc_now
from strategy_kb.models.data_quality import (
    QualityTrend,
    StandardizationRule,
    StandardizationType,
)
from strategy_kb.models.knowledge import MegatrendCreate
from strategy_kb.models.metadata import DataSourceConfig, DataSourceType
from strategy_kb.quality.config import QualityServiceConfig
from strategy_kb.quality.service import (
    NO_DATA_ISSUE,
    DataQualityService,
    normalize_text,
)
from strategy_kb.repositories.data_quality import QualitySnapshotRepository


def _metrics(score: float, issues: list[str] | None = None) -> dict:
    return {
        "completeness": score,
        "accuracy": score,
        "consistency": score,
        "timeliness": score,
        "overall_score": score,
        "issues": issues or [],
    }


async def _source(kb: KnowledgeBase, name: str, entity_kind=None):
    return await kb.metadata.register_data_source(DataSourceConfig(
        name=name, kind=DataSourceType.DATABASE, entity_kind=entity_kind,
    ))


class TestStandardize:
    def test_rules(self) -> None:
        record = {"a": "  padded  ", "b": "MiXeD", "c": "lower", "d": 42}
        result = DataQualityService.standardize(record, [
            StandardizationRule("a", StandardizationType.TRIM),
            StandardizationRule("b", StandardizationType.LOWERCASE),
            StandardizationRule("c", StandardizationType.UPPERCASE),
            StandardizationRule("d", StandardizationType.TRIM),
        ])
        assert result == {"a": "padded", "b": "mixed", "c": "LOWER", "d": 42}

    def test_input_not_mutated(self) -> None:
        record = {"a": "  x "}
        DataQualityService.standardize(
            record, [StandardizationRule("a", StandardizationType.TRIM)],
        )
        assert record == {"a": "  x "}

    def test_normalize(self) -> None:
        assert normalize_text("  Ｆｕｌｌ   Width\tText ") == "full width text"

    def test_custom(self) -> None:
        result = DataQualityService.standardize({"a": "abc"}, [
            StandardizationRule(
                "a", StandardizationType.CUSTOM, transformer=lambda s: s[::-1],
            ),
        ])
        assert result == {"a": "cba"}

    def test_custom_without_transformer_is_noop(self) -> None:
        result = DataQualityService.standardize(
            {"a": "abc"}, [StandardizationRule("a", StandardizationType.CUSTOM)],
        )
        assert result == {"a": "abc"}

    def test_idempotent(self) -> None:
        rules = [
            StandardizationRule("a", StandardizationType.TRIM),
            StandardizationRule("a", StandardizationType.NORMALIZE),
        ]
        once = DataQualityService.standardize({"a": "  Some  TEXT "}, rules)
        twice = DataQualityService.standardize(once, rules)
        assert once == twice

    def test_missing_field_skipped(self) -> None:
        result = DataQualityService.standardize(
            {"b": 1}, [StandardizationRule("a", StandardizationType.TRIM)],
        )
        assert result == {"b": 1}


class TestValidateData:
    def test_required_fields(self) -> None:
        result = DataQualityService.validate_data(
            {"name": "", "owner": None, "ok": 0}, ["name", "owner", "ok", "absent"],
        )
        assert result.is_valid is False
        assert [e.field for e in result.errors] == ["name", "owner", "absent"]
        assert {e.code for e in result.errors} == {"REQUIRED_FIELD"}

    def test_type_checks(self) -> None:
        result = DataQualityService.validate_data(
            {"count": "3", "tags": ["a"], "flag": True, "meta": {}},
            [],
            {"count": "number", "tags": "array", "flag": "boolean", "meta": "object"},
        )
        assert [(e.field, e.code) for e in result.errors] == [
            ("count", "TYPE_MISMATCH"),
        ]

    def test_bool_is_not_number(self) -> None:
        result = DataQualityService.validate_data({"n": True}, [], {"n": "number"})
        assert result.is_valid is False

    def test_valid(self) -> None:
        result = DataQualityService.validate_data({"name": "x"}, ["name"])
        assert result.is_valid is True


class TestDetectDuplicates:
    def test_groups_in_input_order(self) -> None:
        records = [
            {"id": 1, "email": "a@x", "name": "A"},
            {"id": 2, "email": "b@x", "name": "B"},
            {"id": 3, "email": "a@x", "name": "A"},
        ]
        report = DataQualityService.detect_duplicates(records, ["email", "name"])
        assert [[r["id"] for r in g] for g in report.duplicates] == [[1, 3]]
        assert [r["id"] for r in report.unique_records] == [1, 2]

    def test_identical_keys_form_one_group(self) -> None:
        records = [{"id": i, "k": "same"} for i in range(4)]
        report = DataQualityService.detect_duplicates(records, ["k"])
        assert len(report.duplicates) == 1
        assert [r["id"] for r in report.duplicates[0]] == [0, 1, 2, 3]
        assert [r["id"] for r in report.unique_records] == [0]

    def test_no_duplicates(self) -> None:
        report = DataQualityService.detect_duplicates([{"k": 1}, {"k": 2}], ["k"])
        assert report.duplicates == []
        assert len(report.unique_records) == 2

    def test_empty(self) -> None:
        report = DataQualityService.detect_duplicates([], ["k"])
        assert report.duplicates == []
        assert report.unique_records == []


class TestRecommendations:
    def test_all_good(self, offline_session: AsyncSession) -> None:
        service = DataQualityService(offline_session)
        assert service.generate_recommendations(
            DataQualityMetrics(**_metrics(0.9)),
        ) == []

    def test_all_bad(self, offline_session: AsyncSession) -> None:
        service = DataQualityService(offline_session)
        recs = service.generate_recommendations(
            DataQualityMetrics(**_metrics(0.5, [f"issue {i}" for i in range(6)])),
        )
        assert len(recs) == 6
        assert recs[-2] == "Consider a comprehensive data quality improvement initiative"
        assert recs[-1] == "Address the top issues to significantly improve data quality"

    def test_thresholds_configurable(self, offline_session: AsyncSession) -> None:
        config = QualityServiceConfig(
            dimension_thresholds={
                "completeness": 0.95,
                "accuracy": 0.0,
                "consistency": 0.0,
                "timeliness": 0.0,
            },
            overall_threshold=0.0,
        )
        service = DataQualityService(offline_session, config=config)
        recs = service.generate_recommendations(DataQualityMetrics(**_metrics(0.9)))
        assert recs == [
            "Improve data completeness by filling in missing required fields",
        ]


class TestCalculateMetrics:
    @pytest.mark.anyio
    async def test_live_connector(self, kb: KnowledgeBase) -> None:
        source = await _source(kb, "Megatrends", EntityKind.MEGATREND)
        await kb.megatrends.create(MegatrendCreate(
            name="Generative AI",
            description="Models in workflows.",
            category="Technology",
            impact=ImpactLevel.HIGH,
            timeframe="2025-2030",
            confidence=0.8,
            sources=["survey"],
            keywords=["ai"],
        ))
        metrics = await kb.quality.calculate_metrics(source.source_id)
        assert metrics.completeness == 1.0
        assert metrics.accuracy == 1.0

    @pytest.mark.anyio
    async def test_no_data(self, kb: KnowledgeBase) -> None:
        source = await _source(kb, "Unbound")
        metrics = await kb.quality.calculate_metrics(source.source_id)
        assert metrics.overall_score == 0.0
        assert metrics.issues == [NO_DATA_ISSUE]

    @pytest.mark.anyio
    async def test_latest_snapshot(
        self, kb: KnowledgeBase, db_session: AsyncSession,
    ) -> None:
        source = await _source(kb, "Unbound")
        await QualitySnapshotRepository(db_session).save_snapshot(
            source_id=source.source_id, **_metrics(0.6, ["stale"]),
        )
        metrics = await kb.quality.calculate_metrics(str(source.source_id))
        assert metrics.overall_score == pytest.approx(0.6)
        assert metrics.issues == ["stale"]

    @pytest.mark.anyio
    async def test_unknown_source(self, kb: KnowledgeBase) -> None:
        with pytest.raises(EntityNotFoundError):
            await kb.quality.calculate_metrics(uuid7())

    @pytest.mark.anyio
    async def test_malformed_source_id(self, kb: KnowledgeBase) -> None:
        with pytest.raises(EntityNotFoundError):
            await kb.quality.calculate_metrics("not-an-id")


class TestRunQualityCheck:
    @pytest.mark.anyio
    async def test_snapshot_per_source(
        self, kb: KnowledgeBase, db_session: AsyncSession,
    ) -> None:
        first = await _source(kb, "A source", EntityKind.PARTNER)
        await _source(kb, "B source")

        results = await kb.quality.run_quality_check()
        assert [r.source_name for r in results] == ["A source", "B source"]
        # Empty partner collection scores completeness 0 and accuracy 0.
        assert results[0].metrics.completeness == 0.0
        assert results[0].recommendations
        stored = await QualitySnapshotRepository(db_session).get_latest(first.source_id)
        assert len(stored) == 1

    @pytest.mark.anyio
    async def test_no_sources(self, kb: KnowledgeBase) -> None:
        assert await kb.quality.run_quality_check() == []


class TestHistory:
    @pytest.mark.anyio
    async def test_window(self, kb: KnowledgeBase, db_session: AsyncSession) -> None:
        source = await _source(kb, "History")
        repo = QualitySnapshotRepository(db_session)
        now = utc_now()
        await repo.save_snapshot(
            source_id=source.source_id, checked_at=now - timedelta(days=40), **_metrics(0.1),
        )
        await repo.save_snapshot(
            source_id=source.source_id, checked_at=now - timedelta(days=5), **_metrics(0.5),
        )
        await repo.save_snapshot(
            source_id=source.source_id, checked_at=now - timedelta(days=1), **_metrics(0.7),
        )

        history = await kb.quality.get_quality_history(source.source_id)
        assert [p.overall_score for p in history] == [0.5, 0.7]

        narrow = await kb.quality.get_quality_history(source.source_id, days=2)
        assert [p.overall_score for p in narrow] == [0.7]

    @pytest.mark.anyio
    async def test_zero_day_window_is_not_the_default(
        self, kb: KnowledgeBase, db_session: AsyncSession,
    ) -> None:
        source = await _source(kb, "Zero")
        repo = QualitySnapshotRepository(db_session)
        await repo.save_snapshot(
            source_id=source.source_id,
            checked_at=utc_now() - timedelta(days=1),
            **_metrics(0.6),
        )

        assert len(await kb.quality.get_quality_history(source.source_id)) == 1
        assert await kb.quality.get_quality_history(source.source_id, days=0) == []

    @pytest.mark.anyio
    async def test_malformed_id(self, kb: KnowledgeBase) -> None:
        assert await kb.quality.get_quality_history("bad") == []


class TestDashboard:
    @pytest.mark.anyio
    async def test_empty(self, kb: KnowledgeBase) -> None:
        dashboard = await kb.quality.get_quality_dashboard()
        assert dashboard.overall_score == 0.0
        assert dashboard.by_data_source == []
        assert dashboard.recent_issues == []
        assert dashboard.trend == QualityTrend.STABLE

    @pytest.mark.anyio
    async def test_scores_issues_and_trend(
        self, kb: KnowledgeBase, db_session: AsyncSession,
    ) -> None:
        up = await _source(kb, "Alpha")
        down = await _source(kb, "Beta")
        rising = await _source(kb, "Gamma")
        await _source(kb, "Never checked")

        repo = QualitySnapshotRepository(db_session)
        now = utc_now()

        async def snap(source, days_ago, score, issues=None):
            await repo.save_snapshot(
                source_id=source.source_id,
                checked_at=now - timedelta(days=days_ago),
                **_metrics(score, issues),
            )

        await snap(up, 3, 0.4)
        await snap(up, 2, 0.8, ["a1", "a2", "a3", "a4"])
        await snap(down, 3, 0.9)
        await snap(down, 1, 0.6, ["b1"])
        await snap(rising, 4, 0.2)
        await snap(rising, 3, 0.5)

        dashboard = await kb.quality.get_quality_dashboard()
        assert [s.name for s in dashboard.by_data_source] == ["Alpha", "Beta", "Gamma"]
        assert [s.issues for s in dashboard.by_data_source] == [4, 1, 0]
        assert dashboard.overall_score == pytest.approx((0.8 + 0.6 + 0.5) / 3)
        # Beta checked most recently, then Alpha; three issues per source at most.
        assert dashboard.recent_issues == ["b1", "a1", "a2", "a3"]
        assert dashboard.trend == QualityTrend.IMPROVING

    @pytest.mark.anyio
    async def test_declining(self, kb: KnowledgeBase, db_session: AsyncSession) -> None:
        source = await _source(kb, "Only")
        repo = QualitySnapshotRepository(db_session)
        now = utc_now()
        await repo.save_snapshot(
            source_id=source.source_id, checked_at=now - timedelta(days=2), **_metrics(0.9),
        )
        await repo.save_snapshot(
            source_id=source.source_id, checked_at=now - timedelta(days=1), **_metrics(0.3),
        )
        dashboard = await kb.quality.get_quality_dashboard()
        assert dashboard.trend == QualityTrend.DECLINING

    @pytest.mark.anyio
    async def test_issue_cap(self, kb: KnowledgeBase, db_session: AsyncSession) -> None:
        repo = QualitySnapshotRepository(db_session)
        for i in range(5):
            source = await _source(kb, f"Source {i}")
            await repo.save_snapshot(
                source_id=source.source_id,
                **_metrics(0.5, [f"s{i}-{n}" for n in range(3)]),
            )
        dashboard = await kb.quality.get_quality_dashboard()
        assert len(dashboard.recent_issues) == 10
