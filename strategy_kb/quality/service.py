"""Data quality service: standardization, validation, scoring and dashboard.

The pure methods (``standardize``, ``validate_data``, ``detect_duplicates``,
``calculate_completeness``, ``generate_recommendations``) never touch the
session. The rest read data sources and append quality snapshots; like the
repositories, they flush but never commit.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Mapping, Sequence
from datetime import timedelta
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.connectors.base import EntityConnector, coerce_id
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import (
    DataQualityMetrics,
    DataValidationResult,
    EntityKind,
    ValidationIssue,
    as_utc,
    utc_now,
)
from strategy_kb.models.data_quality import (
    DuplicateReport,
    QualityCheckResult,
    QualityDashboard,
    QualityHistoryPoint,
    QualitySnapshot,
    QualityTrend,
    SourceQualityScore,
    StandardizationRule,
    StandardizationType,
)
from strategy_kb.quality.config import QualityServiceConfig
from strategy_kb.quality.scoring import calculate_completeness
from strategy_kb.repositories.data_quality import QualitySnapshotRepository
from strategy_kb.repositories.data_sources import DataSourceRepository

logger = structlog.get_logger(__name__)

DATA_SOURCE = "DATA_SOURCE"
NO_DATA_ISSUE = "No quality data available yet"

_RECOMMENDATIONS: dict[str, str] = {
    "completeness": "Improve data completeness by filling in missing required fields",
    "accuracy": "Validate data against source of truth to improve accuracy",
    "consistency": "Standardize data formats and enforce validation rules",
    "timeliness": "Increase sync frequency or implement real-time updates",
}
_OVERALL_RECOMMENDATION = (
    "Consider a comprehensive data quality improvement initiative"
)
_ISSUES_RECOMMENDATION = (
    "Address the top issues to significantly improve data quality"
)


def normalize_text(value: str) -> str:
    """Compatibility-fold, lowercase, and collapse whitespace."""
    text = unicodedata.normalize("NFKC", value).lower()
    text = unicodedata.normalize("NFKC", text)
    return " ".join(text.split())


def value_category(value: Any) -> str:
    """Runtime category used by ``validate_data`` type checks."""
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


class DataQualityService:
    """Quality & Standardization Engine.

    Parameters
    ----------
    session:
        Caller-owned session used for data sources and snapshots.
    connectors:
        Live connectors by entity kind. A data source bound to one of these
        kinds is scored from the live collection.
    config:
        Recommendation thresholds and dashboard limits.
    """

    def __init__(
        self,
        session: AsyncSession,
        connectors: Mapping[EntityKind, EntityConnector] | None = None,
        config: QualityServiceConfig | None = None,
    ) -> None:
        self._session = session
        self._connectors = dict(connectors or {})
        self._config = config or QualityServiceConfig()
        self._sources = DataSourceRepository(session)
        self._snapshots = QualitySnapshotRepository(session)

    # ------------------------------------------------------------------
    # Pure operations
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_completeness(
        record: Mapping[str, Any], required_fields: Sequence[str],
    ) -> float:
        return calculate_completeness(record, required_fields)

    @staticmethod
    def standardize(
        record: Mapping[str, Any],
        rules: Sequence[StandardizationRule],
    ) -> dict[str, Any]:
        """Apply *rules* to string fields; everything else passes through.

        Idempotent for trim, lowercase, uppercase and normalize rules.
        """
        result = dict(record)
        for rule in rules:
            value = result.get(rule.field)
            if not isinstance(value, str):
                continue
            kind = StandardizationType(rule.type)
            if kind == StandardizationType.TRIM:
                result[rule.field] = value.strip()
            elif kind == StandardizationType.LOWERCASE:
                result[rule.field] = value.lower()
            elif kind == StandardizationType.UPPERCASE:
                result[rule.field] = value.upper()
            elif kind == StandardizationType.NORMALIZE:
                result[rule.field] = normalize_text(value)
            elif rule.transformer is not None:
                result[rule.field] = rule.transformer(value)
        return result

    @staticmethod
    def validate_data(
        record: Mapping[str, Any],
        required_fields: Sequence[str],
        field_types: Mapping[str, str] | None = None,
    ) -> DataValidationResult:
        """Check required fields and, optionally, value categories.

        Categories: ``string``, ``number``, ``boolean``, ``array``, ``object``.
        """
        errors: list[ValidationIssue] = []
        for field in required_fields:
            value = record.get(field)
            if value is None or value == "":
                errors.append(ValidationIssue(
                    field=field,
                    message=f'Required field "{field}" is missing or empty',
                    code="REQUIRED_FIELD",
                ))

        for field, expected in (field_types or {}).items():
            value = record.get(field)
            if value is None:
                continue
            actual = value_category(value)
            if actual != expected:
                errors.append(ValidationIssue(
                    field=field,
                    message=f'Field "{field}" expected {expected} but got {actual}',
                    code="TYPE_MISMATCH",
                ))
        return DataValidationResult(errors=errors)

    @staticmethod
    def detect_duplicates(
        records: Sequence[Mapping[str, Any]],
        key_fields: Sequence[str],
    ) -> DuplicateReport:
        """Group records by their pipe-joined key values, in input order."""
        groups: dict[str, list[Mapping[str, Any]]] = {}
        unique: list[Mapping[str, Any]] = []
        for record in records:
            key = "|".join(str(record.get(field)) for field in key_fields)
            if key in groups:
                groups[key].append(record)
            else:
                groups[key] = [record]
                unique.append(record)
        return DuplicateReport(
            duplicates=[group for group in groups.values() if len(group) > 1],
            unique_records=unique,
        )

    def generate_recommendations(self, metrics: DataQualityMetrics) -> list[str]:
        cfg = self._config
        recommendations = [
            text
            for dimension, text in _RECOMMENDATIONS.items()
            if getattr(metrics, dimension) < cfg.dimension_thresholds[dimension]
        ]
        if metrics.overall_score < cfg.overall_threshold:
            recommendations.append(_OVERALL_RECOMMENDATION)
        if len(metrics.issues) > cfg.issue_count_threshold:
            recommendations.append(_ISSUES_RECOMMENDATION)
        return recommendations

    # ------------------------------------------------------------------
    # Source scoring
    # ------------------------------------------------------------------

    async def calculate_metrics(self, source_id: UUID | str) -> DataQualityMetrics:
        """Current metrics for one data source.

        Live connector metrics when the source is bound to an entity kind,
        else the latest snapshot, else zero metrics.

        Raises
        ------
        EntityNotFoundError
            If the data source does not exist.
        """
        key = coerce_id(source_id)
        source = await self._sources.get(key) if key is not None else None
        if source is None:
            raise EntityNotFoundError(DATA_SOURCE, source_id)

        if source.entity_kind:
            connector = self._connectors.get(EntityKind(source.entity_kind))
            if connector is not None:
                return await connector.get_quality_metrics()

        latest = await self._snapshots.get_latest(source.source_id, limit=1)
        if latest:
            return QualitySnapshot.model_validate(latest[0]).to_metrics()

        return DataQualityMetrics(issues=[NO_DATA_ISSUE])

    async def run_quality_check(self) -> list[QualityCheckResult]:
        """Score every registered source and append one snapshot each."""
        results: list[QualityCheckResult] = []
        for source in await self._sources.list_all():
            metrics = await self.calculate_metrics(source.source_id)
            snapshot = await self._snapshots.save_snapshot(
                source_id=source.source_id,
                completeness=metrics.completeness,
                accuracy=metrics.accuracy,
                consistency=metrics.consistency,
                timeliness=metrics.timeliness,
                overall_score=metrics.overall_score,
                issues=metrics.issues,
            )
            results.append(QualityCheckResult(
                source_id=source.source_id,
                source_name=source.name,
                metrics=metrics,
                recommendations=self.generate_recommendations(metrics),
                timestamp=snapshot.checked_at,
            ))
        logger.info("quality_check_completed", sources=len(results))
        return results

    async def get_quality_history(
        self, source_id: UUID | str, days: int | None = None,
    ) -> list[QualityHistoryPoint]:
        """Overall scores within the window, oldest first."""
        key = coerce_id(source_id)
        if key is None:
            return []
        window = days if days is not None else self._config.history_days
        since = utc_now() - timedelta(days=window)
        rows = await self._snapshots.get_since(key, since)
        return [
            QualityHistoryPoint(date=row.checked_at, overall_score=row.overall_score)
            for row in rows
        ]

    async def get_quality_dashboard(self) -> QualityDashboard:
        """Latest score per source, recent issues, and the direction of change.

        Trend compares each source's two latest snapshots: ``improving`` if
        more sources rose than fell, ``declining`` if the reverse.
        """
        cfg = self._config
        scores: list[SourceQualityScore] = []
        latest_snapshots: list[QualitySnapshot] = []
        improving = declining = 0

        for source in await self._sources.list_all():
            rows = await self._snapshots.get_latest(
                source.source_id, limit=cfg.dashboard_snapshots_per_source,
            )
            if not rows:
                continue
            latest = QualitySnapshot.model_validate(rows[0])
            latest_snapshots.append(latest)
            scores.append(SourceQualityScore(
                source_id=source.source_id,
                name=source.name,
                score=latest.overall_score,
                issues=len(latest.issues),
            ))
            if len(rows) > 1:
                previous = rows[1].overall_score
                if latest.overall_score > previous:
                    improving += 1
                elif latest.overall_score < previous:
                    declining += 1

        # Most recently checked sources first.
        latest_snapshots.sort(key=lambda s: as_utc(s.checked_at), reverse=True)
        recent_issues = [
            issue
            for snapshot in latest_snapshots
            for issue in snapshot.issues[: cfg.dashboard_issues_per_source]
        ][: cfg.dashboard_max_issues]

        if improving > declining:
            trend = QualityTrend.IMPROVING
        elif declining > improving:
            trend = QualityTrend.DECLINING
        else:
            trend = QualityTrend.STABLE

        overall = sum(s.score for s in scores) / len(scores) if scores else 0.0
        return QualityDashboard(
            overall_score=overall,
            by_data_source=scores,
            recent_issues=recent_issues,
            trend=trend,
        )
