"""Quality engine models: standardization rules, check results, dashboard.

Deterministic -- no I/O in this module.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import Field

from strategy_kb.models.common import (
    DataQualityMetrics,
    KBBase,
    KBRecord,
    UTCTimestamp,
    UUIDv7,
)


class StandardizationType(StrEnum):
    TRIM = "trim"
    LOWERCASE = "lowercase"
    UPPERCASE = "uppercase"
    NORMALIZE = "normalize"
    CUSTOM = "custom"


class QualityTrend(StrEnum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


# ---------------------------------------------------------------------------
# Frozen dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StandardizationRule:
    """Transform applied to one string field.

    ``transformer`` is only consulted for ``CUSTOM`` rules.
    """

    field: str
    type: StandardizationType
    transformer: Callable[[str], str] | None = None


@dataclass(frozen=True)
class DuplicateReport:
    """Groups sharing a key (size > 1) and first occurrences in input order."""

    duplicates: list[list[Mapping[str, Any]]] = field(default_factory=list)
    unique_records: list[Mapping[str, Any]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class QualitySnapshot(KBRecord, frozen=True):
    """One persisted quality measurement for a data source (append-only)."""

    snapshot_id: UUIDv7
    source_id: UUIDv7
    completeness: float
    accuracy: float
    consistency: float
    timeliness: float
    overall_score: float
    issues: list[str] = Field(default_factory=list)
    checked_at: UTCTimestamp

    def to_metrics(self) -> DataQualityMetrics:
        return DataQualityMetrics(
            completeness=self.completeness,
            accuracy=self.accuracy,
            consistency=self.consistency,
            timeliness=self.timeliness,
            overall_score=self.overall_score,
            issues=list(self.issues),
        )


class QualityCheckResult(KBBase):
    source_id: UUIDv7
    source_name: str
    metrics: DataQualityMetrics
    recommendations: list[str] = Field(default_factory=list)
    timestamp: UTCTimestamp


class QualityHistoryPoint(KBBase, frozen=True):
    date: UTCTimestamp
    overall_score: float


class SourceQualityScore(KBBase, frozen=True):
    source_id: UUIDv7
    name: str
    score: float
    issues: int


class QualityDashboard(KBBase):
    overall_score: float = 0.0
    by_data_source: list[SourceQualityScore] = Field(default_factory=list)
    recent_issues: list[str] = Field(default_factory=list)
    trend: QualityTrend = QualityTrend.STABLE
