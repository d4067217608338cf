"""Shared quality formula behind every connector's ``get_quality_metrics``.

Completeness of a record is the share of required fields that are filled;
a sequence counts as filled only when non-empty. Accuracy is the share of
records with no evidentiary issue. Consistency and timeliness are fixed
at 1.0. The overall score is the unweighted mean of the four.

Deterministic -- no I/O in this module.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

from strategy_kb.models.common import DataQualityMetrics

RecordIssues = Callable[[Mapping[str, Any]], list[str]]

CONSISTENCY_PLACEHOLDER = 1.0
TIMELINESS_PLACEHOLDER = 1.0


def is_filled(value: Any) -> bool:
    """None, ``""`` and empty sequences/mappings are not filled; ``0`` is."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) > 0
    return True


def calculate_completeness(
    record: Mapping[str, Any],
    required_fields: Sequence[str],
) -> float:
    """Fraction of *required_fields* filled in *record*, in [0, 1].

    An empty requirement list is vacuously complete.
    """
    if not required_fields:
        return 1.0
    filled = sum(1 for field in required_fields if is_filled(record.get(field)))
    return filled / len(required_fields)


def overall(
    completeness: float, accuracy: float, consistency: float, timeliness: float,
) -> float:
    return (completeness + accuracy + consistency + timeliness) / 4


def score_collection(
    records: Sequence[Mapping[str, Any]],
    required_fields: Sequence[str],
    record_issues: RecordIssues | None = None,
) -> DataQualityMetrics:
    """Score a whole collection.

    An empty collection scores completeness 0 and accuracy 0.
    """
    issues: list[str] = []
    completeness_total = 0.0
    accurate = 0

    for record in records:
        completeness_total += calculate_completeness(record, required_fields)
        found = record_issues(record) if record_issues is not None else []
        if found:
            issues.extend(found)
        else:
            accurate += 1

    count = len(records)
    completeness = min(1.0, completeness_total / count) if count else 0.0
    accuracy = accurate / count if count else 0.0

    return DataQualityMetrics(
        completeness=completeness,
        accuracy=accuracy,
        consistency=CONSISTENCY_PLACEHOLDER,
        timeliness=TIMELINESS_PLACEHOLDER,
        overall_score=overall(
            completeness, accuracy, CONSISTENCY_PLACEHOLDER, TIMELINESS_PLACEHOLDER,
        ),
        issues=issues,
    )
