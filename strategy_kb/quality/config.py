"""Quality service configuration.

Recommendation thresholds and dashboard limits. Defaults can be
overridden per deployment.

Deterministic -- no I/O in this module.
"""

from __future__ import annotations

from pydantic import Field

from strategy_kb.models.common import KBBase


class QualityServiceConfig(KBBase):
    """Configuration for :class:`DataQualityService`.

    A dimension below its threshold triggers that dimension's
    recommendation; ``overall_threshold`` and ``issue_count_threshold``
    drive the two collection-wide recommendations.
    """

    dimension_thresholds: dict[str, float] = Field(
        default_factory=lambda: {
            "completeness": 0.8,
            "accuracy": 0.8,
            "consistency": 0.8,
            "timeliness": 0.8,
        },
    )
    overall_threshold: float = 0.7
    issue_count_threshold: int = 5

    dashboard_snapshots_per_source: int = Field(default=2, ge=2)
    dashboard_issues_per_source: int = 3
    dashboard_max_issues: int = 10

    history_days: int = Field(default=30, gt=0)
