"""Analysis heuristics for megatrends, competitors and hidden needs.

Pure functions over entity attributes: bounded scores, a four-tier label
and short recommendation lists. Connectors call these and persist the
results as history rows.

Deterministic -- no I/O in this module.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from strategy_kb.models.common import ImpactLevel

# Impact label -> weight used by the megatrend opportunity score.
_IMPACT_WEIGHTS: dict[ImpactLevel, float] = {
    ImpactLevel.LOW: 0.25,
    ImpactLevel.MEDIUM: 0.5,
    ImpactLevel.HIGH: 0.75,
    ImpactLevel.CRITICAL: 1.0,
}

# Lower bounds (exclusive) for each label, highest first.
_LEVEL_THRESHOLDS: tuple[tuple[float, ImpactLevel], ...] = (
    (0.7, ImpactLevel.CRITICAL),
    (0.5, ImpactLevel.HIGH),
    (0.3, ImpactLevel.MEDIUM),
)

COMPETITOR_RECENT_MOVES = 5


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def classify_level(score: float) -> ImpactLevel:
    """Map a score to LOW/MEDIUM/HIGH/CRITICAL.

    Monotonic: a higher score never yields a lower tier.
    """
    for threshold, level in _LEVEL_THRESHOLDS:
        if score > threshold:
            return level
    return ImpactLevel.LOW


# ---------------------------------------------------------------------------
# Megatrends
# ---------------------------------------------------------------------------


def megatrend_score(impact: ImpactLevel, confidence: float) -> float:
    return clamp((_IMPACT_WEIGHTS[ImpactLevel(impact)] + confidence) / 2)


def megatrend_insight(
    impact: ImpactLevel, category: str, confidence: float, timeframe: str,
) -> str:
    pct = round(confidence * 100)
    return (
        f"This {ImpactLevel(impact).value.lower()} impact megatrend in {category} "
        f"has a confidence level of {pct}%. "
        f"It is expected to develop over the {timeframe} timeframe."
    )


def megatrend_opportunities(impact: ImpactLevel) -> list[str]:
    if ImpactLevel(impact) in (ImpactLevel.HIGH, ImpactLevel.CRITICAL):
        return [
            "Early adoption can provide competitive advantage",
            "Potential for market leadership in emerging space",
        ]
    return []


def megatrend_threats(confidence: float) -> list[str]:
    if confidence < 0.5:
        return ["Uncertainty may lead to misallocated resources"]
    return []


# ---------------------------------------------------------------------------
# Competitors
# ---------------------------------------------------------------------------


def competitor_strength(
    strengths: int, products: int, recent_moves: int,
) -> float:
    """Strength from list sizes; moves beyond the recent window are not counted."""
    recent_moves = min(recent_moves, COMPETITOR_RECENT_MOVES)
    return clamp(0.15 * strengths + 0.1 * products + 0.1 * recent_moves)


def competitor_recommendations(
    strengths: Sequence[str],
    weaknesses: Sequence[str],
    recent_moves: int,
) -> list[str]:
    recommendations: list[str] = []
    if len(strengths) > len(weaknesses):
        recommendations.append("Focus on areas where competitor is weak")
    if recent_moves > 3:
        recommendations.append("Monitor frequent activity closely")
    for weakness in list(weaknesses)[:2]:
        recommendations.append(f"Exploit weakness: {weakness}")
    return recommendations


# ---------------------------------------------------------------------------
# Hidden needs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InsightDraft:
    """An insight before it is persisted. Priority 0 is most urgent."""

    insight: str
    priority: int
    actionable: bool = True


def need_insights(
    root_cause: str,
    emotional_driver: str | None = None,
    functional_driver: str | None = None,
    social_driver: str | None = None,
) -> list[InsightDraft]:
    """One insight per present driver plus the root cause, by priority."""
    drafts: list[InsightDraft] = []
    if emotional_driver:
        drafts.append(InsightDraft(f"Address emotional need: {emotional_driver}", 1))
    if functional_driver:
        drafts.append(
            InsightDraft(f"Solve functional requirement: {functional_driver}", 2)
        )
    if social_driver:
        drafts.append(InsightDraft(f"Consider social context: {social_driver}", 3))
    drafts.append(InsightDraft(f"Root cause to address: {root_cause}", 0))
    return sorted(drafts, key=lambda d: d.priority)
