"""Pydantic models for the eight knowledge entity kinds.

Each kind has three shapes:
- ``<Kind>``: the persisted entity (identifier + timestamps), built from ORM rows
- ``<Kind>Create``: creation input, the entity without identifier
- ``<Kind>Update``: partial input; only fields explicitly set are applied

Numeric ranges (confidence, relevance) are deliberately not constrained on the
input models: range checks belong to ``validate()`` and come back as
``OUT_OF_RANGE`` findings instead of exceptions.
"""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field

from strategy_kb.models.common import (
    ImpactLevel,
    KBBase,
    KBRecord,
    UTCTimestamp,
    UUIDv7,
    utc_now,
)

# ---------------------------------------------------------------------------
# Kind-specific enums
# ---------------------------------------------------------------------------


class ValueCategory(StrEnum):
    COST_REDUCTION = "COST_REDUCTION"
    REVENUE_GROWTH = "REVENUE_GROWTH"
    EFFICIENCY = "EFFICIENCY"
    INNOVATION = "INNOVATION"
    CUSTOMER_EXPERIENCE = "CUSTOMER_EXPERIENCE"
    SUSTAINABILITY = "SUSTAINABILITY"


class ValidationLevel(StrEnum):
    """Evidence maturity: HYPOTHESIS < OBSERVED < VALIDATED < PROVEN."""

    HYPOTHESIS = "HYPOTHESIS"
    OBSERVED = "OBSERVED"
    VALIDATED = "VALIDATED"
    PROVEN = "PROVEN"


class MoveType(StrEnum):
    PRODUCT_LAUNCH = "PRODUCT_LAUNCH"
    ACQUISITION = "ACQUISITION"
    PARTNERSHIP = "PARTNERSHIP"
    MARKET_ENTRY = "MARKET_ENTRY"
    PRICE_CHANGE = "PRICE_CHANGE"
    STRATEGY_SHIFT = "STRATEGY_SHIFT"
    LEADERSHIP_CHANGE = "LEADERSHIP_CHANGE"


class PartnerType(StrEnum):
    TECHNOLOGY = "TECHNOLOGY"
    CONSULTING = "CONSULTING"
    SUPPLIER = "SUPPLIER"
    DISTRIBUTOR = "DISTRIBUTOR"
    RESEARCH = "RESEARCH"
    STRATEGIC = "STRATEGIC"


class RelationshipStatus(StrEnum):
    PROSPECT = "PROSPECT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    FORMER = "FORMER"


class SeedType(StrEnum):
    TECHNOLOGY = "TECHNOLOGY"
    BUSINESS_MODEL = "BUSINESS_MODEL"
    PRODUCT = "PRODUCT"
    SERVICE = "SERVICE"
    PROCESS = "PROCESS"


class MaturityLevel(StrEnum):
    CONCEPT = "CONCEPT"
    PROTOTYPE = "PROTOTYPE"
    PILOT = "PILOT"
    SCALING = "SCALING"
    MATURE = "MATURE"


class TrendPhase(StrEnum):
    EMERGING = "EMERGING"
    GROWING = "GROWING"
    PEAKING = "PEAKING"
    DECLINING = "DECLINING"
    FADING = "FADING"


# ---------------------------------------------------------------------------
# Megatrend
# ---------------------------------------------------------------------------


class MegatrendCreate(KBBase):
    name: str
    description: str
    category: str
    impact: ImpactLevel
    timeframe: str
    confidence: float
    sources: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class MegatrendUpdate(KBBase):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    impact: ImpactLevel | None = None
    timeframe: str | None = None
    confidence: float | None = None
    sources: list[str] | None = None
    keywords: list[str] | None = None


class Megatrend(KBRecord, MegatrendCreate):
    """A long-horizon structural shift."""

    megatrend_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class MegatrendAnalysis(KBRecord, frozen=True):
    """Immutable opportunity analysis of a megatrend (history row)."""

    analysis_id: UUIDv7
    megatrend_id: UUIDv7
    score: float = Field(ge=0.0, le=1.0)
    opportunity_level: ImpactLevel
    insights: str
    opportunities: list[str] = Field(default_factory=list)
    threats: list[str] = Field(default_factory=list)
    analysis_date: UTCTimestamp


# ---------------------------------------------------------------------------
# Value template
# ---------------------------------------------------------------------------


class ValueTemplateCreate(KBBase):
    name: str
    description: str
    category: ValueCategory
    target_segment: str
    value_proposition: str
    key_benefits: list[str] = Field(default_factory=list)
    use_cases: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)


class ValueTemplateUpdate(KBBase):
    name: str | None = None
    description: str | None = None
    category: ValueCategory | None = None
    target_segment: str | None = None
    value_proposition: str | None = None
    key_benefits: list[str] | None = None
    use_cases: list[str] | None = None
    success_metrics: list[str] | None = None


class ValueTemplate(KBRecord, ValueTemplateCreate):
    """A reusable value proposition for a target segment."""

    template_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class ValueApplication(KBRecord, frozen=True):
    """A record of a template applied to a concrete context."""

    application_id: UUIDv7
    template_id: UUIDv7
    context: str
    customization: str
    results: str | None = None
    applied_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Hidden need
# ---------------------------------------------------------------------------


class HiddenNeedCreate(KBBase):
    surface_need: str
    hidden_need: str
    root_cause: str
    customer_segment: str
    emotional_driver: str | None = None
    functional_driver: str | None = None
    social_driver: str | None = None
    validation_level: ValidationLevel = ValidationLevel.HYPOTHESIS
    evidence: list[str] = Field(default_factory=list)


class HiddenNeedUpdate(KBBase):
    surface_need: str | None = None
    hidden_need: str | None = None
    root_cause: str | None = None
    customer_segment: str | None = None
    emotional_driver: str | None = None
    functional_driver: str | None = None
    social_driver: str | None = None
    validation_level: ValidationLevel | None = None
    evidence: list[str] | None = None


class HiddenNeed(KBRecord, HiddenNeedCreate):
    """Gap between a stated need and the driver underneath it."""

    need_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class NeedInsight(KBRecord, frozen=True):
    """One generated insight for a hidden need (priority 0 is most urgent)."""

    insight_id: UUIDv7
    need_id: UUIDv7
    insight: str
    actionable: bool = True
    priority: int
    created_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Success case
# ---------------------------------------------------------------------------


class SuccessCaseCreate(KBBase):
    title: str
    description: str
    industry: str
    company_size: str
    challenge: str
    solution: str
    results: str
    key_factors: list[str] = Field(default_factory=list)
    lessons_learned: list[str] = Field(default_factory=list)
    metrics: dict[str, Any] | None = None


class SuccessCaseUpdate(KBBase):
    title: str | None = None
    description: str | None = None
    industry: str | None = None
    company_size: str | None = None
    challenge: str | None = None
    solution: str | None = None
    results: str | None = None
    key_factors: list[str] | None = None
    lessons_learned: list[str] | None = None
    metrics: dict[str, Any] | None = None


class SuccessCase(KBRecord, SuccessCaseCreate):
    case_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Seed
# ---------------------------------------------------------------------------


class SeedCreate(KBBase):
    name: str
    description: str
    type: SeedType
    maturity_level: MaturityLevel
    potential_markets: list[str] = Field(default_factory=list)
    required_resources: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    time_to_market: str | None = None
    estimated_investment: str | None = None


class SeedUpdate(KBBase):
    name: str | None = None
    description: str | None = None
    type: SeedType | None = None
    maturity_level: MaturityLevel | None = None
    potential_markets: list[str] | None = None
    required_resources: list[str] | None = None
    risks: list[str] | None = None
    time_to_market: str | None = None
    estimated_investment: str | None = None


class Seed(KBRecord, SeedCreate):
    """An in-house capability or idea that could be taken to market."""

    seed_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Partner
# ---------------------------------------------------------------------------


class PartnerCreate(KBBase):
    name: str
    description: str | None = None
    type: PartnerType
    industry: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    relationship_status: RelationshipStatus = RelationshipStatus.PROSPECT


class PartnerUpdate(KBBase):
    name: str | None = None
    description: str | None = None
    type: PartnerType | None = None
    industry: list[str] | None = None
    capabilities: list[str] | None = None
    relationship_status: RelationshipStatus | None = None


class Partner(KBRecord, PartnerCreate):
    partner_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Short-term trend
# ---------------------------------------------------------------------------


class ShortTermTrendCreate(KBBase):
    name: str
    description: str
    category: str
    current_phase: TrendPhase
    relevance: float
    megatrend_id: str | None = None
    sources: list[str] = Field(default_factory=list)


class ShortTermTrendUpdate(KBBase):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    current_phase: TrendPhase | None = None
    relevance: float | None = None
    megatrend_id: str | None = None
    sources: list[str] | None = None


class ShortTermTrend(KBRecord, ShortTermTrendCreate):
    """A near-term trend, optionally linked to a megatrend by id string."""

    trend_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


# ---------------------------------------------------------------------------
# Competitor
# ---------------------------------------------------------------------------


class CompetitorCreate(KBBase):
    name: str
    description: str | None = None
    industry: list[str] = Field(default_factory=list)
    market_position: str | None = None
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    products: list[str] = Field(default_factory=list)


class CompetitorUpdate(KBBase):
    name: str | None = None
    description: str | None = None
    industry: list[str] | None = None
    market_position: str | None = None
    strengths: list[str] | None = None
    weaknesses: list[str] | None = None
    products: list[str] | None = None


class Competitor(KBRecord, CompetitorCreate):
    competitor_id: UUIDv7
    created_at: UTCTimestamp
    updated_at: UTCTimestamp


class CompetitorMoveCreate(KBBase):
    type: MoveType
    description: str
    date: datetime = Field(default_factory=utc_now)
    impact: ImpactLevel
    response: str | None = None


class CompetitorMove(KBRecord, CompetitorMoveCreate, frozen=True):
    move_id: UUIDv7
    competitor_id: UUIDv7


class CompetitorAnalysis(KBRecord, frozen=True):
    """Immutable threat analysis of a competitor (history row)."""

    analysis_id: UUIDv7
    competitor_id: UUIDv7
    competitor_name: str
    strength_score: float = Field(ge=0.0, le=1.0)
    threat_level: ImpactLevel
    recent_activity: list[CompetitorMove] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    analysis_date: UTCTimestamp
