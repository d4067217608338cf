"""SQLAlchemy ORM table models for the strategy knowledge base.

All tables defined in a single file. Uses FlexJSON (JSONB on Postgres,
JSON on SQLite) for string sequences and free-form payloads.

Categories:
- ENTITY: one table per knowledge kind (hard delete, partial updates)
- IMMUTABLE: MegatrendAnalysis, NeedInsight, CompetitorAnalysis,
             DataQualitySnapshot (append-only history rows)
- OPERATIONAL: CompetitorMove, ValueApplication, DataSource
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import JSON

from strategy_kb.db.session import Base

# JSONB on PostgreSQL, plain JSON on SQLite (for tests)
FlexJSON = JSONB().with_variant(JSON(), "sqlite")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class MegatrendRow(Base):
    __tablename__ = "megatrends"

    megatrend_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    impact: Mapped[str] = mapped_column(String(20), nullable=False)
    timeframe: Mapped[str] = mapped_column(String(100), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    sources = mapped_column(FlexJSON, nullable=False, default=list)
    keywords = mapped_column(FlexJSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ValueTemplateRow(Base):
    __tablename__ = "value_templates"

    template_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    target_segment: Mapped[str] = mapped_column(String(255), nullable=False)
    value_proposition: Mapped[str] = mapped_column(Text, nullable=False)
    key_benefits = mapped_column(FlexJSON, nullable=False, default=list)
    use_cases = mapped_column(FlexJSON, nullable=False, default=list)
    success_metrics = mapped_column(FlexJSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class HiddenNeedRow(Base):
    __tablename__ = "hidden_needs"

    need_id: Mapped[UUID] = mapped_column(primary_key=True)
    surface_need: Mapped[str] = mapped_column(Text, nullable=False)
    hidden_need: Mapped[str] = mapped_column(Text, nullable=False)
    root_cause: Mapped[str] = mapped_column(Text, nullable=False)
    customer_segment: Mapped[str] = mapped_column(String(255), nullable=False)
    emotional_driver: Mapped[str | None] = mapped_column(Text, nullable=True)
    functional_driver: Mapped[str | None] = mapped_column(Text, nullable=True)
    social_driver: Mapped[str | None] = mapped_column(Text, nullable=True)
    validation_level: Mapped[str] = mapped_column(String(20), nullable=False)
    evidence = mapped_column(FlexJSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SuccessCaseRow(Base):
    __tablename__ = "success_cases"

    case_id: Mapped[UUID] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    industry: Mapped[str] = mapped_column(String(255), nullable=False)
    company_size: Mapped[str] = mapped_column(String(100), nullable=False)
    challenge: Mapped[str] = mapped_column(Text, nullable=False)
    solution: Mapped[str] = mapped_column(Text, nullable=False)
    results: Mapped[str] = mapped_column(Text, nullable=False)
    key_factors = mapped_column(FlexJSON, nullable=False, default=list)
    lessons_learned = mapped_column(FlexJSON, nullable=False, default=list)
    metrics = mapped_column(FlexJSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class SeedRow(Base):
    __tablename__ = "seeds"

    seed_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    maturity_level: Mapped[str] = mapped_column(String(50), nullable=False)
    potential_markets = mapped_column(FlexJSON, nullable=False, default=list)
    required_resources = mapped_column(FlexJSON, nullable=False, default=list)
    risks = mapped_column(FlexJSON, nullable=False, default=list)
    time_to_market: Mapped[str | None] = mapped_column(String(100), nullable=True)
    estimated_investment: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class PartnerRow(Base):
    __tablename__ = "partners"

    partner_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    industry = mapped_column(FlexJSON, nullable=False, default=list)
    capabilities = mapped_column(FlexJSON, nullable=False, default=list)
    relationship_status: Mapped[str] = mapped_column(String(50), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class ShortTermTrendRow(Base):
    """Near-term trend. ``megatrend_id`` is a plain reference string, not a FK."""

    __tablename__ = "short_term_trends"

    trend_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    current_phase: Mapped[str] = mapped_column(String(20), nullable=False)
    relevance: Mapped[float] = mapped_column(Float, nullable=False)
    megatrend_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    sources = mapped_column(FlexJSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CompetitorRow(Base):
    __tablename__ = "competitors"

    competitor_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    industry = mapped_column(FlexJSON, nullable=False, default=list)
    market_position: Mapped[str | None] = mapped_column(String(255), nullable=True)
    strengths = mapped_column(FlexJSON, nullable=False, default=list)
    weaknesses = mapped_column(FlexJSON, nullable=False, default=list)
    products = mapped_column(FlexJSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Activity: OPERATIONAL
# ---------------------------------------------------------------------------


class CompetitorMoveRow(Base):
    __tablename__ = "competitor_moves"

    move_id: Mapped[UUID] = mapped_column(primary_key=True)
    competitor_id: Mapped[UUID] = mapped_column(
        ForeignKey("competitors.competitor_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    impact: Mapped[str] = mapped_column(String(20), nullable=False)
    response: Mapped[str | None] = mapped_column(Text, nullable=True)


class ValueApplicationRow(Base):
    __tablename__ = "value_applications"

    application_id: Mapped[UUID] = mapped_column(primary_key=True)
    template_id: Mapped[UUID] = mapped_column(
        ForeignKey("value_templates.template_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    context: Mapped[str] = mapped_column(Text, nullable=False)
    customization: Mapped[str] = mapped_column(Text, nullable=False)
    results: Mapped[str | None] = mapped_column(Text, nullable=True)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Analysis history: IMMUTABLE
# ---------------------------------------------------------------------------


class MegatrendAnalysisRow(Base):
    """Append-only. Re-analysis inserts a new row."""

    __tablename__ = "megatrend_analyses"

    analysis_id: Mapped[UUID] = mapped_column(primary_key=True)
    megatrend_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    opportunity_level: Mapped[str] = mapped_column(String(20), nullable=False)
    insights: Mapped[str] = mapped_column(Text, nullable=False)
    opportunities = mapped_column(FlexJSON, nullable=False)
    threats = mapped_column(FlexJSON, nullable=False)
    analysis_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class NeedInsightRow(Base):
    """Append-only. Re-analysis inserts a new batch of insights."""

    __tablename__ = "need_insights"

    insight_id: Mapped[UUID] = mapped_column(primary_key=True)
    need_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    insight: Mapped[str] = mapped_column(Text, nullable=False)
    actionable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CompetitorAnalysisRow(Base):
    """Append-only. ``recent_activity`` is a JSON copy of the moves considered."""

    __tablename__ = "competitor_analyses"

    analysis_id: Mapped[UUID] = mapped_column(primary_key=True)
    competitor_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    competitor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    strength_score: Mapped[float] = mapped_column(Float, nullable=False)
    threat_level: Mapped[str] = mapped_column(String(20), nullable=False)
    recent_activity = mapped_column(FlexJSON, nullable=False)
    recommendations = mapped_column(FlexJSON, nullable=False)
    analysis_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


# ---------------------------------------------------------------------------
# Metadata and quality
# ---------------------------------------------------------------------------


class DataSourceRow(Base):
    __tablename__ = "data_sources"

    source_id: Mapped[UUID] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_kind: Mapped[str | None] = mapped_column(String(50), nullable=True)
    connection_info = mapped_column(FlexJSON, nullable=False, default=dict)
    sync_frequency: Mapped[str | None] = mapped_column(String(100), nullable=True)
    sync_status: Mapped[str] = mapped_column(String(20), nullable=False, default="IDLE")
    last_sync_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class DataQualitySnapshotRow(Base):
    """Append-only quality measurement per data source."""

    __tablename__ = "data_quality_snapshots"

    snapshot_id: Mapped[UUID] = mapped_column(primary_key=True)
    source_id: Mapped[UUID] = mapped_column(
        ForeignKey("data_sources.source_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    completeness: Mapped[float] = mapped_column(Float, nullable=False)
    accuracy: Mapped[float] = mapped_column(Float, nullable=False)
    consistency: Mapped[float] = mapped_column(Float, nullable=False)
    timeliness: Mapped[float] = mapped_column(Float, nullable=False)
    overall_score: Mapped[float] = mapped_column(Float, nullable=False)
    issues = mapped_column(FlexJSON, nullable=False)
    checked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
