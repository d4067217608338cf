"""Initial schema: entity tables, history, activity, data sources.

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    # -- Entities --
    op.create_table(
        "megatrends",
        sa.Column("megatrend_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("impact", sa.String(20), nullable=False),
        sa.Column("timeframe", sa.String(100), nullable=False),
        sa.Column("confidence", sa.Float, nullable=False),
        sa.Column("sources", JSONB, nullable=False),
        sa.Column("keywords", JSONB, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "value_templates",
        sa.Column("template_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("target_segment", sa.String(255), nullable=False),
        sa.Column("value_proposition", sa.Text, nullable=False),
        sa.Column("key_benefits", JSONB, nullable=False),
        sa.Column("use_cases", JSONB, nullable=False),
        sa.Column("success_metrics", JSONB, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "hidden_needs",
        sa.Column("need_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("surface_need", sa.Text, nullable=False),
        sa.Column("hidden_need", sa.Text, nullable=False),
        sa.Column("root_cause", sa.Text, nullable=False),
        sa.Column("customer_segment", sa.String(255), nullable=False),
        sa.Column("emotional_driver", sa.Text, nullable=True),
        sa.Column("functional_driver", sa.Text, nullable=True),
        sa.Column("social_driver", sa.Text, nullable=True),
        sa.Column("validation_level", sa.String(20), nullable=False),
        sa.Column("evidence", JSONB, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "success_cases",
        sa.Column("case_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("industry", sa.String(255), nullable=False),
        sa.Column("company_size", sa.String(100), nullable=False),
        sa.Column("challenge", sa.Text, nullable=False),
        sa.Column("solution", sa.Text, nullable=False),
        sa.Column("results", sa.Text, nullable=False),
        sa.Column("key_factors", JSONB, nullable=False),
        sa.Column("lessons_learned", JSONB, nullable=False),
        sa.Column("metrics", JSONB, nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "seeds",
        sa.Column("seed_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("maturity_level", sa.String(50), nullable=False),
        sa.Column("potential_markets", JSONB, nullable=False),
        sa.Column("required_resources", JSONB, nullable=False),
        sa.Column("risks", JSONB, nullable=False),
        sa.Column("time_to_market", sa.String(100), nullable=True),
        sa.Column("estimated_investment", sa.String(100), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "partners",
        sa.Column("partner_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("industry", JSONB, nullable=False),
        sa.Column("capabilities", JSONB, nullable=False),
        sa.Column("relationship_status", sa.String(50), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "short_term_trends",
        sa.Column("trend_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("current_phase", sa.String(20), nullable=False),
        sa.Column("relevance", sa.Float, nullable=False),
        sa.Column("megatrend_id", sa.String(64), nullable=True, index=True),
        sa.Column("sources", JSONB, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        "competitors",
        sa.Column("competitor_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("industry", JSONB, nullable=False),
        sa.Column("market_position", sa.String(255), nullable=True),
        sa.Column("strengths", JSONB, nullable=False),
        sa.Column("weaknesses", JSONB, nullable=False),
        sa.Column("products", JSONB, nullable=False),
        *_timestamps(),
    )

    # -- Activity (OPERATIONAL) --
    op.create_table(
        "competitor_moves",
        sa.Column("move_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("competitor_id", UUID(as_uuid=True),
                  sa.ForeignKey("competitors.competitor_id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("type", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column("impact", sa.String(20), nullable=False),
        sa.Column("response", sa.Text, nullable=True),
    )

    op.create_table(
        "value_applications",
        sa.Column("application_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("template_id", UUID(as_uuid=True),
                  sa.ForeignKey("value_templates.template_id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("context", sa.Text, nullable=False),
        sa.Column("customization", sa.Text, nullable=False),
        sa.Column("results", sa.Text, nullable=True),
        sa.Column("applied_at", sa.DateTime(timezone=True), nullable=False),
    )

    # -- Analysis history (IMMUTABLE) --
    op.create_table(
        "megatrend_analyses",
        sa.Column("analysis_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("megatrend_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("score", sa.Float, nullable=False),
        sa.Column("opportunity_level", sa.String(20), nullable=False),
        sa.Column("insights", sa.Text, nullable=False),
        sa.Column("opportunities", JSONB, nullable=False),
        sa.Column("threats", JSONB, nullable=False),
        sa.Column("analysis_date", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "need_insights",
        sa.Column("insight_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("need_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("insight", sa.Text, nullable=False),
        sa.Column("actionable", sa.Boolean, nullable=False),
        sa.Column("priority", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "competitor_analyses",
        sa.Column("analysis_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("competitor_id", UUID(as_uuid=True), nullable=False, index=True),
        sa.Column("competitor_name", sa.String(255), nullable=False),
        sa.Column("strength_score", sa.Float, nullable=False),
        sa.Column("threat_level", sa.String(20), nullable=False),
        sa.Column("recent_activity", JSONB, nullable=False),
        sa.Column("recommendations", JSONB, nullable=False),
        sa.Column("analysis_date", sa.DateTime(timezone=True), nullable=False),
    )

    # -- Metadata and quality --
    op.create_table(
        "data_sources",
        sa.Column("source_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("kind", sa.String(50), nullable=False),
        sa.Column("entity_kind", sa.String(50), nullable=True),
        sa.Column("connection_info", JSONB, nullable=False),
        sa.Column("sync_frequency", sa.String(100), nullable=True),
        sa.Column("sync_status", sa.String(20), nullable=False, server_default="IDLE"),
        sa.Column("last_sync_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "data_quality_snapshots",
        sa.Column("snapshot_id", UUID(as_uuid=True), primary_key=True),
        sa.Column("source_id", UUID(as_uuid=True),
                  sa.ForeignKey("data_sources.source_id", ondelete="CASCADE"),
                  nullable=False, index=True),
        sa.Column("completeness", sa.Float, nullable=False),
        sa.Column("accuracy", sa.Float, nullable=False),
        sa.Column("consistency", sa.Float, nullable=False),
        sa.Column("timeliness", sa.Float, nullable=False),
        sa.Column("overall_score", sa.Float, nullable=False),
        sa.Column("issues", JSONB, nullable=False),
        sa.Column("checked_at", sa.DateTime(timezone=True), nullable=False, index=True),
    )


def downgrade() -> None:
    for table in (
        "data_quality_snapshots",
        "data_sources",
        "competitor_analyses",
        "need_insights",
        "megatrend_analyses",
        "value_applications",
        "competitor_moves",
        "competitors",
        "short_term_trends",
        "partners",
        "seeds",
        "success_cases",
        "hidden_needs",
        "value_templates",
        "megatrends",
    ):
        op.drop_table(table)
