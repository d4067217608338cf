"""Seed script: load sample data into the strategy knowledge base.

Creates:
1. Three megatrends and two short-term trends linked to them
2. Two value templates, two hidden needs, one success case
3. Two seeds, two partners, two competitors (with market moves)
4. One DATABASE data source per entity kind, bound to that kind

Idempotent: safe to run multiple times; skips if the demo data source
already exists.

Usage:
    python -m scripts.seed          # against DATABASE_URL from .env
    pytest tests/scripts/test_seed.py  # against aiosqlite in-memory
"""

import asyncio
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.db.tables import DataSourceRow
from strategy_kb.knowledge_base import KnowledgeBase
from strategy_kb.models.common import EntityKind, ImpactLevel, utc_now
from strategy_kb.models.knowledge import (
    CompetitorCreate,
    CompetitorMoveCreate,
    HiddenNeedCreate,
    MaturityLevel,
    MegatrendCreate,
    MoveType,
    PartnerCreate,
    PartnerType,
    RelationshipStatus,
    SeedCreate,
    SeedType,
    ShortTermTrendCreate,
    SuccessCaseCreate,
    TrendPhase,
    ValidationLevel,
    ValueCategory,
    ValueTemplateCreate,
)
from strategy_kb.models.metadata import DataSourceConfig, DataSourceType

# Marker source used for the idempotency check
DEMO_SOURCE_PREFIX = "Demo"

# ---------------------------------------------------------------------------
# Sample records
# ---------------------------------------------------------------------------

SAMPLE_MEGATRENDS = [
    MegatrendCreate(
        name="Generative AI in the Enterprise",
        description="Foundation models move from pilots into core business workflows.",
        category="Technology",
        impact=ImpactLevel.CRITICAL,
        timeframe="2025-2030",
        confidence=0.85,
        sources=["Industry analyst survey 2025"],
        keywords=["ai", "automation", "productivity"],
    ),
    MegatrendCreate(
        name="Ageing Workforce",
        description="Experienced staff retire faster than they can be replaced.",
        category="Society",
        impact=ImpactLevel.HIGH,
        timeframe="2025-2040",
        confidence=0.9,
        sources=["National labour statistics"],
        keywords=["workforce", "demographics"],
    ),
    MegatrendCreate(
        name="Circular Supply Chains",
        description="Regulation and cost push manufacturers toward reuse and recycling.",
        category="Sustainability",
        impact=ImpactLevel.MEDIUM,
        timeframe="2026-2035",
        confidence=0.45,
        sources=[],
        keywords=["sustainability", "supply chain"],
    ),
]

SAMPLE_VALUE_TEMPLATES = [
    ValueTemplateCreate(
        name="Back-office Automation",
        description="Automate repetitive finance and HR processes.",
        category=ValueCategory.COST_REDUCTION,
        target_segment="Mid-size manufacturers",
        value_proposition="Cut processing cost per invoice by half within a year.",
        key_benefits=["Lower cost", "Fewer errors", "Faster close"],
        use_cases=["Invoice matching", "Payroll checks"],
        success_metrics=["Cost per invoice", "Days to close"],
    ),
    ValueTemplateCreate(
        name="Customer Self-service",
        description="Let customers resolve common requests without an agent.",
        category=ValueCategory.CUSTOMER_EXPERIENCE,
        target_segment="Retail banks",
        value_proposition="Faster answers for customers.",
        key_benefits=["Shorter waits"],
        use_cases=[],
        success_metrics=[],
    ),
]

SAMPLE_HIDDEN_NEEDS = [
    HiddenNeedCreate(
        surface_need="Managers ask for a faster reporting tool",
        hidden_need="Managers want to feel in control before meeting their directors",
        root_cause="Reports arrive too late to act on before reviews",
        customer_segment="Operations managers",
        emotional_driver="Confidence in front of leadership",
        functional_driver="Same-day figures",
        validation_level=ValidationLevel.OBSERVED,
        evidence=["Twelve interviews, March"],
    ),
    HiddenNeedCreate(
        surface_need="Staff request more training sessions",
        hidden_need="Staff are worried about being replaced by automation",
        root_cause="No visible career path after process changes",
        customer_segment="Operations staff",
        social_driver="Standing within the team",
    ),
]

SAMPLE_SUCCESS_CASES = [
    SuccessCaseCreate(
        title="Regional logistics digitisation",
        description="A regional carrier replaced paper dispatch with mobile apps.",
        industry="Logistics",
        company_size="500-1000",
        challenge="Dispatch errors and late deliveries",
        solution="Mobile dispatch with live tracking",
        results="On-time delivery rose from 82% to 95%",
        key_factors=["executive sponsorship", "driver training"],
        lessons_learned=["Pilot with one depot first"],
        metrics={"on_time_delivery": 0.95},
    ),
]

SAMPLE_SEEDS = [
    SeedCreate(
        name="Route optimisation engine",
        description="In-house solver used for our own fleet.",
        type=SeedType.TECHNOLOGY,
        maturity_level=MaturityLevel.PILOT,
        potential_markets=["logistics", "field service"],
        required_resources=["Two engineers"],
        risks=["Competing open-source solvers"],
        time_to_market="9 months",
    ),
    SeedCreate(
        name="Subscription maintenance",
        description="Fixed monthly fee for equipment upkeep.",
        type=SeedType.BUSINESS_MODEL,
        maturity_level=MaturityLevel.CONCEPT,
        potential_markets=["manufacturing"],
        risks=["Cash-flow timing"],
    ),
]

SAMPLE_PARTNERS = [
    PartnerCreate(
        name="Northwind Analytics",
        description="Data platform integrator.",
        type=PartnerType.TECHNOLOGY,
        industry=["Technology"],
        capabilities=["data engineering", "cloud migration"],
        relationship_status=RelationshipStatus.ACTIVE,
    ),
    PartnerCreate(
        name="Harbor Advisory",
        type=PartnerType.CONSULTING,
        industry=["Logistics"],
        capabilities=["change management"],
    ),
]

SAMPLE_COMPETITORS = [
    CompetitorCreate(
        name="Apex Systems",
        description="Large incumbent with a broad product suite.",
        industry=["Technology", "Logistics"],
        market_position="Leader",
        strengths=["brand", "distribution", "installed base"],
        weaknesses=["slow releases"],
        products=["Apex ERP", "Apex Fleet"],
    ),
    CompetitorCreate(
        name="Lumen Labs",
        description="Fast-moving start-up.",
        industry=["Technology"],
        strengths=["product speed"],
        weaknesses=[],
        products=["Lumen Assist"],
    ),
]


def _sample_trends(megatrend_ids: list[str]) -> list[ShortTermTrendCreate]:
    return [
        ShortTermTrendCreate(
            name="AI copilots for analysts",
            description="Assistants embedded in spreadsheets and BI tools.",
            category="Technology",
            current_phase=TrendPhase.GROWING,
            relevance=0.8,
            megatrend_id=megatrend_ids[0],
            sources=["Vendor release notes"],
        ),
        ShortTermTrendCreate(
            name="Take-back programmes",
            description="Manufacturers collecting used products for refurbishment.",
            category="Sustainability",
            current_phase=TrendPhase.EMERGING,
            relevance=0.5,
            megatrend_id=megatrend_ids[2],
        ),
    ]


# ---------------------------------------------------------------------------
# Seed functions
# ---------------------------------------------------------------------------


async def seed_entities(kb: KnowledgeBase) -> dict[EntityKind, int]:
    """Create the sample records for every entity kind. Returns counts."""
    megatrends = await kb.megatrends.create_many(SAMPLE_MEGATRENDS)
    trends = await kb.short_term_trends.create_many(
        _sample_trends([str(m.megatrend_id) for m in megatrends]),
    )
    templates = await kb.value_templates.create_many(SAMPLE_VALUE_TEMPLATES)
    needs = await kb.hidden_needs.create_many(SAMPLE_HIDDEN_NEEDS)
    cases = await kb.success_cases.create_many(SAMPLE_SUCCESS_CASES)
    seeds = await kb.seeds.create_many(SAMPLE_SEEDS)
    partners = await kb.partners.create_many(SAMPLE_PARTNERS)
    competitors = await kb.competitors.create_many(SAMPLE_COMPETITORS)

    now = utc_now()
    apex = competitors[0]
    for days_ago, move_type, text in (
        (3, MoveType.PRODUCT_LAUNCH, "Launched Apex Fleet 2"),
        (20, MoveType.PARTNERSHIP, "Partnered with a cloud provider"),
        (90, MoveType.PRICE_CHANGE, "Cut list prices by 10%"),
    ):
        await kb.competitors.add_move(
            apex.competitor_id,
            CompetitorMoveCreate(
                type=move_type,
                description=text,
                date=now - timedelta(days=days_ago),
                impact=ImpactLevel.MEDIUM,
            ),
        )

    return {
        EntityKind.MEGATREND: len(megatrends),
        EntityKind.SHORT_TERM_TREND: len(trends),
        EntityKind.VALUE_TEMPLATE: len(templates),
        EntityKind.HIDDEN_NEED: len(needs),
        EntityKind.SUCCESS_CASE: len(cases),
        EntityKind.SEED: len(seeds),
        EntityKind.PARTNER: len(partners),
        EntityKind.COMPETITOR: len(competitors),
    }


async def seed_data_sources(kb: KnowledgeBase) -> int:
    """Register one DATABASE source per entity kind."""
    for kind in EntityKind:
        await kb.metadata.register_data_source(DataSourceConfig(
            name=f"{DEMO_SOURCE_PREFIX} {kind.value.replace('_', ' ').title()}",
            kind=DataSourceType.DATABASE,
            entity_kind=kind,
            connection_info={"table": kind.value.lower()},
            sync_frequency="daily",
        ))
    return len(EntityKind)


async def seed_demo(session: AsyncSession) -> dict:
    """Idempotent demo seed: entities + data sources + one quality check.

    Returns dict with keys: created (bool), entity_counts, source_count.
    If demo sources already exist, returns created=False and skips.
    """
    result = await session.execute(
        select(DataSourceRow).where(
            DataSourceRow.name.startswith(f"{DEMO_SOURCE_PREFIX} "),
        ).limit(1),
    )
    if result.scalar_one_or_none() is not None:
        return {"created": False, "entity_counts": {}, "source_count": 0}

    kb = KnowledgeBase(session)
    counts = await seed_entities(kb)
    source_count = await seed_data_sources(kb)
    checks = await kb.quality.run_quality_check()

    return {
        "created": True,
        "entity_counts": counts,
        "source_count": source_count,
        "quality_checks": len(checks),
    }


# ---------------------------------------------------------------------------
# CLI entry point: python -m scripts.seed
# ---------------------------------------------------------------------------


async def _run_seed() -> None:
    """Run the seed against the configured database (idempotent)."""
    from strategy_kb.config.settings import get_settings
    from strategy_kb.db.session import create_engine, create_session_factory, session_scope
    from strategy_kb.observability.logging import configure_logging

    settings = get_settings()
    configure_logging(settings)
    engine = create_engine(settings=settings)
    try:
        async with session_scope(create_session_factory(engine)) as session:
            result = await seed_demo(session)
    finally:
        await engine.dispose()

    if not result["created"]:
        print("Demo data already seeded. Skipping.")
        return

    print("Seed complete.")
    for kind, count in result["entity_counts"].items():
        print(f"  {kind.value:<18} {count:>3}")
    print(f"  {'DATA_SOURCES':<18} {result['source_count']:>3}")


if __name__ == "__main__":
    asyncio.run(_run_seed())
