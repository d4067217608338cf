"""Tests for SQLAlchemy ORM models in strategy_kb/db/tables.py.

Tests verify:
- All 15 tables are registered on Base.metadata
- FlexJSON columns (JSONB with SQLite variant) round-trip lists and dicts
- Non-ASCII text is stored without escaping
"""

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.db.session import Base, json_dumps
from strategy_kb.db.tables import MegatrendRow
from strategy_kb.models.common import new_uuid7, utc_now

EXPECTED_TABLES = {
    "megatrends",
    "value_templates",
    "hidden_needs",
    "success_cases",
    "seeds",
    "partners",
    "short_term_trends",
    "competitors",
    "competitor_moves",
    "value_applications",
    "megatrend_analyses",
    "need_insights",
    "competitor_analyses",
    "data_sources",
    "data_quality_snapshots",
}


def _megatrend_row(**overrides) -> MegatrendRow:
    now = utc_now()
    data = {
        "megatrend_id": new_uuid7(),
        "name": "Digital health",
        "description": "Care moves online.",
        "category": "Health",
        "impact": "HIGH",
        "timeframe": "2025-2035",
        "confidence": 0.7,
        "sources": ["WHO"],
        "keywords": ["health", "télémédecine"],
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return MegatrendRow(**data)


class TestMetadata:
    def test_all_tables_registered(self) -> None:
        assert set(Base.metadata.tables) == EXPECTED_TABLES


class TestJsonColumns:
    @pytest.mark.anyio
    async def test_list_round_trip(self, db_session: AsyncSession) -> None:
        row = _megatrend_row()
        db_session.add(row)
        await db_session.flush()
        fetched = await db_session.get(MegatrendRow, row.megatrend_id)
        assert fetched is not None
        assert fetched.keywords == ["health", "télémédecine"]

    @pytest.mark.anyio
    async def test_non_ascii_stored_verbatim(self, db_session: AsyncSession) -> None:
        row = _megatrend_row()
        db_session.add(row)
        await db_session.flush()
        result = await db_session.execute(
            text("SELECT keywords FROM megatrends WHERE name = :name"),
            {"name": "Digital health"},
        )
        stored = result.scalar_one()
        assert "télémédecine" in stored

    def test_json_dumps_keeps_unicode(self) -> None:
        assert json_dumps(["é"]) == '["é"]'
