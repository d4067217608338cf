"""Tests for ShortTermTrendConnector and its megatrend link."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_extensions import uuid7

from strategy_kb.connectors.megatrend import MegatrendConnector
from strategy_kb.connectors.short_term_trend import ShortTermTrendConnector
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import ImpactLevel
from strategy_kb.models.knowledge import (
    MegatrendCreate,
    ShortTermTrendCreate,
    TrendPhase,
)


def _trend(**overrides) -> ShortTermTrendCreate:
    data = {
        "name": "AI copilots",
        "description": "Assistants embedded in BI tools.",
        "category": "Technology",
        "current_phase": TrendPhase.GROWING,
        "relevance": 0.8,
        "sources": ["Release notes"],
    }
    data.update(overrides)
    return ShortTermTrendCreate(**data)


async def _parent(session: AsyncSession):
    return await MegatrendConnector(session).create(MegatrendCreate(
        name="Generative AI",
        description="Foundation models enter core workflows.",
        category="Technology",
        impact=ImpactLevel.HIGH,
        timeframe="2025-2030",
        confidence=0.8,
    ))


class TestValidate:
    def test_relevance_out_of_range(self, offline_session: AsyncSession) -> None:
        result = ShortTermTrendConnector(offline_session).validate(
            _trend(relevance=1.2),
        )
        assert result.is_valid is False
        assert result.errors[0].field == "relevance"
        assert result.errors[0].code == "OUT_OF_RANGE"

    def test_missing_sources_warns(self, offline_session: AsyncSession) -> None:
        result = ShortTermTrendConnector(offline_session).validate(_trend(sources=[]))
        assert result.is_valid is True
        assert [w.field for w in result.warnings] == ["sources"]


class TestLookups:
    @pytest.mark.anyio
    async def test_find_by_phase(self, db_session: AsyncSession) -> None:
        connector = ShortTermTrendConnector(db_session)
        await connector.create(_trend(name="Growing", current_phase=TrendPhase.GROWING))
        await connector.create(_trend(name="Fading", current_phase=TrendPhase.FADING))
        found = await connector.find_by_phase(TrendPhase.FADING)
        assert [t.name for t in found] == ["Fading"]

    @pytest.mark.anyio
    async def test_emerging_by_relevance(self, db_session: AsyncSession) -> None:
        connector = ShortTermTrendConnector(db_session)
        await connector.create(
            _trend(name="Low", current_phase=TrendPhase.EMERGING, relevance=0.2),
        )
        await connector.create(
            _trend(name="High", current_phase=TrendPhase.GROWING, relevance=0.9),
        )
        await connector.create(
            _trend(name="Peaking", current_phase=TrendPhase.PEAKING, relevance=1.0),
        )
        found = await connector.find_emerging_trends()
        assert [t.name for t in found] == ["High", "Low"]


class TestMegatrendLink:
    @pytest.mark.anyio
    async def test_find_by_megatrend(self, db_session: AsyncSession) -> None:
        parent = await _parent(db_session)
        connector = ShortTermTrendConnector(db_session)
        await connector.create(_trend(name="Linked", megatrend_id=str(parent.megatrend_id)))
        await connector.create(_trend(name="Loose"))
        found = await connector.find_by_megatrend(parent.megatrend_id)
        assert [t.name for t in found] == ["Linked"]

    @pytest.mark.anyio
    async def test_get_megatrend(self, db_session: AsyncSession) -> None:
        parent = await _parent(db_session)
        connector = ShortTermTrendConnector(db_session)
        trend = await connector.create(_trend(megatrend_id=str(parent.megatrend_id)))
        resolved = await connector.get_megatrend(trend.trend_id)
        assert resolved is not None
        assert resolved.megatrend_id == parent.megatrend_id

    @pytest.mark.anyio
    async def test_unlinked_trend(self, db_session: AsyncSession) -> None:
        connector = ShortTermTrendConnector(db_session)
        trend = await connector.create(_trend())
        assert await connector.get_megatrend(trend.trend_id) is None

    @pytest.mark.anyio
    async def test_dangling_link(self, db_session: AsyncSession) -> None:
        connector = ShortTermTrendConnector(db_session)
        trend = await connector.create(_trend(megatrend_id=str(uuid7())))
        assert await connector.get_megatrend(trend.trend_id) is None

    @pytest.mark.anyio
    async def test_missing_trend_raises(self, db_session: AsyncSession) -> None:
        with pytest.raises(EntityNotFoundError):
            await ShortTermTrendConnector(db_session).get_megatrend(uuid7())
