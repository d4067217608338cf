"""Tests for CompetitorMoveRepository and ValueApplicationRepository."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.connectors.competitor import CompetitorConnector
from strategy_kb.connectors.value_template import ValueTemplateConnector
from strategy_kb.models.common import utc_now
from strategy_kb.models.knowledge import (
    CompetitorCreate,
    ValueCategory,
    ValueTemplateCreate,
)
from strategy_kb.repositories.activity import (
    CompetitorMoveRepository,
    ValueApplicationRepository,
)


class TestCompetitorMoveRepository:
    @pytest.mark.anyio
    async def test_by_competitor_with_limit(self, db_session: AsyncSession) -> None:
        competitor = await CompetitorConnector(db_session).create(
            CompetitorCreate(name="Apex"),
        )
        repo = CompetitorMoveRepository(db_session)
        now = utc_now()
        for days in (4, 1, 9):
            await repo.create(
                competitor_id=competitor.competitor_id,
                type="PRICE_CHANGE",
                description=f"{days}d",
                date=now - timedelta(days=days),
                impact="LOW",
            )
        rows = await repo.get_by_competitor(competitor.competitor_id, limit=2)
        assert [r.description for r in rows] == ["1d", "4d"]

        since = await repo.get_since(now - timedelta(days=5))
        assert [r.description for r in since] == ["1d", "4d"]


class TestValueApplicationRepository:
    @pytest.mark.anyio
    async def test_create_and_list(self, db_session: AsyncSession) -> None:
        template = await ValueTemplateConnector(db_session).create(ValueTemplateCreate(
            name="Automation",
            description="Automate.",
            category=ValueCategory.EFFICIENCY,
            target_segment="Banks",
            value_proposition="Faster processing for every branch.",
        ))
        repo = ValueApplicationRepository(db_session)
        row = await repo.create(
            template_id=template.template_id,
            context="Branch network",
            customization="None",
        )
        assert row.results is None
        assert row.applied_at is not None

        rows = await repo.get_by_template(template.template_id)
        assert [r.application_id for r in rows] == [row.application_id]
