"""KnowledgeBase facade: every connector and service bound to one session.

The session is injected, never global. Typical use::

    async with session_scope(session_factory) as session:
        kb = KnowledgeBase(session)
        trend = await kb.megatrends.create(MegatrendCreate(...))
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from strategy_kb.connectors.base import EntityConnector
from strategy_kb.connectors.competitor import CompetitorConnector
from strategy_kb.connectors.hidden_need import HiddenNeedConnector
from strategy_kb.connectors.megatrend import MegatrendConnector
from strategy_kb.connectors.partner import PartnerConnector
from strategy_kb.connectors.seed import SeedConnector
from strategy_kb.connectors.short_term_trend import ShortTermTrendConnector
from strategy_kb.connectors.success_case import SuccessCaseConnector
from strategy_kb.connectors.value_template import ValueTemplateConnector
from strategy_kb.metadata.service import MetadataService
from strategy_kb.models.common import EntityKind
from strategy_kb.quality.config import QualityServiceConfig
from strategy_kb.quality.service import DataQualityService


class KnowledgeBase:
    """Entry point for callers: eight connectors plus quality and metadata."""

    def __init__(
        self,
        session: AsyncSession,
        quality_config: QualityServiceConfig | None = None,
    ) -> None:
        self.session = session
        self.megatrends = MegatrendConnector(session)
        self.value_templates = ValueTemplateConnector(session)
        self.hidden_needs = HiddenNeedConnector(session)
        self.success_cases = SuccessCaseConnector(session)
        self.seeds = SeedConnector(session)
        self.partners = PartnerConnector(session)
        self.short_term_trends = ShortTermTrendConnector(
            session, megatrends=self.megatrends,
        )
        self.competitors = CompetitorConnector(session)
        self.quality = DataQualityService(
            session, connectors=self.connectors, config=quality_config,
        )
        self.metadata = MetadataService(session)

    @property
    def connectors(self) -> dict[EntityKind, EntityConnector]:
        return {
            EntityKind.MEGATREND: self.megatrends,
            EntityKind.VALUE_TEMPLATE: self.value_templates,
            EntityKind.HIDDEN_NEED: self.hidden_needs,
            EntityKind.SUCCESS_CASE: self.success_cases,
            EntityKind.SEED: self.seeds,
            EntityKind.PARTNER: self.partners,
            EntityKind.SHORT_TERM_TREND: self.short_term_trends,
            EntityKind.COMPETITOR: self.competitors,
        }

    def connector(self, kind: EntityKind) -> EntityConnector:
        return self.connectors[EntityKind(kind)]
