"""Search capability shared by the connectors.

``search`` matches the query as a case-insensitive substring of the
connector's text fields, or as an exact element of its list fields.
``find_by_keywords`` ORs one match per keyword over the keyword fields.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar, Generic

from sqlalchemy import ColumnElement, or_

from strategy_kb.connectors.base import TEntity, json_array_has


class SearchMixin(Generic[TEntity]):
    """Mixed into an ``EntityConnector`` subclass."""

    search_fields: ClassVar[tuple[str, ...]] = ()
    search_list_fields: ClassVar[tuple[str, ...]] = ()
    keyword_fields: ClassVar[tuple[str, ...]] = ()
    keyword_list_fields: ClassVar[tuple[str, ...]] = ()

    async def search(self, query: str, limit: int = 10) -> list[TEntity]:
        predicates = self._match(query, self.search_fields, self.search_list_fields)
        return await self._find_any(predicates, limit=limit)

    async def find_by_keywords(self, keywords: Sequence[str]) -> list[TEntity]:
        predicates: list[ColumnElement[bool]] = []
        for keyword in keywords:
            predicates.extend(
                self._match(keyword, self.keyword_fields, self.keyword_list_fields)
            )
        return await self._find_any(predicates)

    def _match(
        self,
        term: str,
        text_fields: Sequence[str],
        list_fields: Sequence[str],
    ) -> list[ColumnElement[bool]]:
        row_type: Any = self.row_type
        predicates = [
            getattr(row_type, field).icontains(term, autoescape=True)
            for field in text_fields
        ]
        predicates.extend(
            json_array_has(getattr(row_type, field), term) for field in list_fields
        )
        return predicates

    async def _find_any(
        self,
        predicates: list[ColumnElement[bool]],
        *,
        limit: int | None = None,
    ) -> list[TEntity]:
        if not predicates:
            return []
        rows = await self._repo.find(
            (or_(*predicates),), order_by=self._default_order(), limit=limit,
        )
        return [self._to_entity(row) for row in rows]
