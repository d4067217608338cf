"""Generic EntityConnector base class for the knowledge base.

All eight connectors inherit from ``EntityConnector``. The generic base
handles the uniform access contract:

- Lookup, filtered + paginated listing, create, partial update, hard delete
- Translation of ``QueryFilter`` values into SQLAlchemy predicates
- Collection quality metrics via the shared scoring formula

Subclasses declare their table, models and required fields as class
attributes and implement two methods:
- ``validate`` -- pure, kind-specific input checks
- ``record_issues`` -- evidentiary issues for one record (accuracy)

Batch operations are fail-fast: items run sequentially in input order on
the injected session and the first failure is re-raised unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel
from sqlalchemy import ColumnElement, String, cast, inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.types import JSON

from strategy_kb.db.session import Base, json_dumps
from strategy_kb.errors import EntityNotFoundError
from strategy_kb.models.common import (
    DataQualityMetrics,
    DataValidationResult,
    EntityKind,
    FilterOperator,
    KBBase,
    KBRecord,
    PaginatedResult,
    PaginationParams,
    QueryFilter,
    SortOrder,
    ValidationIssue,
    ValidationWarning,
    new_uuid7,
    utc_now,
)
from strategy_kb.quality.scoring import score_collection
from strategy_kb.repositories.base import EntityRepository

logger = structlog.get_logger(__name__)

TEntity = TypeVar("TEntity", bound=KBRecord)
TCreate = TypeVar("TCreate", bound=KBBase)
TUpdate = TypeVar("TUpdate", bound=KBBase)
TResult = TypeVar("TResult")

EntityId = UUID | str

SEQUENCE_TYPES = (list, tuple, set, frozenset)

ALL_OPERATORS: frozenset[FilterOperator] = frozenset(FilterOperator)
BASIC_OPERATORS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.EQ, FilterOperator.CONTAINS},
)
SET_OPERATORS: frozenset[FilterOperator] = frozenset(
    {
        FilterOperator.EQ,
        FilterOperator.NE,
        FilterOperator.CONTAINS,
        FilterOperator.IN,
    },
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def coerce_id(entity_id: EntityId) -> UUID | None:
    """Parse an identifier; malformed strings identify nothing."""
    if isinstance(entity_id, UUID):
        return entity_id
    try:
        return UUID(str(entity_id))
    except ValueError:
        return None


def plain_value(value: Any) -> Any:
    """Enum members compare by their stored value."""
    if isinstance(value, Enum):
        return value.value
    return value


def json_array_has(column: Any, value: Any) -> ColumnElement[bool]:
    """True when the JSON array in *column* holds *value* as an element.

    Matches the serialized element inside the serialized array, which works
    the same on JSONB and on SQLite JSON text.
    """
    return cast(column, String).contains(
        json_dumps(plain_value(value)), autoescape=True,
    )


def validation_values(data: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Fields present in *data*, with ``None`` treated as absent."""
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_none=True)
    return {k: v for k, v in data.items() if v is not None}


def given_fields(data: BaseModel | Mapping[str, Any]) -> set[str]:
    """Field names the caller explicitly supplied."""
    if isinstance(data, BaseModel):
        return set(data.model_fields_set)
    return set(data.keys())


def check_min_length(
    values: Mapping[str, Any],
    field: str,
    minimum: int,
    errors: list[ValidationIssue],
    message: str | None = None,
) -> None:
    value = values.get(field)
    if isinstance(value, str) and value and len(value) < minimum:
        errors.append(ValidationIssue(
            field=field,
            message=message or f"{field} must be at least {minimum} characters",
            code="MIN_LENGTH",
        ))


def check_unit_range(
    values: Mapping[str, Any],
    field: str,
    errors: list[ValidationIssue],
    message: str | None = None,
) -> None:
    value = values.get(field)
    if isinstance(value, (int, float)) and not 0 <= value <= 1:
        errors.append(ValidationIssue(
            field=field,
            message=message or f"{field} must be between 0 and 1",
            code="OUT_OF_RANGE",
        ))


def sequence_value(values: Mapping[str, Any], field: str) -> Collection[Any] | None:
    """The list value of *field*, or ``None`` when absent or not a list."""
    value = values.get(field)
    if isinstance(value, SEQUENCE_TYPES):
        return value
    return None


def warn_if_empty(
    values: Mapping[str, Any],
    field: str,
    warnings: list[ValidationWarning],
    message: str,
    suggestion: str | None = None,
) -> None:
    """Warn when *field* is supplied as an empty sequence."""
    value = sequence_value(values, field)
    if value is not None and len(value) == 0:
        warnings.append(ValidationWarning(
            field=field, message=message, suggestion=suggestion,
        ))


# ---------------------------------------------------------------------------
# Access contract
# ---------------------------------------------------------------------------


class EntityConnector(ABC, Generic[TEntity, TCreate, TUpdate]):
    """Uniform access contract over one entity kind.

    Parameters
    ----------
    session:
        The caller-owned session. Connectors flush but never commit.
    """

    kind: ClassVar[EntityKind]
    row_type: ClassVar[type[Base]]
    entity_model: ClassVar[type[KBRecord]]
    create_model: ClassVar[type[KBBase]]
    update_model: ClassVar[type[KBBase]]
    required_fields: ClassVar[tuple[str, ...]] = ()
    filter_operators: ClassVar[frozenset[FilterOperator]] = BASIC_OPERATORS

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repo: EntityRepository[Any] = EntityRepository(session, self.row_type)
        self._columns = inspect(self.row_type).columns
        self._pk_name = self._repo.primary_key.key

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_id(self, entity_id: EntityId) -> TEntity | None:
        """Return the entity, or ``None`` if no such identifier exists."""
        key = coerce_id(entity_id)
        if key is None:
            return None
        row = await self._repo.get(key)
        return self._to_entity(row) if row is not None else None

    async def find_many(
        self,
        filters: Sequence[QueryFilter] | None = None,
        pagination: PaginationParams | None = None,
    ) -> PaginatedResult[TEntity]:
        """ANDed filters over the collection, one page at a time.

        Unknown fields, JSON list fields and operators this connector does
        not support are ignored.
        """
        pagination = pagination or PaginationParams()
        where = [
            predicate
            for predicate in (self._predicate(f) for f in filters or ())
            if predicate is not None
        ]
        total = await self._repo.count(where)
        rows = await self._repo.find(
            where,
            order_by=self._order_by(pagination.sort_by, pagination.sort_order),
            offset=pagination.offset,
            limit=pagination.limit,
        )
        return PaginatedResult[self.entity_model](
            data=[self._to_entity(row) for row in rows],
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, data: TCreate | Mapping[str, Any]) -> TEntity:
        """Assign an identifier, persist, and return the full entity."""
        payload = self._coerce(self.create_model, data).model_dump(mode="json")
        now = utc_now()
        row = self.row_type(
            **{self._pk_name: new_uuid7()},
            **payload,
            created_at=now,
            updated_at=now,
        )
        row = await self._repo.add(row)
        entity_id = getattr(row, self._pk_name)
        logger.info("entity_created", kind=self.kind.value, entity_id=str(entity_id))
        return self._to_entity(row)

    async def create_many(
        self, items: Iterable[TCreate | Mapping[str, Any]],
    ) -> list[TEntity]:
        """Sequential ``create`` calls in input order; stops at the first failure.

        Entities created before the failure stay in the session's unit of
        work; the session owner decides whether to commit or roll back.
        """
        created: list[TEntity] = []
        for index, item in enumerate(items):
            try:
                created.append(await self.create(item))
            except Exception:
                logger.warning(
                    "batch_item_failed",
                    operation="create_many",
                    kind=self.kind.value,
                    index=index,
                    completed=len(created),
                )
                raise
        return created

    async def update(
        self, entity_id: EntityId, data: TUpdate | Mapping[str, Any],
    ) -> TEntity:
        """Apply only the supplied fields.

        Raises
        ------
        EntityNotFoundError
            If the identifier does not exist.
        """
        row = await self._get_row(entity_id)
        changes = self._coerce(self.update_model, data).model_dump(
            mode="json", exclude_unset=True,
        )
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None or self._columns[key].nullable
        }
        changes["updated_at"] = utc_now()
        row = await self._repo.apply(row, changes)
        logger.info(
            "entity_updated",
            kind=self.kind.value,
            entity_id=str(entity_id),
            fields=sorted(k for k in changes if k != "updated_at"),
        )
        return self._to_entity(row)

    async def delete(self, entity_id: EntityId) -> None:
        """Hard delete.

        Raises
        ------
        EntityNotFoundError
            If the identifier does not exist.
        """
        row = await self._get_row(entity_id)
        await self._repo.delete(row)
        logger.info("entity_deleted", kind=self.kind.value, entity_id=str(entity_id))

    # ------------------------------------------------------------------
    # Validation and quality
    # ------------------------------------------------------------------

    @abstractmethod
    def validate(
        self, data: TCreate | TUpdate | Mapping[str, Any],
    ) -> DataValidationResult:
        """Kind-specific checks. Pure: no I/O, never raises on bad input."""
        ...

    @classmethod
    def record_issues(cls, record: Mapping[str, Any]) -> list[str]:
        """Evidentiary issues for one record; empty means accurate."""
        return []

    async def get_quality_metrics(self) -> DataQualityMetrics:
        rows = await self._repo.list_all()
        records = [self._to_entity(row).model_dump() for row in rows]
        return score_collection(records, self.required_fields, self.record_issues)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _to_entity(self, row: Any) -> TEntity:
        return self.entity_model.model_validate(row)

    @staticmethod
    def _coerce(model: type[KBBase], data: Any) -> KBBase:
        if isinstance(data, model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump(exclude_unset=True)
        return model.model_validate(data)

    async def _get_row(self, entity_id: EntityId) -> Any:
        key = coerce_id(entity_id)
        row = await self._repo.get(key) if key is not None else None
        if row is None:
            raise EntityNotFoundError(self.kind.value, entity_id)
        return row

    def _column(self, field: str) -> Any | None:
        """Scalar column for *field*; JSON list columns are not filterable."""
        column = self._columns.get(field)
        if column is None or isinstance(column.type, JSON):
            return None
        return getattr(self.row_type, field)

    def _predicate(self, query_filter: QueryFilter) -> ColumnElement[bool] | None:
        operator = FilterOperator(query_filter.operator)
        if operator not in self.filter_operators:
            return None
        column = self._column(query_filter.field)
        if column is None:
            return None
        column_type = self._columns[query_filter.field].type
        value = plain_value(query_filter.value)

        if operator == FilterOperator.EQ:
            return column == value
        if operator == FilterOperator.NE:
            return column != value
        if operator == FilterOperator.GT:
            return column > value
        if operator == FilterOperator.GTE:
            return column >= value
        if operator == FilterOperator.LT:
            return column < value
        if operator == FilterOperator.LTE:
            return column <= value
        if operator == FilterOperator.IN:
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                value = [value]
            return column.in_([plain_value(v) for v in value])
        # CONTAINS: case-insensitive substring on text columns only
        if not isinstance(column_type, String) or value is None:
            return None
        return column.icontains(str(value), autoescape=True)

    def _order_by(self, sort_by: str, sort_order: SortOrder) -> tuple[Any, ...]:
        column = self._column(sort_by)
        if column is None:
            column = getattr(self.row_type, "created_at")
        pk = self._repo.primary_key
        if SortOrder(sort_order) == SortOrder.ASC:
            return (column.asc(), pk.asc())
        return (column.desc(), pk.desc())

    def _default_order(self) -> tuple[Any, ...]:
        return self._order_by("created_at", SortOrder.DESC)


class AnalyzableMixin(ABC, Generic[TEntity, TResult]):
    """Analysis capability: ``analyze``, ``analyze_many``, ``get_related``.

    Mixed into an :class:`EntityConnector` subclass.
    """

    kind: ClassVar[EntityKind]

    @abstractmethod
    async def analyze(self, entity_id: EntityId) -> TResult:
        """Analyze one entity and append the result to its history."""
        ...

    @abstractmethod
    async def get_related(self, entity_id: EntityId, limit: int = 5) -> list[TEntity]:
        """Similar entities, excluding the entity itself."""
        ...

    async def analyze_many(self, entity_ids: Iterable[EntityId]) -> list[TResult]:
        """Sequential ``analyze`` calls in input order; stops at the first failure."""
        results: list[TResult] = []
        for index, entity_id in enumerate(entity_ids):
            try:
                results.append(await self.analyze(entity_id))
            except Exception:
                logger.warning(
                    "batch_item_failed",
                    operation="analyze_many",
                    kind=self.kind.value,
                    index=index,
                    completed=len(results),
                )
                raise
        return results


__all__ = [
    "ALL_OPERATORS",
    "BASIC_OPERATORS",
    "SET_OPERATORS",
    "AnalyzableMixin",
    "EntityConnector",
    "check_min_length",
    "check_unit_range",
    "coerce_id",
    "given_fields",
    "json_array_has",
    "plain_value",
    "sequence_value",
    "validation_values",
    "warn_if_empty",
]
