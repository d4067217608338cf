"""Shared types, enums, and base models used across the knowledge base.

Holds the generic shapes every entity kind reuses: pagination, query
filters, quality metrics and validation results.
"""

from datetime import datetime, timezone
from enum import StrEnum
from typing import Annotated, Any, Generic, TypeVar
from uuid import UUID

from pydantic import BaseModel, Field, model_validator
from uuid_extensions import uuid7

T = TypeVar("T")


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from SQLite."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


# --- Reusable annotated types ---

UUIDv7 = Annotated[UUID, Field(description="Time-sortable UUID v7.")]
UTCTimestamp = Annotated[
    datetime, Field(description="UTC timezone-aware timestamp.")
]
Score = Annotated[float, Field(ge=0.0, le=1.0)]


# --- Shared enums ---


class EntityKind(StrEnum):
    """The eight knowledge entity kinds served by connectors."""

    MEGATREND = "MEGATREND"
    VALUE_TEMPLATE = "VALUE_TEMPLATE"
    HIDDEN_NEED = "HIDDEN_NEED"
    SUCCESS_CASE = "SUCCESS_CASE"
    SEED = "SEED"
    PARTNER = "PARTNER"
    SHORT_TERM_TREND = "SHORT_TERM_TREND"
    COMPETITOR = "COMPETITOR"


class ImpactLevel(StrEnum):
    """Four-tier severity label, ordered LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


IMPACT_ORDER: tuple[ImpactLevel, ...] = (
    ImpactLevel.LOW,
    ImpactLevel.MEDIUM,
    ImpactLevel.HIGH,
    ImpactLevel.CRITICAL,
)


class FilterOperator(StrEnum):
    """Operators accepted in a :class:`QueryFilter`."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    CONTAINS = "contains"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


# --- Base model ---


class KBBase(BaseModel):
    """Base model with common configuration for all knowledge base models."""

    model_config = {
        "populate_by_name": True,
        "ser_json_timedelta": "iso8601",
        "protected_namespaces": (),
    }


class KBRecord(KBBase):
    """Base for persisted entities; built straight from ORM rows."""

    model_config = {
        **KBBase.model_config,
        "from_attributes": True,
    }


# --- Pagination ---


class PaginationParams(KBBase):
    """Page selection and ordering for ``find_many``."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, gt=0)
    sort_by: str = "created_at"
    sort_order: SortOrder = SortOrder.DESC

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginatedResult(KBBase, Generic[T]):
    """One page of results.

    ``total_pages`` is always recomputed as ``ceil(total / limit)``.
    """

    data: list[T] = Field(default_factory=list)
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(gt=0)
    total_pages: int = 0

    @model_validator(mode="before")
    @classmethod
    def _derive_total_pages(cls, values: Any) -> Any:
        if isinstance(values, dict):
            total = values.get("total")
            limit = values.get("limit")
            if isinstance(total, int) and isinstance(limit, int) and limit > 0:
                values = {**values, "total_pages": -(-total // limit)}
        return values


# --- Filters ---


class QueryFilter(KBBase):
    """A single ANDed predicate: ``field <operator> value``.

    ``contains`` is a case-insensitive substring match on string fields.
    """

    field: str
    operator: FilterOperator
    value: Any = None


# --- Quality and validation ---


class DataQualityMetrics(KBBase):
    """Four-dimension quality score for one collection or data source."""

    completeness: Score = 0.0
    accuracy: Score = 0.0
    consistency: Score = 0.0
    timeliness: Score = 0.0
    overall_score: Score = 0.0
    issues: list[str] = Field(default_factory=list)


class ValidationIssue(KBBase, frozen=True):
    """A blocking validation finding."""

    field: str
    message: str
    code: str


class ValidationWarning(KBBase, frozen=True):
    """A non-blocking validation finding."""

    field: str
    message: str
    suggestion: str | None = None


class DataValidationResult(KBBase, frozen=True):
    """Outcome of a validation check.

    ``is_valid`` is derived from ``errors``; warnings never affect it.
    """

    is_valid: bool = True
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationWarning] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _derive_is_valid(cls, values: Any) -> Any:
        if isinstance(values, dict):
            values = {**values, "is_valid": not values.get("errors")}
        return values
