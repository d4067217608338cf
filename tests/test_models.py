"""Tests for shared models: pagination, filters, validation results."""

import pytest
from pydantic import ValidationError

from strategy_kb.models.common import (
    DataQualityMetrics,
    DataValidationResult,
    FilterOperator,
    PaginatedResult,
    PaginationParams,
    QueryFilter,
    SortOrder,
    ValidationIssue,
    ValidationWarning,
    as_utc,
    new_uuid7,
    utc_now,
)


class TestPaginationParams:
    def test_defaults(self) -> None:
        params = PaginationParams()
        assert params.page == 1
        assert params.limit == 20
        assert params.sort_by == "created_at"
        assert params.sort_order == SortOrder.DESC

    def test_offset(self) -> None:
        assert PaginationParams(page=3, limit=10).offset == 20

    def test_page_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PaginationParams(page=0)

    def test_limit_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            PaginationParams(limit=0)


class TestPaginatedResult:
    def test_total_pages_rounds_up(self) -> None:
        result = PaginatedResult[int](data=[1, 2], total=21, page=1, limit=10)
        assert result.total_pages == 3

    def test_total_pages_exact(self) -> None:
        result = PaginatedResult[int](data=[], total=20, page=2, limit=10)
        assert result.total_pages == 2

    def test_empty_total(self) -> None:
        result = PaginatedResult[int](data=[], total=0, page=1, limit=10)
        assert result.total_pages == 0

    def test_supplied_total_pages_is_recomputed(self) -> None:
        result = PaginatedResult[int](
            data=[], total=5, page=1, limit=2, total_pages=99,
        )
        assert result.total_pages == 3


class TestQueryFilter:
    def test_operator_from_string(self) -> None:
        f = QueryFilter(field="category", operator="contains", value="tech")
        assert f.operator == FilterOperator.CONTAINS

    def test_unknown_operator_rejected(self) -> None:
        with pytest.raises(ValidationError):
            QueryFilter(field="category", operator="like", value="x")


class TestDataValidationResult:
    def test_valid_when_no_errors(self) -> None:
        result = DataValidationResult(
            warnings=[ValidationWarning(field="sources", message="empty")],
        )
        assert result.is_valid is True

    def test_invalid_when_errors(self) -> None:
        result = DataValidationResult(
            errors=[ValidationIssue(field="name", message="short", code="MIN_LENGTH")],
        )
        assert result.is_valid is False

    def test_is_valid_cannot_contradict_errors(self) -> None:
        result = DataValidationResult(
            is_valid=True,
            errors=[ValidationIssue(field="name", message="short", code="MIN_LENGTH")],
        )
        assert result.is_valid is False


class TestDataQualityMetrics:
    def test_scores_bounded(self) -> None:
        with pytest.raises(ValidationError):
            DataQualityMetrics(completeness=1.5)

    def test_defaults_zero(self) -> None:
        metrics = DataQualityMetrics()
        assert metrics.overall_score == 0.0
        assert metrics.issues == []


class TestHelpers:
    def test_uuid7_version(self) -> None:
        assert new_uuid7().version == 7

    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None

    def test_as_utc_attaches_timezone(self) -> None:
        naive = utc_now().replace(tzinfo=None)
        assert as_utc(naive).tzinfo is not None
