"""
Tests for the pure pagination helpers in app.pagination.
"""

import math

import pytest

from app.pagination import (
    calculate_offset,
    calculate_total_pages,
    create_pagination_result,
    validate_pagination_params,
)


class TestValidatePaginationParams:
    """Defaults and clamping for client-supplied page/limit."""

    def test_missing_values_use_defaults(self):
        assert validate_pagination_params() == (1, 10)

    @pytest.mark.parametrize("page", [0, -1])
    def test_non_positive_page_becomes_one(self, page):
        assert validate_pagination_params(page, 20) == (1, 20)

    def test_limit_over_cap_falls_back_to_default_not_cap(self):
        """150 exceeds the cap of 100, so the default 10 is used."""
        assert validate_pagination_params(2, 150) == (2, 10)

    def test_limit_at_cap_passes_through(self):
        assert validate_pagination_params(1, 100) == (1, 100)

    def test_zero_limit_uses_default(self):
        assert validate_pagination_params(3, 0) == (3, 10)


class TestOffsetAndTotals:
    """Offset and page count arithmetic."""

    def test_offset_first_page_is_zero(self):
        assert calculate_offset(1, 10) == 0

    def test_offset_third_page(self):
        assert calculate_offset(3, 25) == 50

    def test_offset_rejects_page_zero(self):
        with pytest.raises(ValueError):
            calculate_offset(0, 10)

    @pytest.mark.parametrize(
        "total,limit", [(0, 10), (1, 10), (10, 10), (11, 10), (99, 7), (250, 100)]
    )
    def test_total_pages_is_ceiling(self, total, limit):
        assert calculate_total_pages(total, limit) == math.ceil(total / limit)

    def test_total_pages_zero_when_empty(self):
        assert calculate_total_pages(0, 10) == 0


class TestCreatePaginationResult:
    """Metadata flags derived from page and total."""

    def test_middle_page_has_both_neighbours(self):
        result = create_pagination_result(["x"] * 10, page=2, limit=10, total=35)
        meta = result.pagination

        assert meta.total_pages == 4
        assert meta.has_next_page is True
        assert meta.has_previous_page is True
        assert len(result.data) == 10

    def test_last_page_has_no_next(self):
        meta = create_pagination_result([], page=4, limit=10, total=35).pagination
        assert meta.has_next_page is False
        assert meta.has_previous_page is True

    def test_empty_result(self):
        meta = create_pagination_result([], page=1, limit=10, total=0).pagination
        assert meta.total_pages == 0
        assert meta.has_next_page is False
        assert meta.has_previous_page is False

    def test_to_dict_uses_api_field_names(self):
        meta = create_pagination_result([1], page=1, limit=5, total=6).pagination
        assert meta.to_dict() == {
            "currentPage": 1,
            "totalPages": 2,
            "totalItems": 6,
            "itemsPerPage": 5,
            "hasNextPage": True,
            "hasPreviousPage": False,
        }
