"""
Pagination helpers: pure functions, no database access.

Services call ``validate_pagination_params`` on whatever the client
sent, ``calculate_offset`` to build the query, and
``create_pagination_result`` to wrap the page of rows with metadata.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class PaginationMeta:
    """Position of one page within the full result set."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "currentPage": self.current_page,
            "totalPages": self.total_pages,
            "totalItems": self.total_items,
            "itemsPerPage": self.items_per_page,
            "hasNextPage": self.has_next_page,
            "hasPreviousPage": self.has_previous_page,
        }


@dataclass
class PaginationResult(Generic[T]):
    """One page of rows plus its metadata."""

    pagination: PaginationMeta
    data: list[T] = field(default_factory=list)


def validate_pagination_params(
    page: int | None = None, limit: int | None = None
) -> tuple[int, int]:
    """
    Normalize client-supplied paging values.  Never fails.

    A missing or non-positive page becomes 1.  A missing, non-positive
    or over-cap limit falls back to the default (not to the cap).
    """
    validated_page = page if page is not None and page > 0 else DEFAULT_PAGE
    if limit is not None and 0 < limit <= MAX_LIMIT:
        validated_limit = limit
    else:
        validated_limit = DEFAULT_LIMIT
    return validated_page, validated_limit


def calculate_offset(page: int, limit: int) -> int:
    """Row offset of the first item on ``page`` (1-based)."""
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    return (page - 1) * limit


def calculate_total_pages(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` items; 0 when empty."""
    return math.ceil(total / limit)


def create_pagination_result(
    data: list[T], page: int, limit: int, total: int
) -> PaginationResult[T]:
    """Wrap a page of rows with derived metadata."""
    total_pages = calculate_total_pages(total, limit)
    meta = PaginationMeta(
        current_page=page,
        total_pages=total_pages,
        total_items=total,
        items_per_page=limit,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
    return PaginationResult(pagination=meta, data=list(data))
