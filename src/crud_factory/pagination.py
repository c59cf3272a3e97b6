"""Page/limit bounds and total-count based pagination metadata."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Any, NamedTuple

from .context import PaginatedResult

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class PageBounds(NamedTuple):
    page: int
    per_page: int
    offset: int


def paginate(
    page: int | None,
    per_page: int | None,
    *,
    default_page_size: int = DEFAULT_PAGE_SIZE,
    max_page_size: int = MAX_PAGE_SIZE,
) -> PageBounds:
    """
    Resolve the requested page into ``(page, per_page, offset)``.

    ``per_page`` falls back to *default_page_size* and is capped at
    *max_page_size*; ``page`` falls back to 1. Values below 1 are raised to 1.
    """
    size = max(min(per_page or default_page_size, max_page_size), 1)
    current = max(page or 1, 1)
    return PageBounds(page=current, per_page=size, offset=(current - 1) * size)


def total_pages(total_items: int, per_page: int) -> int:
    if total_items <= 0:
        return 0
    return math.ceil(total_items / per_page)


def build_page(
    results: Sequence[Any],
    bounds: PageBounds,
    total_items: int,
) -> PaginatedResult[Any]:
    """Wrap one page of rows with metadata derived from *total_items*."""
    pages = total_pages(total_items, bounds.per_page)
    return PaginatedResult[Any](
        results=list(results),
        page=bounds.page,
        per_page=bounds.per_page,
        total_items=total_items,
        total_pages=pages,
        has_next_page=bounds.page < pages,
        has_previous_page=total_items > 0 and bounds.page > 1,
    )
