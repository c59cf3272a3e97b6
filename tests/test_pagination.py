from __future__ import annotations

import pytest

from crud_factory import PageBounds, PaginatedResult, build_page, paginate
from crud_factory.pagination import total_pages


def test_defaults_when_nothing_requested():
    assert paginate(None, None) == PageBounds(page=1, per_page=20, offset=0)


def test_offset_from_page_and_size():
    assert paginate(3, 10) == PageBounds(page=3, per_page=10, offset=20)


def test_per_page_is_capped_at_max():
    bounds = paginate(1, 500, default_page_size=20, max_page_size=100)
    assert bounds.per_page == 100


def test_custom_default_page_size():
    assert paginate(2, None, default_page_size=5, max_page_size=50).offset == 5


@pytest.mark.parametrize(("page", "per_page"), [(0, 0), (-2, -5)])
def test_values_below_one_are_raised(page, per_page):
    bounds = paginate(page, per_page, default_page_size=20, max_page_size=100)
    assert bounds.page == 1
    assert bounds.per_page >= 1
    assert bounds.offset == 0


@pytest.mark.parametrize(
    ("total_items", "per_page", "expected"),
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (95, 20, 5)],
)
def test_total_pages(total_items, per_page, expected):
    assert total_pages(total_items, per_page) == expected


def test_build_page_middle_page():
    page = build_page(["a", "b"], PageBounds(page=2, per_page=2, offset=2), 5)

    assert page.total_pages == 3
    assert page.has_next_page is True
    assert page.has_previous_page is True


def test_zero_items_reports_no_pages_regardless_of_page():
    page = build_page([], paginate(4, 10), 0)

    assert page.total_pages == 0
    assert page.has_next_page is False
    assert page.has_previous_page is False


def test_page_past_the_end():
    page = build_page([], paginate(10, 10), 1)

    assert page.results == []
    assert page.total_pages == 1
    assert page.has_previous_page is True
    assert page.has_next_page is False


def test_envelope_uses_camel_case_keys():
    page = build_page([{"id": 1}], paginate(1, 10), 1)

    assert page.model_dump(by_alias=True) == {
        "results": [{"id": 1}],
        "page": 1,
        "perPage": 10,
        "totalItems": 1,
        "totalPages": 1,
        "hasNextPage": False,
        "hasPreviousPage": False,
    }


def test_envelope_accepts_camel_case_input():
    page = PaginatedResult[int].model_validate(
        {
            "results": [1],
            "page": 1,
            "perPage": 1,
            "totalItems": 1,
            "totalPages": 1,
            "hasNextPage": False,
            "hasPreviousPage": False,
        }
    )
    assert page.per_page == 1
