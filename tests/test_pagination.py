"""
Pure tests for query normalisation and pagination math.
"""
import pytest

from blog_platform.config import settings
from blog_platform.models import Post
from blog_platform.pagination import MAX_OFFSET, PageQuery, PaginatedResponse, pages_count

POST_FIELDS = frozenset({"createdAt", "title", "shortDescription", "content"})


def test_defaults():
    query = PageQuery.from_params()
    assert query.page == 1
    assert query.page_size == settings.DEFAULT_PAGE_SIZE == 10
    assert query.sort_by == "createdAt"
    assert query.descending is True
    assert query.offset == 0


@pytest.mark.parametrize("page_number, page_size", [
    ("0", "0"),
    ("-3", "-10"),
    ("abc", "1.5"),
    (None, ""),
])
def test_invalid_page_values_fall_back_to_defaults(page_number, page_size):
    query = PageQuery.from_params(page_number, page_size)
    assert query.page == 1
    assert query.page_size == 10


def test_page_size_is_clamped():
    query = PageQuery.from_params("1", str(settings.MAX_PAGE_SIZE + 50))
    assert query.page_size == settings.MAX_PAGE_SIZE


def test_offset():
    assert PageQuery.from_params("3", "5").offset == 10


@pytest.mark.parametrize("page_size", ["1", "10", "100"])
def test_huge_page_number_keeps_offset_in_int64(page_size):
    query = PageQuery.from_params("99999999999999999999", page_size)
    assert query.offset <= MAX_OFFSET
    assert query.offset + query.page_size > MAX_OFFSET


@pytest.mark.parametrize("direction, descending", [
    ("asc", False),
    ("ASC", False),
    (" Asc ", False),
    ("desc", True),
    ("sideways", True),
    (None, True),
])
def test_sort_direction(direction, descending):
    assert PageQuery.from_params(sort_direction=direction).descending is descending


def test_sort_field_outside_allow_list_falls_back():
    query = PageQuery.from_params(sort_by="dropTable", allowed_sort_fields=POST_FIELDS)
    assert query.sort_by == "createdAt"


def test_sort_field_in_allow_list_is_kept():
    query = PageQuery.from_params(sort_by="shortDescription", allowed_sort_fields=POST_FIELDS)
    assert query.sort_by == "shortDescription"


def test_order_by_appends_id_tie_breaker():
    query = PageQuery.from_params(sort_by="title", sort_direction="asc")
    clauses = query.order_by({"createdAt": Post.created_at, "title": Post.title}, Post.id)
    rendered = [str(c) for c in clauses]
    assert rendered == ["posts.title ASC", "posts.id ASC"]


def test_order_by_unknown_column_uses_created_at():
    query = PageQuery(sort_by="blogName")
    clauses = query.order_by({"createdAt": Post.created_at}, Post.id)
    assert [str(c) for c in clauses] == ["posts.created_at DESC", "posts.id DESC"]


@pytest.mark.parametrize("total, size, expected", [
    (0, 10, 0),
    (1, 10, 1),
    (10, 10, 1),
    (11, 10, 2),
    (25, 5, 5),
])
def test_pages_count(total, size, expected):
    assert pages_count(total, size) == expected


def test_paginated_response_serialises_camel_case():
    query = PageQuery.from_params("2", "3")
    response = PaginatedResponse.build(query, 7, [{"id": "x"}])
    assert response.model_dump(by_alias=True) == {
        "pagesCount": 3,
        "page": 2,
        "pageSize": 3,
        "totalCount": 7,
        "items": [{"id": "x"}],
    }
    # Cached pages round-trip through the alias names.
    assert PaginatedResponse.model_validate(response.model_dump(by_alias=True)) == response
