"""
Pagination and sorting for every listing endpoint.

Query values arrive as raw strings and are parsed leniently: a missing,
malformed or non-positive ``pageNumber`` / ``pageSize`` falls back to the
default instead of failing the request.  A page number whose OFFSET
would not fit in 64 bits is clamped to the last page that does.  A
``sortBy`` outside the listing's allow-list falls back to ``createdAt``.
The allow-list maps public field names to column expressions, so no
client string ever reaches SQL.
"""
import math
from dataclasses import dataclass
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from blog_platform.config import settings

DEFAULT_SORT_FIELD = "createdAt"

# OFFSET is a signed 64-bit integer on every supported backend.
MAX_OFFSET = 2**63 - 1


def _positive_int(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value > 0 else default


def pages_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total > 0 else 0


@dataclass(frozen=True)
class PageQuery:
    page: int = 1
    page_size: int = settings.DEFAULT_PAGE_SIZE
    sort_by: str = DEFAULT_SORT_FIELD
    descending: bool = True

    @classmethod
    def from_params(
        cls,
        page_number: Any = None,
        page_size: Any = None,
        sort_by: str | None = None,
        sort_direction: str | None = None,
        allowed_sort_fields: frozenset[str] | None = None,
    ) -> "PageQuery":
        """
        Build a normalised query.

        When *allowed_sort_fields* is given, any other ``sort_by`` value
        is replaced by ``createdAt``; listings re-check against their own
        column map in :meth:`order_by` anyway.
        """
        size = min(
            _positive_int(page_size, settings.DEFAULT_PAGE_SIZE),
            settings.MAX_PAGE_SIZE,
        )
        field = sort_by or DEFAULT_SORT_FIELD
        if allowed_sort_fields is not None and field not in allowed_sort_fields:
            field = DEFAULT_SORT_FIELD
        return cls(
            page=min(_positive_int(page_number, 1), MAX_OFFSET // size + 1),
            page_size=size,
            sort_by=field,
            descending=(sort_direction or "").strip().lower() != "asc",
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def direction(self) -> str:
        return "desc" if self.descending else "asc"

    def order_by(self, columns: Mapping[str, Any], tie_breaker) -> list:
        """
        Return ORDER BY clauses for this query against *columns*.

        *columns* is the listing's allow-list (public name -> column).
        *tie_breaker* (the row id) is always appended so rows sharing the
        same sort value come back in a stable order across pages.
        """
        column = columns.get(self.sort_by, columns[DEFAULT_SORT_FIELD])
        if self.descending:
            return [column.desc(), tie_breaker.desc()]
        return [column.asc(), tie_breaker.asc()]

    def cache_key_part(self) -> str:
        return f"{self.page}:{self.page_size}:{self.sort_by}:{self.direction}"


class PaginatedResponse(BaseModel):
    """Generic envelope, serialised with camelCase keys."""

    pages_count: int
    page: int
    page_size: int
    total_count: int
    items: list = Field(default_factory=list)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def build(cls, query: PageQuery, total: int, items: list) -> "PaginatedResponse":
        return cls(
            pages_count=pages_count(total, query.page_size),
            page=query.page,
            page_size=query.page_size,
            total_count=total,
            items=items,
        )
