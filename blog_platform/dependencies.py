import uuid
from dataclasses import dataclass

from fastapi import Header, HTTPException, Query

from blog_platform.pagination import PageQuery


@dataclass(frozen=True)
class CurrentUser:
    id: uuid.UUID
    login: str


def _parse_user_id(raw: str | None) -> uuid.UUID | None:
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        return None


async def get_current_user(
    x_user_id: str | None = Header(None, description="Id of the acting user."),
    x_user_login: str | None = Header(None, description="Login of the acting user."),
) -> CurrentUser:
    """
    Identity of the caller for mutations.

    Authentication itself lives in front of this service; it forwards
    the verified user as ``X-User-Id`` / ``X-User-Login``.
    """
    user_id = _parse_user_id(x_user_id)
    if user_id is None or not x_user_login:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return CurrentUser(id=user_id, login=x_user_login)


async def get_viewer_id(
    x_user_id: str | None = Header(None, description="Id of the viewing user, if any."),
) -> uuid.UUID | None:
    """Optional viewer for reads; anonymous when absent or malformed."""
    return _parse_user_id(x_user_id)


class PaginationParams:
    """
    Reusable FastAPI dependency that collects the raw pagination and
    sorting query parameters.

    Values are accepted as strings and normalised by
    :meth:`PageQuery.from_params`, so ``pageNumber=-1`` or ``pageSize=abc``
    fall back to defaults rather than producing a 422.

    Usage in a router::

        @router.get("/posts")
        async def list_posts(pagination: PaginationParams = Depends()):
            query = pagination.to_query(ALL_POSTS_SORT_FIELDS)
    """

    def __init__(
        self,
        page_number: str | None = Query(None, alias="pageNumber", description="Page number (1-based)."),
        page_size: str | None = Query(None, alias="pageSize", description="Items per page."),
        sort_by: str | None = Query(None, alias="sortBy", description="Field to sort by."),
        sort_direction: str | None = Query(None, alias="sortDirection", description="'asc' or 'desc'."),
    ) -> None:
        self.page_number = page_number
        self.page_size = page_size
        self.sort_by = sort_by
        self.sort_direction = sort_direction

    def to_query(self, allowed_sort_fields: frozenset[str]) -> PageQuery:
        return PageQuery.from_params(
            self.page_number,
            self.page_size,
            self.sort_by,
            self.sort_direction,
            allowed_sort_fields,
        )
