"""
Comment service: CRUD, listing and reactions for comments on posts.

Unlike posts, comments carry no stored counters.  Likes and dislikes are
aggregated from ``likes`` on every read (``SUM(CASE ..)`` over a LEFT
JOIN for listings), trading read cost for writes that touch one table
only and counts that cannot drift.
"""
import logging
import uuid

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.errors import NotFoundError
from blog_platform.models import Comment, DeletionStatus, EntityType, Like, LikeStatus
from blog_platform.pagination import DEFAULT_SORT_FIELD, PageQuery, PaginatedResponse
from blog_platform.schemas import CommentCreate, CommentUpdate
from blog_platform.services import post_service, reaction_service
from blog_platform.services.guards import ensure_author, ensure_exists
from blog_platform.views import comment_view

logger = logging.getLogger(__name__)

COMMENT_SORT_COLUMNS = {
    DEFAULT_SORT_FIELD: Comment.created_at,
    "content": Comment.content,
}
COMMENT_SORT_FIELDS = frozenset(COMMENT_SORT_COLUMNS)


async def _find_active_comment(db: AsyncSession, comment_id: uuid.UUID) -> Comment | None:
    q = select(Comment).where(
        Comment.id == comment_id,
        Comment.deletion_status == DeletionStatus.ACTIVE,
    )
    return (await db.execute(q)).scalar_one_or_none()


async def _get_owned_comment(
    db: AsyncSession, comment_id: uuid.UUID, user_id: uuid.UUID
) -> Comment:
    comment = ensure_exists(await _find_active_comment(db, comment_id), "Comment not found")
    ensure_author(comment.user_id, user_id, "You are not the owner of this comment")
    return comment


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_comment(
    db: AsyncSession,
    post_id: uuid.UUID,
    user_id: uuid.UUID,
    user_login: str,
    data: CommentCreate,
) -> dict:
    """Add a comment to an active post.  Raises ``NotFoundError`` otherwise."""
    await post_service.ensure_post_exists(db, post_id)

    comment = Comment(
        content=data.content,
        post_id=post_id,
        user_id=user_id,
        user_login=user_login,
    )
    db.add(comment)
    await db.flush()
    logger.info("Comment %s added to post %s by %s", comment.id, post_id, user_id)
    return comment_view(comment)


async def get_comment(
    db: AsyncSession, comment_id: uuid.UUID, viewer_id: uuid.UUID | None = None
) -> dict:
    comment = await _find_active_comment(db, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")

    likes, dislikes = await reaction_service.count_reactions(db, comment.id, EntityType.COMMENT)
    my_status = await reaction_service.get_reaction(db, comment.id, EntityType.COMMENT, viewer_id)
    return comment_view(comment, likes, dislikes, my_status)


async def update_comment(
    db: AsyncSession, comment_id: uuid.UUID, user_id: uuid.UUID, data: CommentUpdate
) -> None:
    comment = await _get_owned_comment(db, comment_id, user_id)
    comment.content = data.content
    await db.flush()


async def delete_comment(db: AsyncSession, comment_id: uuid.UUID, user_id: uuid.UUID) -> None:
    """Soft-delete the comment and drop its reactions."""
    comment = await _get_owned_comment(db, comment_id, user_id)
    comment.deletion_status = DeletionStatus.DELETED
    await db.flush()
    await reaction_service.delete_reactions(db, comment.id, EntityType.COMMENT)
    logger.info("Comment %s soft-deleted by %s", comment.id, user_id)


async def get_comments_for_post(
    db: AsyncSession,
    post_id: uuid.UUID,
    query: PageQuery,
    viewer_id: uuid.UUID | None = None,
) -> PaginatedResponse:
    """
    One page of a post's active comments with live counts.

    Three statements: COUNT, the aggregated page, and (with a viewer)
    the viewer's statuses for the whole page in one batch.
    """
    await post_service.ensure_post_exists(db, post_id)

    filters = (Comment.post_id == post_id, Comment.deletion_status == DeletionStatus.ACTIVE)
    count_q = select(func.count()).select_from(Comment).where(*filters)
    total: int = (await db.execute(count_q)).scalar_one()

    likes, dislikes = reaction_service.likes_sum()
    page_q = (
        select(Comment, likes, dislikes)
        .outerjoin(
            Like,
            and_(Like.entity_id == Comment.id, Like.entity_type == EntityType.COMMENT),
        )
        .where(*filters)
        .group_by(Comment.id)
        .order_by(*query.order_by(COMMENT_SORT_COLUMNS, Comment.id))
        .offset(query.offset)
        .limit(query.page_size)
    )
    rows = (await db.execute(page_q)).all()

    statuses = await reaction_service.get_reactions_for_user(
        db, [row.Comment.id for row in rows], EntityType.COMMENT, viewer_id
    )
    items = [
        comment_view(
            row.Comment,
            row.likes_count,
            row.dislikes_count,
            statuses.get(row.Comment.id, LikeStatus.NONE),
        )
        for row in rows
    ]
    return PaginatedResponse.build(query, total, items)


async def react_to_comment(
    db: AsyncSession,
    comment_id: uuid.UUID,
    user_id: uuid.UUID,
    user_login: str,
    status: "LikeStatus | str",
) -> None:
    new = LikeStatus.parse(status)
    if await _find_active_comment(db, comment_id) is None:
        raise NotFoundError("Comment not found")
    await reaction_service.set_reaction(
        db, comment_id, EntityType.COMMENT, user_id, user_login, new
    )
