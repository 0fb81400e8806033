"""
Post service: listings, detail, reactions and blog-owner mutations.

Design notes
------------
- Like/dislike counts are denormalized on ``posts`` and moved only by
  ``counter_service``.  ``react_to_post`` locks the post row first
  (``SELECT .. FOR UPDATE``) so concurrent reactions to one post run one
  after the other: the old status each of them reads is the real one,
  and no counter is bumped or dropped twice.
- Listing pages are cached without the viewer's status; ``myStatus`` is
  overlaid from the database for every request.  Writes purge the cached
  pages only once their transaction has committed (``after_commit``).
- Post reads use ``populate_existing`` because counters are written by
  Core ``UPDATE`` statements that bypass the identity map.
- Guards run existence (blog, then post within the blog) before
  authorship.
"""
import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.cache import cache, post_list_key
from blog_platform.config import settings
from blog_platform.database import after_commit
from blog_platform.errors import NotFoundError
from blog_platform.models import Blog, DeletionStatus, EntityType, LikeStatus, Post
from blog_platform.pagination import DEFAULT_SORT_FIELD, PageQuery, PaginatedResponse
from blog_platform.schemas import PostCreate, PostUpdate
from blog_platform.services import blog_service, counter_service, reaction_service
from blog_platform.services.guards import ensure_author, ensure_exists
from blog_platform.views import post_view

logger = logging.getLogger(__name__)

# Public sort names -> columns.  Anything else sorts by createdAt.
BLOG_POSTS_SORT_COLUMNS = {
    DEFAULT_SORT_FIELD: Post.created_at,
    "title": Post.title,
    "shortDescription": Post.short_description,
    "content": Post.content,
}
ALL_POSTS_SORT_COLUMNS = {**BLOG_POSTS_SORT_COLUMNS, "blogName": Blog.name}

BLOG_POSTS_SORT_FIELDS = frozenset(BLOG_POSTS_SORT_COLUMNS)
ALL_POSTS_SORT_FIELDS = frozenset(ALL_POSTS_SORT_COLUMNS)


def _active():
    return Post.deletion_status == DeletionStatus.ACTIVE


def _overlay_status(items: list[dict], statuses: dict[uuid.UUID, LikeStatus]) -> None:
    for item in items:
        status = statuses.get(uuid.UUID(item["id"]), LikeStatus.NONE)
        item["extendedLikesInfo"]["myStatus"] = status.value


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_posts(
    db: AsyncSession,
    query: PageQuery,
    viewer_id: uuid.UUID | None = None,
    blog_id: uuid.UUID | None = None,
) -> PaginatedResponse:
    """
    Return one page of active posts, globally or for *blog_id*.

    On a cache miss four statements are issued: COUNT, the page itself
    (joined with the blog for its name), the newest likers of the whole
    page, and (with a viewer) the viewer's statuses for the page.
    """
    if blog_id is not None:
        if await blog_service.find_blog(db, blog_id) is None:
            raise NotFoundError("Blog not found")
        columns = BLOG_POSTS_SORT_COLUMNS
    else:
        columns = ALL_POSTS_SORT_COLUMNS

    cache_key = post_list_key(query, blog_id)
    cached = await cache.get(cache_key)
    if cached:
        response = PaginatedResponse.model_validate(cached)
    else:
        filters = [_active()]
        if blog_id is not None:
            filters.append(Post.blog_id == blog_id)

        count_q = select(func.count()).select_from(Post).where(*filters)
        total: int = (await db.execute(count_q)).scalar_one()

        page_q = (
            select(Post, Blog.name)
            .join(Blog, Blog.id == Post.blog_id)
            .where(*filters)
            .order_by(*query.order_by(columns, Post.id))
            .offset(query.offset)
            .limit(query.page_size)
            .execution_options(populate_existing=True)
        )
        rows = (await db.execute(page_q)).all()

        newest = await reaction_service.get_newest_likes(
            db, [post.id for post, _ in rows], EntityType.POST
        )
        response = PaginatedResponse.build(
            query,
            total,
            [post_view(post, blog_name, newest_likes=newest.get(post.id)) for post, blog_name in rows],
        )
        await cache.set(cache_key, response.model_dump(by_alias=True), ttl=settings.CACHE_TTL_LIST)

    if viewer_id is not None and response.items:
        statuses = await reaction_service.get_reactions_for_user(
            db, [uuid.UUID(item["id"]) for item in response.items], EntityType.POST, viewer_id
        )
        _overlay_status(response.items, statuses)
    return response


async def get_post(
    db: AsyncSession, post_id: uuid.UUID, viewer_id: uuid.UUID | None = None
) -> dict:
    q = (
        select(Post, Blog.name)
        .join(Blog, Blog.id == Post.blog_id)
        .where(Post.id == post_id, _active())
        .execution_options(populate_existing=True)
    )
    row = (await db.execute(q)).one_or_none()
    if row is None:
        raise NotFoundError("Post not found")
    post, blog_name = row

    my_status = await reaction_service.get_reaction(db, post.id, EntityType.POST, viewer_id)
    newest = await reaction_service.get_recent_likers(db, post.id, EntityType.POST)
    return post_view(post, blog_name, my_status, newest)


async def ensure_post_exists(db: AsyncSession, post_id: uuid.UUID, lock: bool = False) -> uuid.UUID:
    """Raise ``NotFoundError`` unless *post_id* is an active post."""
    q = select(Post.id).where(Post.id == post_id, _active())
    if lock:
        q = q.with_for_update()
    found = (await db.execute(q)).scalar_one_or_none()
    if found is None:
        raise NotFoundError("Post not found")
    return found


# ---------------------------------------------------------------------------
# Reactions
# ---------------------------------------------------------------------------

async def react_to_post(
    db: AsyncSession,
    post_id: uuid.UUID,
    user_id: uuid.UUID,
    user_login: str,
    status: "LikeStatus | str",
) -> None:
    new = LikeStatus.parse(status)
    await ensure_post_exists(db, post_id, lock=True)

    old = await reaction_service.set_reaction(
        db, post_id, EntityType.POST, user_id, user_login, new
    )
    await counter_service.apply_transition(db, post_id, old, new)
    if old is not new:
        after_commit(db, cache.invalidate_posts)


# ---------------------------------------------------------------------------
# Blog-owner mutations
# ---------------------------------------------------------------------------

async def _get_owned_post(
    db: AsyncSession, blog_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
) -> Post:
    blog = ensure_exists(await blog_service.find_blog(db, blog_id), "Blog not found")
    q = (
        select(Post)
        .where(Post.id == post_id, Post.blog_id == blog_id)
        .execution_options(populate_existing=True)
    )
    post = ensure_exists((await db.execute(q)).scalar_one_or_none(), "Post not found")
    ensure_author(blog.user_id, user_id, "You are not the owner of this blog")
    return post


async def create_post(
    db: AsyncSession, blog_id: uuid.UUID, user_id: uuid.UUID, data: PostCreate
) -> dict:
    blog = ensure_exists(await blog_service.find_blog(db, blog_id), "Blog not found")
    ensure_author(blog.user_id, user_id, "You are not the owner of this blog")

    post = Post(
        title=data.title,
        short_description=data.short_description,
        content=data.content,
        blog_id=blog.id,
        likes_count=0,
        dislikes_count=0,
    )
    db.add(post)
    await db.flush()
    after_commit(db, cache.invalidate_posts)
    logger.info("Post %s created in blog %s", post.id, blog.id)
    return post_view(post, blog.name)


async def update_post(
    db: AsyncSession,
    blog_id: uuid.UUID,
    post_id: uuid.UUID,
    user_id: uuid.UUID,
    data: PostUpdate,
) -> None:
    post = await _get_owned_post(db, blog_id, post_id, user_id)
    post.title = data.title
    post.short_description = data.short_description
    post.content = data.content
    await db.flush()
    after_commit(db, cache.invalidate_posts)


async def delete_post(
    db: AsyncSession, blog_id: uuid.UUID, post_id: uuid.UUID, user_id: uuid.UUID
) -> None:
    """
    Soft-delete the post and drop its reactions in the same transaction;
    counters go back to zero so they keep matching the reaction rows.
    """
    post = await _get_owned_post(db, blog_id, post_id, user_id)
    post.deletion_status = DeletionStatus.DELETED
    await db.flush()
    await reaction_service.delete_reactions(db, post.id, EntityType.POST)
    await counter_service.reset_counters(db, post.id)
    after_commit(db, cache.invalidate_posts)
    logger.info("Post %s soft-deleted by %s", post.id, user_id)
