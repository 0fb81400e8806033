"""
Reaction store: one ``likes`` row per (user, entity, entity type).

Design notes
------------
- ``None`` is never written.  Setting ``None`` deletes the row; setting
  ``Like`` / ``Dislike`` is a single ``INSERT .. ON CONFLICT DO UPDATE``
  against the ``uq_likes_user_entity`` constraint, so concurrent callers
  for the same pair can never produce two rows.
- A status change refreshes ``created_at``: the "newest likes" of a post
  are ordered by when the user last switched to ``Like``.
- All statements are Core expressions with bound parameters.  ORM
  entities are not loaded here, so nothing in the session identity map
  goes stale after a write.
- Functions flush nothing and commit nothing; the request transaction
  owned by ``get_db`` makes the upsert and any counter adjustment atomic.
"""
import logging
import uuid
from typing import Iterable

from sqlalchemy import case, delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.config import settings
from blog_platform.errors import StorageError
from blog_platform.models import EntityType, Like, LikeStatus, ReactionStatus, utcnow
from blog_platform.views import liker_view

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _upsert_insert(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_INSERTS[dialect]
    except KeyError:
        raise StorageError(f"Reaction upsert is not supported on {dialect!r}") from None


def _pair_filter(entity_id: uuid.UUID, entity_type: EntityType, user_id: uuid.UUID):
    return (
        Like.entity_id == entity_id,
        Like.entity_type == entity_type,
        Like.user_id == user_id,
    )


def likes_sum():
    """``SUM(CASE ..)`` expressions counting likes and dislikes of a LEFT JOIN."""
    likes = func.coalesce(func.sum(case((Like.status == ReactionStatus.LIKE, 1), else_=0)), 0)
    dislikes = func.coalesce(func.sum(case((Like.status == ReactionStatus.DISLIKE, 1), else_=0)), 0)
    return likes.label("likes_count"), dislikes.label("dislikes_count")


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

async def get_reaction(
    db: AsyncSession,
    entity_id: uuid.UUID,
    entity_type: EntityType,
    user_id: uuid.UUID | None,
) -> LikeStatus:
    """Return the user's status for the entity; ``None`` when no row exists."""
    if user_id is None:
        return LikeStatus.NONE
    q = select(Like.status).where(*_pair_filter(entity_id, entity_type, user_id))
    status = (await db.execute(q)).scalar_one_or_none()
    return LikeStatus.of(status)


async def get_reactions_for_user(
    db: AsyncSession,
    entity_ids: Iterable[uuid.UUID],
    entity_type: EntityType,
    user_id: uuid.UUID | None,
) -> dict[uuid.UUID, LikeStatus]:
    """
    Batch lookup of *user_id*'s statuses.  Entities without a row are
    absent from the mapping (implicitly ``None``).
    """
    ids = list(entity_ids)
    if user_id is None or not ids:
        return {}
    q = select(Like.entity_id, Like.status).where(
        Like.entity_id.in_(ids),
        Like.entity_type == entity_type,
        Like.user_id == user_id,
    )
    rows = (await db.execute(q)).all()
    return {row.entity_id: LikeStatus.of(row.status) for row in rows}


async def get_recent_likers(
    db: AsyncSession,
    entity_id: uuid.UUID,
    entity_type: EntityType,
    limit: int = settings.NEWEST_LIKES_LIMIT,
) -> list[dict]:
    """Most recent likers, newest first; ties broken by row id."""
    q = (
        select(Like.user_id, Like.user_login, Like.created_at)
        .where(
            Like.entity_id == entity_id,
            Like.entity_type == entity_type,
            Like.status == ReactionStatus.LIKE,
        )
        .order_by(Like.created_at.desc(), Like.id.desc())
        .limit(limit)
    )
    rows = (await db.execute(q)).all()
    return [liker_view(r.user_id, r.user_login, r.created_at) for r in rows]


async def get_newest_likes(
    db: AsyncSession,
    entity_ids: Iterable[uuid.UUID],
    entity_type: EntityType,
    limit: int = settings.NEWEST_LIKES_LIMIT,
) -> dict[uuid.UUID, list[dict]]:
    """
    Batch version of :func:`get_recent_likers`: one query for a whole
    page of entities, top *limit* likers per entity via ``row_number()``.
    """
    ids = list(entity_ids)
    if not ids:
        return {}
    rank = (
        func.row_number()
        .over(
            partition_by=Like.entity_id,
            order_by=(Like.created_at.desc(), Like.id.desc()),
        )
        .label("liker_rank")
    )
    ranked = (
        select(Like.entity_id, Like.user_id, Like.user_login, Like.created_at, rank)
        .where(
            Like.entity_id.in_(ids),
            Like.entity_type == entity_type,
            Like.status == ReactionStatus.LIKE,
        )
        .subquery()
    )
    q = (
        select(ranked.c.entity_id, ranked.c.user_id, ranked.c.user_login, ranked.c.created_at)
        .where(ranked.c.liker_rank <= limit)
        .order_by(ranked.c.entity_id, ranked.c.liker_rank)
    )
    newest: dict[uuid.UUID, list[dict]] = {}
    for row in (await db.execute(q)).all():
        newest.setdefault(row.entity_id, []).append(
            liker_view(row.user_id, row.user_login, row.created_at)
        )
    return newest


async def count_reactions(
    db: AsyncSession, entity_id: uuid.UUID, entity_type: EntityType
) -> tuple[int, int]:
    """Live (likes, dislikes) aggregation, used for comments."""
    likes, dislikes = likes_sum()
    q = select(likes, dislikes).where(
        Like.entity_id == entity_id, Like.entity_type == entity_type
    )
    row = (await db.execute(q)).one()
    return int(row.likes_count), int(row.dislikes_count)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------

async def set_reaction(
    db: AsyncSession,
    entity_id: uuid.UUID,
    entity_type: EntityType,
    user_id: uuid.UUID,
    user_login: str,
    status: "LikeStatus | str",
) -> LikeStatus:
    """
    Record *user_id*'s reaction to the entity and return the previous one.

    *status* is canonicalised first (``"like"`` -> ``Like``; unknown
    values raise ``ValidationError``).  Writing the status the user
    already has is a no-op.
    """
    new = LikeStatus.parse(status)
    old = await get_reaction(db, entity_id, entity_type, user_id)

    if new is LikeStatus.NONE:
        if old is not LikeStatus.NONE:
            await db.execute(delete(Like).where(*_pair_filter(entity_id, entity_type, user_id)))
    elif new is not old:
        insert = _upsert_insert(db)
        stmt = insert(Like).values(
            id=uuid.uuid4(),
            user_id=user_id,
            user_login=user_login,
            entity_id=entity_id,
            entity_type=entity_type,
            status=new.reaction,
            created_at=utcnow(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "entity_id", "entity_type"],
            set_={
                "status": stmt.excluded.status,
                "user_login": stmt.excluded.user_login,
                "created_at": stmt.excluded.created_at,
            },
        )
        await db.execute(stmt)

    if new is not old:
        logger.info(
            "Reaction %s %s by %s: %s -> %s",
            entity_type.value, entity_id, user_id, old.value, new.value,
        )
    return old


async def delete_reactions(
    db: AsyncSession, entity_id: uuid.UUID, entity_type: EntityType
) -> int:
    """Remove every reaction to the entity (cascade on soft delete)."""
    result = await db.execute(
        delete(Like).where(Like.entity_id == entity_id, Like.entity_type == entity_type)
    )
    logger.debug("Dropped %d reaction(s) of %s %s", result.rowcount, entity_type.value, entity_id)
    return result.rowcount
