"""
Denormalized like/dislike counters on posts.

Counters only ever move through single relative ``UPDATE`` statements
(``likes_count = likes_count + 1``) evaluated by the database, never a
read-modify-write in Python.  Decrements are floored at zero.  Comments
have no stored counters; their counts are aggregated on read.
"""
import uuid

from sqlalchemy import case, update
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.models import LikeStatus, Post

_COUNTERS = {
    LikeStatus.LIKE: Post.likes_count,
    LikeStatus.DISLIKE: Post.dislikes_count,
}


def transition_deltas(old: LikeStatus, new: LikeStatus) -> dict[LikeStatus, int]:
    """
    Counter deltas for a status change, keyed by the counter's status.

    >>> transition_deltas(LikeStatus.LIKE, LikeStatus.DISLIKE)
    {<LikeStatus.LIKE: 'Like'>: -1, <LikeStatus.DISLIKE: 'Dislike'>: 1}
    """
    if old is new:
        return {}
    deltas: dict[LikeStatus, int] = {}
    if old is not LikeStatus.NONE:
        deltas[old] = -1
    if new is not LikeStatus.NONE:
        deltas[new] = 1
    return deltas


async def apply_transition(
    db: AsyncSession, post_id: uuid.UUID, old: LikeStatus, new: LikeStatus
) -> None:
    deltas = transition_deltas(old, new)
    if not deltas:
        return

    values = {}
    for status, delta in deltas.items():
        column = _COUNTERS[status]
        if delta > 0:
            values[column.key] = column + delta
        else:
            values[column.key] = case((column > 0, column + delta), else_=0)

    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


async def reset_counters(db: AsyncSession, post_id: uuid.UUID) -> None:
    await db.execute(
        update(Post)
        .where(Post.id == post_id)
        .values(likes_count=0, dislikes_count=0)
        .execution_options(synchronize_session=False)
    )
