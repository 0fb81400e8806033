"""
Blog service: the minimum needed for blogs to own posts.

A blog's ``user_id`` is the author of every post in it; post mutations
are gated on it in ``post_service``.
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.errors import NotFoundError
from blog_platform.models import Blog
from blog_platform.schemas import BlogCreate
from blog_platform.views import blog_view

logger = logging.getLogger(__name__)


async def find_blog(db: AsyncSession, blog_id: uuid.UUID) -> Blog | None:
    result = await db.execute(select(Blog).where(Blog.id == blog_id))
    return result.scalar_one_or_none()


async def get_blog(db: AsyncSession, blog_id: uuid.UUID) -> dict:
    blog = await find_blog(db, blog_id)
    if blog is None:
        raise NotFoundError("Blog not found")
    return blog_view(blog)


async def create_blog(db: AsyncSession, user_id: uuid.UUID, data: BlogCreate) -> dict:
    blog = Blog(
        name=data.name,
        description=data.description,
        website_url=data.website_url,
        user_id=user_id,
    )
    db.add(blog)
    await db.flush()
    logger.info("Blog %s created by %s", blog.id, user_id)
    return blog_view(blog)
