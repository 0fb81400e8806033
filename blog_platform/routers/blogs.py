import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.database import get_db
from blog_platform.dependencies import CurrentUser, PaginationParams, get_current_user, get_viewer_id
from blog_platform.pagination import PaginatedResponse
from blog_platform.schemas import BlogCreate, BlogResponse, PostCreate, PostResponse, PostUpdate
from blog_platform.services import blog_service, post_service

router = APIRouter(prefix="/api/v1/blogs", tags=["blogs"])


@router.post("", status_code=201, response_model=BlogResponse)
async def create_blog(
    data: BlogCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await blog_service.create_blog(db, user.id, data)


@router.get("/{blog_id}", response_model=BlogResponse)
async def get_blog(blog_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return await blog_service.get_blog(db, blog_id)


@router.get("/{blog_id}/posts", response_model=PaginatedResponse)
async def list_blog_posts(
    blog_id: uuid.UUID,
    pagination: PaginationParams = Depends(),
    viewer_id: uuid.UUID | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    query = pagination.to_query(post_service.BLOG_POSTS_SORT_FIELDS)
    return await post_service.get_posts(db, query, viewer_id, blog_id=blog_id)


@router.post("/{blog_id}/posts", status_code=201, response_model=PostResponse)
async def create_post(
    blog_id: uuid.UUID,
    data: PostCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.create_post(db, blog_id, user.id, data)


@router.put("/{blog_id}/posts/{post_id}", status_code=204)
async def update_post(
    blog_id: uuid.UUID,
    post_id: uuid.UUID,
    data: PostUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_service.update_post(db, blog_id, post_id, user.id, data)


@router.delete("/{blog_id}/posts/{post_id}", status_code=204)
async def delete_post(
    blog_id: uuid.UUID,
    post_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_service.delete_post(db, blog_id, post_id, user.id)
