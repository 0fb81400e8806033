import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.database import get_db
from blog_platform.dependencies import CurrentUser, PaginationParams, get_current_user, get_viewer_id
from blog_platform.pagination import PaginatedResponse
from blog_platform.schemas import CommentCreate, CommentResponse, LikeStatusUpdate, PostResponse
from blog_platform.services import comment_service, post_service

router = APIRouter(prefix="/api/v1/posts", tags=["posts"])


@router.get("", response_model=PaginatedResponse)
async def list_posts(
    pagination: PaginationParams = Depends(),
    viewer_id: uuid.UUID | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    query = pagination.to_query(post_service.ALL_POSTS_SORT_FIELDS)
    return await post_service.get_posts(db, query, viewer_id)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: uuid.UUID,
    viewer_id: uuid.UUID | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await post_service.get_post(db, post_id, viewer_id)


@router.put("/{post_id}/like-status", status_code=204)
async def set_post_like_status(
    post_id: uuid.UUID,
    data: LikeStatusUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await post_service.react_to_post(db, post_id, user.id, user.login, data.like_status)


@router.get("/{post_id}/comments", response_model=PaginatedResponse)
async def list_post_comments(
    post_id: uuid.UUID,
    pagination: PaginationParams = Depends(),
    viewer_id: uuid.UUID | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    query = pagination.to_query(comment_service.COMMENT_SORT_FIELDS)
    return await comment_service.get_comments_for_post(db, post_id, query, viewer_id)


@router.post("/{post_id}/comments", status_code=201, response_model=CommentResponse)
async def create_comment(
    post_id: uuid.UUID,
    data: CommentCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.create_comment(db, post_id, user.id, user.login, data)
