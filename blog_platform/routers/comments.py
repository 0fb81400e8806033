import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_platform.database import get_db
from blog_platform.dependencies import CurrentUser, get_current_user, get_viewer_id
from blog_platform.schemas import CommentResponse, CommentUpdate, LikeStatusUpdate
from blog_platform.services import comment_service

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])


@router.get("/{comment_id}", response_model=CommentResponse)
async def get_comment(
    comment_id: uuid.UUID,
    viewer_id: uuid.UUID | None = Depends(get_viewer_id),
    db: AsyncSession = Depends(get_db),
):
    return await comment_service.get_comment(db, comment_id, viewer_id)


@router.put("/{comment_id}", status_code=204)
async def update_comment(
    comment_id: uuid.UUID,
    data: CommentUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.update_comment(db, comment_id, user.id, data)


@router.delete("/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.delete_comment(db, comment_id, user.id)


@router.put("/{comment_id}/like-status", status_code=204)
async def set_comment_like_status(
    comment_id: uuid.UUID,
    data: LikeStatusUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await comment_service.react_to_comment(db, comment_id, user.id, user.login, data.like_status)
