"""
View assembly: ORM rows -> public response dicts.

Everything here is pure.  Services fetch counters, viewer statuses and
newest likers first and pass them in; nothing in this module touches
the session.  Output keys are the public camelCase names, and ids are
rendered as strings so the dicts are JSON-ready (and cacheable) as is.
"""
from datetime import datetime, timezone

from blog_platform.models import Blog, Comment, LikeStatus, Post


def to_iso(value: datetime | None) -> str | None:
    """
    Render *value* as an ISO-8601 UTC string with millisecond precision
    and a ``Z`` suffix.  Naive datetimes (SQLite) are taken as UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def liker_view(user_id, login: str, added_at: datetime) -> dict:
    return {
        "addedAt": to_iso(added_at),
        "userId": str(user_id),
        "login": login,
    }


def comment_view(
    comment: Comment,
    likes_count: int = 0,
    dislikes_count: int = 0,
    my_status: LikeStatus = LikeStatus.NONE,
) -> dict:
    return {
        "id": str(comment.id),
        "content": comment.content,
        "commentatorInfo": {
            "userId": str(comment.user_id),
            "userLogin": comment.user_login,
        },
        "createdAt": to_iso(comment.created_at),
        "likesInfo": {
            "likesCount": int(likes_count or 0),
            "dislikesCount": int(dislikes_count or 0),
            "myStatus": LikeStatus(my_status).value,
        },
    }


def post_view(
    post: Post,
    blog_name: str,
    my_status: LikeStatus = LikeStatus.NONE,
    newest_likes: list[dict] | None = None,
) -> dict:
    return {
        "id": str(post.id),
        "title": post.title,
        "shortDescription": post.short_description,
        "content": post.content,
        "blogId": str(post.blog_id),
        "blogName": blog_name,
        "createdAt": to_iso(post.created_at),
        "extendedLikesInfo": {
            "likesCount": post.likes_count or 0,
            "dislikesCount": post.dislikes_count or 0,
            "myStatus": LikeStatus(my_status).value,
            "newestLikes": list(newest_likes or []),
        },
    }


def blog_view(blog: Blog) -> dict:
    return {
        "id": str(blog.id),
        "name": blog.name,
        "description": blog.description,
        "websiteUrl": blog.website_url,
        "createdAt": to_iso(blog.created_at),
    }
