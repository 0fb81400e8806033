from __future__ import annotations

import enum
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from blog_platform.database import Base
from blog_platform.errors import ValidationError


def utcnow() -> datetime:
    # Python-side timestamps keep microsecond precision on every backend,
    # which the "newest first" orderings rely on.
    return datetime.now(timezone.utc)


def _enum_column(enum_cls: type[enum.Enum], name: str) -> SQLEnum:
    # VARCHAR plus a CHECK constraint named *name*; no native DB enum type.
    return SQLEnum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
        create_constraint=True,
    )


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class DeletionStatus(str, enum.Enum):
    ACTIVE = "active"
    DELETED = "deleted"


class EntityType(str, enum.Enum):
    POST = "Post"
    COMMENT = "Comment"


class ReactionStatus(str, enum.Enum):
    """The only values a stored reaction row may carry."""

    LIKE = "Like"
    DISLIKE = "Dislike"


class LikeStatus(str, enum.Enum):
    """
    Public three-state reaction.  ``NONE`` is never persisted: it is the
    absence of a ``Like`` row.
    """

    NONE = "None"
    LIKE = "Like"
    DISLIKE = "Dislike"

    @classmethod
    def parse(cls, raw: "str | LikeStatus") -> "LikeStatus":
        """Canonicalise *raw* case-insensitively (``"like"`` -> ``Like``)."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            for member in cls:
                if member.value.lower() == raw.strip().lower():
                    return member
        raise ValidationError(f"Unknown like status: {raw!r}")

    @classmethod
    def of(cls, reaction: Optional[ReactionStatus]) -> "LikeStatus":
        if reaction is None:
            return cls.NONE
        return cls(ReactionStatus(reaction).value)

    @property
    def reaction(self) -> Optional[ReactionStatus]:
        if self is LikeStatus.NONE:
            return None
        return ReactionStatus(self.value)


# ---------------------------------------------------------------------------
# Blog
# ---------------------------------------------------------------------------
class Blog(Base):
    __tablename__ = "blogs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(15), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    website_url: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


# ---------------------------------------------------------------------------
# Post
# ---------------------------------------------------------------------------
class Post(Base):
    __tablename__ = "posts"

    __table_args__ = (
        # Posts of a blog, newest first
        Index("ix_posts_blog_id_created_at", "blog_id", "created_at"),
        CheckConstraint("likes_count >= 0", name="ck_posts_likes_count_non_negative"),
        CheckConstraint("dislikes_count >= 0", name="ck_posts_dislikes_count_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(30), nullable=False)
    short_description: Mapped[str] = mapped_column(String(100), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    blog_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("blogs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Denormalized, maintained by services.counter_service only.
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    dislikes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    deletion_status: Mapped[DeletionStatus] = mapped_column(
        _enum_column(DeletionStatus, "ck_posts_deletion_status"),
        default=DeletionStatus.ACTIVE,
        nullable=False,
    )


# ---------------------------------------------------------------------------
# Comment
# ---------------------------------------------------------------------------
class Comment(Base):
    __tablename__ = "comments"

    __table_args__ = (
        Index("ix_comments_post_id_created_at", "post_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_login: Mapped[str] = mapped_column(String(150), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    deletion_status: Mapped[DeletionStatus] = mapped_column(
        _enum_column(DeletionStatus, "ck_comments_deletion_status"),
        default=DeletionStatus.ACTIVE,
        nullable=False,
    )


# ---------------------------------------------------------------------------
# Like (one reaction row per user and entity)
# ---------------------------------------------------------------------------
class Like(Base):
    __tablename__ = "likes"

    __table_args__ = (
        UniqueConstraint("user_id", "entity_id", "entity_type", name="uq_likes_user_entity"),
        # Counting and "newest likes" lookups
        Index("ix_likes_entity_status_created_at", "entity_id", "entity_type", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    user_login: Mapped[str] = mapped_column(String(150), nullable=False)
    entity_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    entity_type: Mapped[EntityType] = mapped_column(
        _enum_column(EntityType, "ck_likes_entity_type"), nullable=False
    )
    status: Mapped[ReactionStatus] = mapped_column(
        _enum_column(ReactionStatus, "ck_likes_status"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
