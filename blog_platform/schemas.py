from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from blog_platform.config import settings
from blog_platform.models import LikeStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Blog ---

class BlogCreate(CamelModel):
    name: str = Field(min_length=1, max_length=15)
    description: str = Field("", max_length=500)
    website_url: str = Field("", max_length=100)


class BlogResponse(CamelModel):
    id: str
    name: str
    description: str
    website_url: str
    created_at: str


# --- Post ---

class PostCreate(CamelModel):
    title: str = Field(min_length=1, max_length=30)
    short_description: str = Field(min_length=1, max_length=100)
    content: str = Field(min_length=1, max_length=1000)


class PostUpdate(PostCreate):
    pass


class LikeDetails(CamelModel):
    added_at: str
    user_id: str
    login: str


class ExtendedLikesInfo(CamelModel):
    likes_count: int
    dislikes_count: int
    my_status: LikeStatus
    newest_likes: list[LikeDetails] = []


class PostResponse(CamelModel):
    id: str
    title: str
    short_description: str
    content: str
    blog_id: str
    blog_name: str
    created_at: str
    extended_likes_info: ExtendedLikesInfo


# --- Comment ---

class CommentCreate(CamelModel):
    content: str = Field(
        min_length=settings.COMMENT_MIN_LENGTH,
        max_length=settings.COMMENT_MAX_LENGTH,
    )


class CommentUpdate(CommentCreate):
    pass


class CommentatorInfo(CamelModel):
    user_id: str
    user_login: str


class LikesInfo(CamelModel):
    likes_count: int
    dislikes_count: int
    my_status: LikeStatus


class CommentResponse(CamelModel):
    id: str
    content: str
    commentator_info: CommentatorInfo
    created_at: str
    likes_info: LikesInfo


# --- Reactions ---

class LikeStatusUpdate(CamelModel):
    like_status: LikeStatus

    @field_validator("like_status", mode="before")
    @classmethod
    def _canonical(cls, value):
        # "like", "LIKE", " Like " all mean Like; anything else is a 422.
        return LikeStatus.parse(value)
