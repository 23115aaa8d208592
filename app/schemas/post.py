"""Post·Comment·Like·Bookmark 스키마."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.user import UserSummary


class PostCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(..., min_length=1, max_length=5000)
    image_url: str | None = Field(None, max_length=2048)


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    author_id: int
    content: str
    image_url: str | None = None
    created_at: datetime
    author: UserSummary | None = None
    like_count: int = 0
    comment_count: int = 0


class CommentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    author_id: int
    content: str
    created_at: datetime


class CommentWindow(BaseModel):
    """오래된 순 창. previous_cursor로 더 오래된 댓글을 이어서 조회."""

    items: list[CommentResponse]
    previous_cursor: int | None = None


class LikeInfo(BaseModel):
    like_count: int
    is_liked_by_user: bool


class BookmarkInfo(BaseModel):
    is_bookmarked_by_user: bool
