"""Posts API. 게시글·피드·댓글·좋아요·북마크."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage
from app.schemas.post import (
    BookmarkInfo,
    CommentCreate,
    CommentResponse,
    CommentWindow,
    LikeInfo,
    PostCreate,
    PostResponse,
)
from app.services import post_service

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("", response_model=PostResponse, status_code=201)
async def post_post(
    payload: PostCreate,
    current_user: User = Depends(get_current_active_user),
) -> PostResponse:
    return await post_service.create_post(current_user.id, payload)


@router.get("/feed/following", response_model=CursorPage[PostResponse])
async def get_following_feed(
    cursor: int | None = Query(None, ge=1),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[PostResponse]:
    return await post_service.following_feed(session, current_user.id, cursor)


@router.get("/feed/for-you", response_model=CursorPage[PostResponse])
async def get_for_you_feed(
    cursor: int | None = Query(None, ge=1),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[PostResponse]:
    return await post_service.for_you_feed(session, cursor)


@router.get("/bookmarks", response_model=CursorPage[PostResponse])
async def get_bookmarks(
    cursor: int | None = Query(None, ge=1),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[PostResponse]:
    return await post_service.list_bookmarks(session, current_user.id, cursor)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await post_service.delete_post(current_user.id, post_id)


@router.get("/{post_id}/comments", response_model=CommentWindow)
async def get_comments(
    post_id: int,
    cursor: int | None = Query(None, ge=1, description="previous_cursor 값"),
    session: AsyncSession = Depends(get_db),
) -> CommentWindow:
    return await post_service.list_comments(session, post_id, cursor)


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def post_comment(
    post_id: int,
    payload: CommentCreate,
    current_user: User = Depends(get_current_active_user),
) -> CommentResponse:
    return await post_service.create_comment(current_user.id, post_id, payload)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await post_service.delete_comment(current_user.id, comment_id)


@router.get("/{post_id}/likes", response_model=LikeInfo)
async def get_likes(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> LikeInfo:
    return await post_service.get_like_info(session, current_user.id, post_id)


@router.post("/{post_id}/likes", response_model=LikeInfo)
async def post_like(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
) -> LikeInfo:
    return await post_service.like(current_user.id, post_id)


@router.delete("/{post_id}/likes", response_model=LikeInfo)
async def delete_like(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
) -> LikeInfo:
    return await post_service.unlike(current_user.id, post_id)


@router.get("/{post_id}/bookmark", response_model=BookmarkInfo)
async def get_bookmark(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> BookmarkInfo:
    return await post_service.get_bookmark_info(session, current_user.id, post_id)


@router.post("/{post_id}/bookmark", response_model=BookmarkInfo)
async def post_bookmark(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
) -> BookmarkInfo:
    return await post_service.bookmark(current_user.id, post_id)


@router.delete("/{post_id}/bookmark", response_model=BookmarkInfo)
async def delete_bookmark(
    post_id: int,
    current_user: User = Depends(get_current_active_user),
) -> BookmarkInfo:
    return await post_service.unbookmark(current_user.id, post_id)
