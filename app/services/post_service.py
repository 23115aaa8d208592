"""Post Service. 게시글·피드·댓글·좋아요·북마크."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.core.pagination import clamp_limit, split_cursor_page
from app.models.enums import NotificationType
from app.models.post import Comment, Post
from app.repositories import post_repository, user_repository
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
from app.schemas.user import UserSummary
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)

FEED_PAGE_SIZE = 10
COMMENT_PAGE_SIZE = 5


def _to_post(post: Post, author: Any, like_count: int, comment_count: int) -> PostResponse:
    return PostResponse.model_validate(post).model_copy(
        update={
            "author": UserSummary.model_validate(author) if author is not None else None,
            "like_count": int(like_count or 0),
            "comment_count": int(comment_count or 0),
        }
    )


def _feed_page(rows: list[tuple[Any, ...]], size: int) -> CursorPage[PostResponse]:
    page, next_cursor = split_cursor_page(rows, size, key=lambda r: r[0].id)
    return CursorPage[PostResponse](
        items=[_to_post(*row) for row in page], next_cursor=next_cursor
    )


async def create_post(user_id: int, payload: PostCreate) -> PostResponse:
    async with transaction() as session:
        post = Post(author_id=user_id, **payload.model_dump())
        session.add(post)
        await session.flush()
        return PostResponse.model_validate(post)


async def delete_post(user_id: int, post_id: int) -> None:
    async with transaction() as session:
        post = await post_repository.get_post(session, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if post.author_id != user_id:
            raise PermissionDeniedError("Only the author can delete this post")
        await session.delete(post)


async def following_feed(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int | None = None
) -> CursorPage[PostResponse]:
    size = clamp_limit(limit, FEED_PAGE_SIZE)
    rows = await post_repository.list_following_feed(session, user_id, cursor, size)
    return _feed_page(rows, size)


async def for_you_feed(
    session: AsyncSession, cursor: int | None, limit: int | None = None
) -> CursorPage[PostResponse]:
    size = clamp_limit(limit, FEED_PAGE_SIZE)
    rows = await post_repository.list_all_posts(session, cursor, size)
    return _feed_page(rows, size)


async def user_posts(
    session: AsyncSession, username: str, cursor: int | None, limit: int | None = None
) -> CursorPage[PostResponse]:
    author = await user_repository.get_by_username(session, username)
    if author is None:
        raise NotFoundError("User not found")
    size = clamp_limit(limit, FEED_PAGE_SIZE)
    rows = await post_repository.list_user_posts(session, author.id, cursor, size)
    return _feed_page(rows, size)


async def create_comment(user_id: int, post_id: int, payload: CommentCreate) -> CommentResponse:
    """본인 글이 아니면 작성자에게 COMMENT 알림."""
    async with transaction() as session:
        post = await post_repository.get_post(session, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        comment = Comment(post_id=post_id, author_id=user_id, content=payload.content)
        session.add(comment)
        await session.flush()
        if post.author_id != user_id:
            await create_notification(
                session,
                NotificationType.COMMENT,
                post.author_id,
                issuer_id=user_id,
                post_id=post_id,
                comment_id=comment.id,
            )
        return CommentResponse.model_validate(comment)


async def list_comments(
    session: AsyncSession, post_id: int, cursor: int | None, limit: int | None = None
) -> CommentWindow:
    """
    최신 댓글 창을 오래된 순으로 반환. previous_cursor를 다음 요청 cursor로 넘기면
    그보다 오래된 댓글 창을 받는다.
    """
    if await post_repository.get_post(session, post_id) is None:
        raise NotFoundError("Post not found")
    size = clamp_limit(limit, COMMENT_PAGE_SIZE)
    rows = await post_repository.list_comment_window(session, post_id, cursor, size)
    window, previous_cursor = split_cursor_page(rows, size)
    return CommentWindow(
        items=[CommentResponse.model_validate(c) for c in reversed(window)],
        previous_cursor=previous_cursor,
    )


async def delete_comment(user_id: int, comment_id: int) -> None:
    """댓글 작성자 또는 글 작성자."""
    async with transaction() as session:
        comment = await post_repository.get_comment(session, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        if comment.author_id != user_id:
            post = await post_repository.get_post(session, comment.post_id)
            if post is None or post.author_id != user_id:
                raise PermissionDeniedError("You cannot delete this comment")
        await session.delete(comment)


async def get_like_info(session: AsyncSession, user_id: int, post_id: int) -> LikeInfo:
    if await post_repository.get_post(session, post_id) is None:
        raise NotFoundError("Post not found")
    return LikeInfo(
        like_count=await post_repository.count_likes(session, post_id),
        is_liked_by_user=await post_repository.has_liked(session, user_id, post_id),
    )


async def like(user_id: int, post_id: int) -> LikeInfo:
    """멱등. 새로 좋아요한 경우에만 작성자에게 LIKE 알림(본인 글 제외)."""
    async with transaction() as session:
        post = await post_repository.get_post(session, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        created = await post_repository.insert_like(session, user_id, post_id)
        if created and post.author_id != user_id:
            await create_notification(
                session, NotificationType.LIKE, post.author_id, issuer_id=user_id, post_id=post_id
            )
        count = await post_repository.count_likes(session, post_id)
        return LikeInfo(like_count=count, is_liked_by_user=True)


async def unlike(user_id: int, post_id: int) -> LikeInfo:
    """좋아요하지 않은 글이면 404."""
    async with transaction() as session:
        removed = await post_repository.delete_like(session, user_id, post_id)
        if not removed:
            raise NotFoundError("Like not found")
        count = await post_repository.count_likes(session, post_id)
        return LikeInfo(like_count=count, is_liked_by_user=False)


async def get_bookmark_info(session: AsyncSession, user_id: int, post_id: int) -> BookmarkInfo:
    if await post_repository.get_post(session, post_id) is None:
        raise NotFoundError("Post not found")
    return BookmarkInfo(
        is_bookmarked_by_user=await post_repository.has_bookmarked(session, user_id, post_id)
    )


async def bookmark(user_id: int, post_id: int) -> BookmarkInfo:
    async with transaction() as session:
        if await post_repository.get_post(session, post_id) is None:
            raise NotFoundError("Post not found")
        await post_repository.insert_bookmark(session, user_id, post_id)
        return BookmarkInfo(is_bookmarked_by_user=True)


async def unbookmark(user_id: int, post_id: int) -> BookmarkInfo:
    async with transaction() as session:
        await post_repository.delete_bookmark(session, user_id, post_id)
        return BookmarkInfo(is_bookmarked_by_user=False)


async def list_bookmarks(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int | None = None
) -> CursorPage[PostResponse]:
    size = clamp_limit(limit, FEED_PAGE_SIZE)
    rows = await post_repository.list_bookmarked_posts(session, user_id, cursor, size)
    page, next_cursor = split_cursor_page(rows, size, key=lambda r: r[0].id)
    return CursorPage[PostResponse](
        items=[_to_post(post, author, lc, cc) for _, post, author, lc, cc in page],
        next_cursor=next_cursor,
    )
