"""Post·Comment·Like·Bookmark Repository."""

from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import apply_desc_cursor
from app.models.follow import Follow
from app.models.post import Bookmark, Comment, Like, Post
from app.models.user import User


def _counts() -> tuple[Any, Any]:
    like_count = (
        select(func.count(Like.id)).where(Like.post_id == Post.id).correlate(Post).scalar_subquery()
    )
    comment_count = (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )
    return like_count, comment_count


def _feed_select() -> Select:
    """(Post, User, like_count, comment_count)."""
    like_count, comment_count = _counts()
    return select(Post, User, like_count, comment_count).join(User, User.id == Post.author_id)


async def _run_feed(session: AsyncSession, stmt: Select, cursor: int | None, limit: int) -> list[tuple[Any, ...]]:
    stmt = apply_desc_cursor(stmt, Post.id, cursor, limit)
    result = await session.execute(stmt)
    return [tuple(row) for row in result.all()]


async def list_following_feed(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int
) -> list[tuple[Any, ...]]:
    following = select(Follow.following_id).where(Follow.follower_id == user_id)
    stmt = _feed_select().where(Post.author_id.in_(following))
    return await _run_feed(session, stmt, cursor, limit)


async def list_user_posts(
    session: AsyncSession, author_id: int, cursor: int | None, limit: int
) -> list[tuple[Any, ...]]:
    return await _run_feed(session, _feed_select().where(Post.author_id == author_id), cursor, limit)


async def list_all_posts(
    session: AsyncSession, cursor: int | None, limit: int
) -> list[tuple[Any, ...]]:
    return await _run_feed(session, _feed_select(), cursor, limit)


async def list_bookmarked_posts(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int
) -> list[tuple[Any, ...]]:
    """북마크한 순(Bookmark.id 커서). (Bookmark, Post, User, like_count, comment_count)."""
    like_count, comment_count = _counts()
    stmt = (
        select(Bookmark, Post, User, like_count, comment_count)
        .join(Post, Post.id == Bookmark.post_id)
        .join(User, User.id == Post.author_id)
        .where(Bookmark.user_id == user_id)
    )
    stmt = apply_desc_cursor(stmt, Bookmark.id, cursor, limit)
    result = await session.execute(stmt)
    return [tuple(row) for row in result.all()]


async def get_post(session: AsyncSession, post_id: int) -> Post | None:
    return await session.get(Post, post_id)


async def get_comment(session: AsyncSession, comment_id: int) -> Comment | None:
    return await session.get(Comment, comment_id)


async def list_comment_window(
    session: AsyncSession, post_id: int, before_id: int | None, limit: int
) -> list[Comment]:
    """before_id 이전 댓글 중 최신 limit+1건(내림차순). 호출 측에서 오름차순으로 뒤집는다."""
    stmt = select(Comment).where(Comment.post_id == post_id)
    stmt = apply_desc_cursor(stmt, Comment.id, before_id, limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_likes(session: AsyncSession, post_id: int) -> int:
    result = await session.execute(select(func.count(Like.id)).where(Like.post_id == post_id))
    return int(result.scalar_one())


async def has_liked(session: AsyncSession, user_id: int, post_id: int) -> bool:
    result = await session.execute(
        select(Like.id).where(Like.user_id == user_id, Like.post_id == post_id)
    )
    return result.first() is not None


async def insert_like(session: AsyncSession, user_id: int, post_id: int) -> bool:
    """새로 생성되면 True. 이미 있으면 False(멱등)."""
    result = await session.execute(
        pg_insert(Like)
        .values(user_id=user_id, post_id=post_id)
        .on_conflict_do_nothing(constraint="uq_like_user_post")
        .returning(Like.id)
    )
    return result.first() is not None


async def delete_like(session: AsyncSession, user_id: int, post_id: int) -> int:
    result = await session.execute(
        delete(Like).where(Like.user_id == user_id, Like.post_id == post_id)
    )
    return result.rowcount or 0


async def has_bookmarked(session: AsyncSession, user_id: int, post_id: int) -> bool:
    result = await session.execute(
        select(Bookmark.id).where(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
    )
    return result.first() is not None


async def insert_bookmark(session: AsyncSession, user_id: int, post_id: int) -> None:
    await session.execute(
        pg_insert(Bookmark)
        .values(user_id=user_id, post_id=post_id)
        .on_conflict_do_nothing(constraint="uq_bookmark_user_post")
    )


async def delete_bookmark(session: AsyncSession, user_id: int, post_id: int) -> int:
    result = await session.execute(
        delete(Bookmark).where(Bookmark.user_id == user_id, Bookmark.post_id == post_id)
    )
    return result.rowcount or 0

