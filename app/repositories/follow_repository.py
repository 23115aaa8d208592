"""Follow·FollowRequest Repository."""

from typing import Literal

from sqlalchemy import and_, delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import apply_desc_cursor
from app.models.enums import FollowRequestStatus, UserStatus
from app.models.follow import Follow, FollowRequest
from app.models.user import User


async def get_follow(
    session: AsyncSession, follower_id: int, following_id: int
) -> Follow | None:
    result = await session.execute(
        select(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.scalars().one_or_none()


async def create_follow(session: AsyncSession, follower_id: int, following_id: int) -> None:
    """ON CONFLICT DO NOTHING. 동시 요청에도 엣지는 1개."""
    await session.execute(
        pg_insert(Follow)
        .values(follower_id=follower_id, following_id=following_id)
        .on_conflict_do_nothing(constraint="uq_follow_pair")
    )


async def delete_follow(session: AsyncSession, follower_id: int, following_id: int) -> int:
    result = await session.execute(
        delete(Follow).where(
            Follow.follower_id == follower_id,
            Follow.following_id == following_id,
        )
    )
    return result.rowcount or 0


async def count_followers(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(Follow.id)).where(Follow.following_id == user_id)
    )
    return int(result.scalar_one())


async def count_following(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(Follow.id)).where(Follow.follower_id == user_id)
    )
    return int(result.scalar_one())


async def get_request(
    session: AsyncSession, requester_id: int, target_id: int
) -> FollowRequest | None:
    result = await session.execute(
        select(FollowRequest).where(
            FollowRequest.requester_id == requester_id,
            FollowRequest.target_id == target_id,
        )
    )
    return result.scalars().one_or_none()


async def get_request_by_id(
    session: AsyncSession, request_id: int, *, for_update: bool = False
) -> FollowRequest | None:
    stmt = select(FollowRequest).where(FollowRequest.id == request_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def list_pending_requests(
    session: AsyncSession,
    user_id: int,
    direction: Literal["received", "sent"],
) -> list[FollowRequest]:
    """PENDING 요청 최신순. received=내가 target, sent=내가 requester."""
    col = FollowRequest.target_id if direction == "received" else FollowRequest.requester_id
    result = await session.execute(
        select(FollowRequest)
        .where(col == user_id, FollowRequest.status == FollowRequestStatus.PENDING)
        .order_by(FollowRequest.created_at.desc(), FollowRequest.id.desc())
    )
    return list(result.scalars().all())


async def list_followers(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int
) -> list[tuple[Follow, User]]:
    """user_id를 팔로우하는 유저. Follow.id 커서."""
    stmt = (
        select(Follow, User)
        .join(User, User.id == Follow.follower_id)
        .where(Follow.following_id == user_id)
    )
    stmt = apply_desc_cursor(stmt, Follow.id, cursor, limit)
    result = await session.execute(stmt)
    return [(f, u) for f, u in result.all()]


async def list_following(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int
) -> list[tuple[Follow, User]]:
    stmt = (
        select(Follow, User)
        .join(User, User.id == Follow.following_id)
        .where(Follow.follower_id == user_id)
    )
    stmt = apply_desc_cursor(stmt, Follow.id, cursor, limit)
    result = await session.execute(stmt)
    return [(f, u) for f, u in result.all()]


async def suggest_users(
    session: AsyncSession, user_id: int, limit: int
) -> list[tuple[User, int]]:
    """
    추천 유저: ACTIVE, 본인 제외, 이미 팔로우 중 제외, 양방향 PENDING 요청 제외.
    팔로워 수 내림차순.
    """
    already_following = select(Follow.following_id).where(Follow.follower_id == user_id)
    pending_pairs = select(FollowRequest.target_id).where(
        FollowRequest.requester_id == user_id,
        FollowRequest.status == FollowRequestStatus.PENDING,
    ).union(
        select(FollowRequest.requester_id).where(
            FollowRequest.target_id == user_id,
            FollowRequest.status == FollowRequestStatus.PENDING,
        )
    )
    follower_count = func.count(Follow.id).label("follower_count")
    stmt = (
        select(User, follower_count)
        .outerjoin(Follow, Follow.following_id == User.id)
        .where(
            User.id != user_id,
            User.status == UserStatus.ACTIVE,
            User.id.not_in(already_following),
            User.id.not_in(pending_pairs),
        )
        .group_by(User.id)
        .order_by(follower_count.desc(), User.id.desc())
        .limit(limit)
    )
    result = await session.execute(stmt)
    return [(u, int(c)) for u, c in result.all()]


async def has_pending_request(session: AsyncSession, requester_id: int, target_id: int) -> bool:
    result = await session.execute(
        select(FollowRequest.id).where(
            and_(
                FollowRequest.requester_id == requester_id,
                FollowRequest.target_id == target_id,
                FollowRequest.status == FollowRequestStatus.PENDING,
            )
        )
    )
    return result.first() is not None

