"""
Follow Service. 팔로우/팔로우 요청 상태 머신.

NONE → (공개 계정) FOLLOWING
NONE → (비공개 계정) PENDING → ACCEPTED(엣지 생성) | REJECTED | CANCELLED
"""

import logging
from datetime import UTC, datetime
from typing import Literal

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.pagination import clamp_limit, split_cursor_page
from app.models.enums import FollowRequestStatus, NotificationType
from app.models.follow import FollowRequest
from app.repositories import follow_repository, notification_repository, user_repository
from app.schemas.common import CursorPage
from app.schemas.follow import (
    FollowerInfo,
    FollowRequestResponse,
    FollowResult,
    FollowState,
    SuggestedUser,
)
from app.schemas.user import UserSummary
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)


async def follow(user_id: int, target_id: int) -> FollowResult:
    """
    팔로우. 이미 팔로우 중이면 그대로 FOLLOWING(멱등).
    비공개 대상은 FollowRequest PENDING 생성(종료된 요청 행은 재사용), 진행 중 요청이 있으면 409.
    """
    if user_id == target_id:
        raise BadRequestError("You cannot follow yourself", code="SELF_FOLLOW")

    async with transaction() as session:
        target = await user_repository.get_by_id(session, target_id)
        if target is None:
            raise NotFoundError("User not found")

        if await follow_repository.get_follow(session, user_id, target_id) is not None:
            return FollowResult(state=FollowState.FOLLOWING)

        if target.is_private:
            req = await follow_repository.get_request(session, user_id, target_id)
            if req is not None and req.status == FollowRequestStatus.PENDING:
                raise ConflictError(
                    "Follow request already pending", code="FOLLOW_REQUEST_PENDING"
                )
            now = datetime.now(UTC)
            if req is None:
                req = FollowRequest(
                    requester_id=user_id,
                    target_id=target_id,
                    status=FollowRequestStatus.PENDING,
                    created_at=now,
                )
                session.add(req)
            else:
                req.status = FollowRequestStatus.PENDING
                req.created_at = now
                req.responded_at = None
            await session.flush()
            await create_notification(
                session, NotificationType.FOLLOW_REQUEST, target_id, issuer_id=user_id
            )
            return FollowResult(state=FollowState.REQUESTED, request_id=req.id)

        await follow_repository.create_follow(session, user_id, target_id)
        await create_notification(session, NotificationType.FOLLOW, target_id, issuer_id=user_id)
        return FollowResult(state=FollowState.FOLLOWING)


async def unfollow(user_id: int, target_id: int) -> FollowResult:
    """엣지가 없어도 성공(멱등)."""
    async with transaction() as session:
        await follow_repository.delete_follow(session, user_id, target_id)
    return FollowResult(state=FollowState.NONE)


async def get_follower_info(
    session: AsyncSession, viewer_id: int, target_id: int
) -> FollowerInfo:
    if await user_repository.get_by_id(session, target_id) is None:
        raise NotFoundError("User not found")
    count = await follow_repository.count_followers(session, target_id)
    followed = await follow_repository.get_follow(session, viewer_id, target_id) is not None
    pending = await follow_repository.has_pending_request(session, viewer_id, target_id)
    return FollowerInfo(
        follower_count=count,
        is_followed_by_user=followed,
        has_pending_request=pending,
    )


async def list_follow_requests(
    session: AsyncSession, user_id: int, direction: Literal["received", "sent"]
) -> list[FollowRequestResponse]:
    rows = await follow_repository.list_pending_requests(session, user_id, direction)
    return [FollowRequestResponse.model_validate(r) for r in rows]


async def _load_pending_request(session: AsyncSession, request_id: int) -> FollowRequest:
    req = await follow_repository.get_request_by_id(session, request_id, for_update=True)
    if req is None:
        raise NotFoundError("Follow request not found")
    return req


def _ensure_pending(req: FollowRequest) -> None:
    if req.status != FollowRequestStatus.PENDING:
        raise ConflictError(
            f"Follow request is already {req.status}", code="FOLLOW_REQUEST_NOT_PENDING"
        )


async def accept_follow_request(user_id: int, request_id: int) -> FollowRequestResponse:
    """대상만 수락. 요청 ACCEPTED + 엣지 생성 + 요청자에게 알림을 한 트랜잭션으로."""
    async with transaction() as session:
        req = await _load_pending_request(session, request_id)
        if req.target_id != user_id:
            raise PermissionDeniedError("Only the target user can accept this request")
        _ensure_pending(req)
        req.status = FollowRequestStatus.ACCEPTED
        req.responded_at = datetime.now(UTC)
        await follow_repository.create_follow(session, req.requester_id, req.target_id)
        await create_notification(
            session,
            NotificationType.FOLLOW_REQUEST_ACCEPTED,
            req.requester_id,
            issuer_id=user_id,
        )
        await session.flush()
        return FollowRequestResponse.model_validate(req)


async def reject_follow_request(user_id: int, request_id: int) -> FollowRequestResponse:
    async with transaction() as session:
        req = await _load_pending_request(session, request_id)
        if req.target_id != user_id:
            raise PermissionDeniedError("Only the target user can reject this request")
        _ensure_pending(req)
        req.status = FollowRequestStatus.REJECTED
        req.responded_at = datetime.now(UTC)
        await session.flush()
        return FollowRequestResponse.model_validate(req)


async def cancel_follow_request(user_id: int, request_id: int) -> FollowRequestResponse:
    """요청자만 취소. 대상에게 갔던 FOLLOW_REQUEST 알림도 삭제."""
    async with transaction() as session:
        req = await _load_pending_request(session, request_id)
        if req.requester_id != user_id:
            raise PermissionDeniedError("Only the requester can cancel this request")
        _ensure_pending(req)
        req.status = FollowRequestStatus.CANCELLED
        req.responded_at = datetime.now(UTC)
        await notification_repository.delete_matching(
            session,
            type=NotificationType.FOLLOW_REQUEST,
            recipient_id=req.target_id,
            issuer_id=user_id,
        )
        await session.flush()
        return FollowRequestResponse.model_validate(req)


async def list_followers(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int | None
) -> CursorPage[UserSummary]:
    size = clamp_limit(limit)
    rows = await follow_repository.list_followers(session, user_id, cursor, size)
    page, next_cursor = split_cursor_page(rows, size, key=lambda r: r[0].id)
    return CursorPage[UserSummary](
        items=[UserSummary.model_validate(u) for _, u in page], next_cursor=next_cursor
    )


async def list_following(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int | None
) -> CursorPage[UserSummary]:
    size = clamp_limit(limit)
    rows = await follow_repository.list_following(session, user_id, cursor, size)
    page, next_cursor = split_cursor_page(rows, size, key=lambda r: r[0].id)
    return CursorPage[UserSummary](
        items=[UserSummary.model_validate(u) for _, u in page], next_cursor=next_cursor
    )


async def suggest_users(
    session: AsyncSession, user_id: int, limit: int = 5
) -> list[SuggestedUser]:
    rows = await follow_repository.suggest_users(session, user_id, clamp_limit(limit))
    return [
        SuggestedUser(
            id=u.id,
            name=u.name,
            username=u.username,
            avatar_url=u.avatar_url,
            follower_count=count,
        )
        for u, count in rows
    ]
