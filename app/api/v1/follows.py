"""Follow API. 팔로우/언팔로우, 팔로우 요청 수락·거절·취소, 팔로워 목록."""

from typing import Literal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage
from app.schemas.follow import FollowerInfo, FollowRequestResponse, FollowResult
from app.schemas.user import UserSummary
from app.services import follow_service

router = APIRouter(tags=["follows"])


@router.post("/users/{user_id}/follow", response_model=FollowResult)
async def post_follow(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
) -> FollowResult:
    """공개 계정은 즉시 FOLLOWING, 비공개 계정은 REQUESTED."""
    return await follow_service.follow(current_user.id, user_id)


@router.delete("/users/{user_id}/follow", response_model=FollowResult)
async def delete_follow(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
) -> FollowResult:
    return await follow_service.unfollow(current_user.id, user_id)


@router.get("/users/{user_id}/follower-info", response_model=FollowerInfo)
async def get_follower_info(
    user_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> FollowerInfo:
    return await follow_service.get_follower_info(session, current_user.id, user_id)


@router.get("/users/{user_id}/followers", response_model=CursorPage[UserSummary])
async def get_followers(
    user_id: int,
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[UserSummary]:
    return await follow_service.list_followers(session, user_id, cursor, limit)


@router.get("/users/{user_id}/following", response_model=CursorPage[UserSummary])
async def get_following(
    user_id: int,
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[UserSummary]:
    return await follow_service.list_following(session, user_id, cursor, limit)


@router.get("/follow-requests", response_model=list[FollowRequestResponse])
async def get_follow_requests(
    direction: Literal["received", "sent"] = Query("received"),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[FollowRequestResponse]:
    return await follow_service.list_follow_requests(session, current_user.id, direction)


@router.post("/follow-requests/{request_id}/accept", response_model=FollowRequestResponse)
async def post_accept_request(
    request_id: int,
    current_user: User = Depends(get_current_active_user),
) -> FollowRequestResponse:
    return await follow_service.accept_follow_request(current_user.id, request_id)


@router.post("/follow-requests/{request_id}/reject", response_model=FollowRequestResponse)
async def post_reject_request(
    request_id: int,
    current_user: User = Depends(get_current_active_user),
) -> FollowRequestResponse:
    return await follow_service.reject_follow_request(current_user.id, request_id)


@router.delete("/follow-requests/{request_id}", response_model=FollowRequestResponse)
async def delete_follow_request(
    request_id: int,
    current_user: User = Depends(get_current_active_user),
) -> FollowRequestResponse:
    """요청자가 보낸 요청 취소."""
    return await follow_service.cancel_follow_request(current_user.id, request_id)
