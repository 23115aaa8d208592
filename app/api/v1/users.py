"""Users API. 프로필, 스킬, 관리자용 상태/역할 변경."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user, get_optional_user_id
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage
from app.schemas.follow import SuggestedUser
from app.schemas.post import PostResponse
from app.schemas.user import (
    ProfileResponse,
    ProfileUpdate,
    SkillsUpdate,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
)
from app.services import follow_service, post_service, user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    return await user_service.get_me(session, current_user.id)


@router.patch("/me", response_model=UserResponse)
async def patch_me(
    payload: ProfileUpdate,
    current_user: User = Depends(get_current_active_user),
) -> UserResponse:
    return await user_service.update_profile(current_user.id, payload)


@router.put("/me/skills", response_model=list[str])
async def put_my_skills(
    payload: SkillsUpdate,
    current_user: User = Depends(get_current_active_user),
) -> list[str]:
    """스킬 목록 교체. 정규화된 이름 목록 반환."""
    return await user_service.set_user_skills(current_user.id, payload.skills)


@router.get("/suggestions", response_model=list[SuggestedUser])
async def get_suggestions(
    limit: int = Query(5, ge=1, le=20),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[SuggestedUser]:
    """팔로우 추천. 아직 팔로우하지 않은 사용자 중 팔로워 많은 순."""
    return await follow_service.suggest_users(session, current_user.id, limit)


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    viewer_id: int | None = Depends(get_optional_user_id),
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    return await user_service.get_by_username(session, username, viewer_id)


@router.get("/{username}/posts", response_model=CursorPage[PostResponse])
async def get_user_posts(
    username: str,
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[PostResponse]:
    return await post_service.user_posts(session, username, cursor, limit)


@router.patch("/{user_id}/status", response_model=UserResponse)
async def patch_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    current_user: User = Depends(get_current_active_user),
) -> UserResponse:
    """관리자 전용."""
    return await user_service.update_user_status(current_user.id, user_id, payload)


@router.patch("/{user_id}/role", response_model=UserResponse)
async def patch_user_role(
    user_id: int,
    payload: UserRoleUpdate,
    current_user: User = Depends(get_current_active_user),
) -> UserResponse:
    """관리자 전용."""
    return await user_service.update_user_role(current_user.id, user_id, payload)
