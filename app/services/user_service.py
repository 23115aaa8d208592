"""User Service. 프로필 조회·수정, 관리자용 상태/역할 변경, 스킬."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from app.models.enums import AuditAction, UserRole
from app.models.user import User
from app.repositories import follow_repository, user_repository
from app.schemas.user import (
    ProfileResponse,
    ProfileUpdate,
    UserResponse,
    UserRoleUpdate,
    UserStatusUpdate,
)
from app.services.audit_service import create_audit_log, snapshot

logger = logging.getLogger(__name__)


async def _build_profile(session: AsyncSession, user: User, viewer_id: int | None) -> ProfileResponse:
    followers = await follow_repository.count_followers(session, user.id)
    following = await follow_repository.count_following(session, user.id)
    is_followed = False
    if viewer_id is not None and viewer_id != user.id:
        is_followed = await follow_repository.get_follow(session, viewer_id, user.id) is not None
    skills = await user_repository.get_skill_names(session, user.id)
    return ProfileResponse.model_validate(user).model_copy(
        update={
            "follower_count": followers,
            "following_count": following,
            "is_followed_by_viewer": is_followed,
            "skills": skills,
        }
    )


async def get_me(session: AsyncSession, user_id: int) -> ProfileResponse:
    user = await user_repository.get_by_id(session, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return await _build_profile(session, user, None)


async def get_by_username(
    session: AsyncSession, username: str, viewer_id: int | None
) -> ProfileResponse:
    user = await user_repository.get_by_username(session, username)
    if user is None:
        raise NotFoundError("User not found")
    return await _build_profile(session, user, viewer_id)


async def update_profile(user_id: int, payload: ProfileUpdate) -> UserResponse:
    """username 중복 409."""
    changes = payload.model_dump(exclude_unset=True)
    async with transaction() as session:
        user = await user_repository.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        new_username = changes.get("username")
        if new_username and new_username != user.username:
            existing = await user_repository.get_by_username(session, new_username)
            if existing is not None:
                raise ConflictError("Username already taken", code="USERNAME_TAKEN")
        await user_repository.update_fields(session, user, changes)
        return UserResponse.model_validate(user)


async def _require_admin(session: AsyncSession, admin_id: int) -> User:
    admin = await user_repository.get_by_id(session, admin_id)
    if admin is None or admin.role != UserRole.ADMIN:
        raise PermissionDeniedError("Administrator privileges required")
    return admin


async def update_user_status(
    admin_id: int, user_id: int, payload: UserStatusUpdate
) -> UserResponse:
    async with transaction() as session:
        await _require_admin(session, admin_id)
        user = await user_repository.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        before = snapshot(user)
        await user_repository.update_fields(session, user, {"status": payload.status})
        await create_audit_log(
            session, "users", user.id, AuditAction.UPDATE,
            actor_id=admin_id, previous_data=before, new_data=snapshot(user),
            reason=payload.reason,
        )
        logger.info("User %s status -> %s by admin %s", user.id, payload.status, admin_id)
        return UserResponse.model_validate(user)


async def update_user_role(admin_id: int, user_id: int, payload: UserRoleUpdate) -> UserResponse:
    async with transaction() as session:
        await _require_admin(session, admin_id)
        user = await user_repository.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        before = snapshot(user)
        await user_repository.update_fields(session, user, {"role": payload.role})
        await create_audit_log(
            session, "users", user.id, AuditAction.ROLE_CHANGE,
            actor_id=admin_id, previous_data=before, new_data=snapshot(user),
            reason=payload.reason,
        )
        return UserResponse.model_validate(user)


def normalize_skill_names(names: list[str]) -> list[str]:
    """공백 제거, 빈 값 제외, 대소문자 무시 중복 제거(첫 표기 유지)."""
    seen: set[str] = set()
    out: list[str] = []
    for raw in names:
        name = raw.strip()[:100]
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())
        out.append(name)
    return out


async def set_user_skills(user_id: int, names: list[str]) -> list[str]:
    """스킬 집합 교체. 없는 스킬은 생성."""
    cleaned = normalize_skill_names(names)
    async with transaction() as session:
        skills = await user_repository.get_or_create_skills(session, cleaned)
        await user_repository.replace_user_skills(session, user_id, [s.id for s in skills])
    return sorted(s.name for s in skills)
