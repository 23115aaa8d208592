"""
Club Service. 동아리 생성/조회/수정, 가입·탈퇴, 멤버 역할, 좋아요.

클럽 삭제는 is_active=False (레코드 유지). 탈퇴도 멤버십 is_active=False로
처리하고, 재가입 시 기존 멤버십을 MEMBER로 재활성화한다.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.pagination import offset_for, total_pages
from app.models.club import Club, ClubLike, ClubMember
from app.models.enums import (
    ClubMemberRole,
    ClubStatus,
    ClubType,
    NotificationType,
    UserRole,
    parse_enum,
)
from app.repositories import club_repository, organization_repository, user_repository
from app.schemas.common import OffsetPage, ToggleResponse
from app.schemas.club import (
    ClubCreate,
    ClubFilters,
    ClubMemberResponse,
    ClubResponse,
    ClubUpdate,
)
from app.services.notification_service import create_notification
from app.services.organization_service import require_member

logger = logging.getLogger(__name__)

CLUB_CREATOR_ROLES = frozenset({UserRole.INSTITUTION, UserRole.ORGANIZATION, UserRole.ADMIN})
CLUB_MANAGER_ROLES = frozenset({ClubMemberRole.PRESIDENT, ClubMemberRole.ADVISOR})


def _to_response(club: Club, member_count: int) -> ClubResponse:
    return ClubResponse.model_validate(club).model_copy(update={"member_count": member_count})


async def _get_active_club(session: AsyncSession, club_id: int, *, for_update: bool = False) -> Club:
    club = await club_repository.get_club(session, club_id, for_update=for_update)
    if club is None or not club.is_active:
        raise NotFoundError("Club not found")
    return club


async def _active_membership(session: AsyncSession, club_id: int, user_id: int) -> ClubMember | None:
    membership = await club_repository.get_membership(session, club_id, user_id)
    if membership is None or not membership.is_active:
        return None
    return membership


async def create_club(user_id: int, payload: ClubCreate) -> ClubResponse:
    async with transaction() as session:
        user = await user_repository.get_by_id(session, user_id)
        if user is None or user.role not in {str(r) for r in CLUB_CREATOR_ROLES}:
            raise PermissionDeniedError("Your role cannot create clubs")
        if await organization_repository.get_organization(session, payload.organization_id) is None:
            raise NotFoundError("Organization not found")
        await require_member(
            session, user_id, payload.organization_id,
            message="You must be a member of the organization",
        )
        if payload.faculty_id is not None:
            faculty = await organization_repository.get_faculty(session, payload.faculty_id)
            if faculty is None or faculty.organization_id != payload.organization_id:
                raise BadRequestError("Faculty does not belong to the organization")

        club = Club(**payload.model_dump(), created_by_id=user_id, status=ClubStatus.ACTIVE)
        session.add(club)
        await session.flush()
        session.add(
            ClubMember(
                club_id=club.id,
                user_id=user_id,
                role=ClubMemberRole.PRESIDENT,
                joined_at=datetime.now(UTC),
            )
        )
        await session.flush()
        logger.info("Club %s created by user %s", club.id, user_id)
        return _to_response(club, 1)


async def list_clubs(session: AsyncSession, filters: ClubFilters) -> OffsetPage[ClubResponse]:
    status = parse_enum(ClubStatus, filters.status)
    club_type = parse_enum(ClubType, filters.club_type)
    rows, total = await club_repository.list_clubs(
        session,
        organization_id=filters.organization_id,
        faculty_id=filters.faculty_id,
        status=str(status) if status else None,
        club_type=str(club_type) if club_type else None,
        is_public=filters.is_public,
        search=filters.search,
        offset=offset_for(filters.page, filters.limit),
        limit=filters.limit,
    )
    counts = await club_repository.count_active_members_for(session, [c.id for c in rows])
    return OffsetPage[ClubResponse](
        items=[_to_response(c, counts.get(c.id, 0)) for c in rows],
        total=total,
        page=filters.page,
        limit=filters.limit,
        total_pages=total_pages(total, filters.limit),
    )


async def get_club(session: AsyncSession, club_id: int) -> ClubResponse:
    club = await _get_active_club(session, club_id)
    return _to_response(club, await club_repository.count_active_members(session, club.id))


async def update_club(user_id: int, club_id: int, payload: ClubUpdate) -> ClubResponse:
    """생성자 또는 PRESIDENT."""
    async with transaction() as session:
        club = await _get_active_club(session, club_id, for_update=True)
        if club.created_by_id != user_id:
            membership = await _active_membership(session, club_id, user_id)
            if membership is None or membership.role != ClubMemberRole.PRESIDENT:
                raise PermissionDeniedError("Only the creator or president can edit this club")
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(club, key, value)
        await session.flush()
        return _to_response(club, await club_repository.count_active_members(session, club.id))


async def delete_club(user_id: int, club_id: int) -> None:
    async with transaction() as session:
        club = await _get_active_club(session, club_id, for_update=True)
        if club.created_by_id != user_id:
            raise PermissionDeniedError("Only the creator can delete this club")
        club.is_active = False
        await session.flush()
        logger.info("Club %s deactivated by user %s", club_id, user_id)


async def list_club_members(session: AsyncSession, club_id: int) -> list[ClubMemberResponse]:
    await _get_active_club(session, club_id)
    rows = await club_repository.list_members(session, club_id)
    return [ClubMemberResponse.model_validate(m) for m in rows]


async def join_club(user_id: int, club_id: int) -> ClubMemberResponse:
    async with transaction() as session:
        club = await _get_active_club(session, club_id, for_update=True)
        if club.status != ClubStatus.ACTIVE:
            raise BadRequestError("Club is not accepting members", code="CLUB_NOT_ACTIVE")
        if not club.is_public:
            raise PermissionDeniedError("This club is private")
        membership = await club_repository.get_membership(session, club_id, user_id)
        if membership is not None and membership.is_active:
            raise ConflictError("Already a member", code="ALREADY_MEMBER")
        if club.max_members is not None:
            current = await club_repository.count_active_members(session, club_id)
            if current >= club.max_members:
                raise ConflictError("Club is full", code="CLUB_FULL")

        now = datetime.now(UTC)
        if membership is not None:
            membership.is_active = True
            membership.role = ClubMemberRole.MEMBER
            membership.joined_at = now
        else:
            membership = ClubMember(
                club_id=club_id, user_id=user_id, role=ClubMemberRole.MEMBER, joined_at=now
            )
            session.add(membership)
        await session.flush()

        advisors = await club_repository.list_members(
            session, club_id, roles=[ClubMemberRole.ADVISOR]
        )
        for advisor in advisors:
            if advisor.user_id == user_id:
                continue
            await create_notification(
                session,
                NotificationType.CLUB_JOIN,
                advisor.user_id,
                issuer_id=user_id,
                club_id=club_id,
                title=f"New member in {club.name}",
            )
        return ClubMemberResponse.model_validate(membership)


async def leave_club(user_id: int, club_id: int) -> None:
    """회장이 혼자면 탈퇴 불가(409)."""
    async with transaction() as session:
        await _get_active_club(session, club_id)
        membership = await _active_membership(session, club_id, user_id)
        if membership is None:
            raise NotFoundError("Membership not found")
        if membership.role == ClubMemberRole.PRESIDENT:
            presidents = await club_repository.list_members(
                session, club_id, roles=[ClubMemberRole.PRESIDENT]
            )
            if len(presidents) <= 1:
                raise ConflictError(
                    "Transfer the presidency before leaving", code="SOLE_PRESIDENT"
                )
        membership.is_active = False
        await session.flush()


async def update_club_member_role(
    actor_id: int, club_id: int, target_user_id: int, role: ClubMemberRole
) -> ClubMemberResponse:
    """ADVISOR 또는 PRESIDENT만."""
    async with transaction() as session:
        await _get_active_club(session, club_id)
        actor = await _active_membership(session, club_id, actor_id)
        if actor is None or actor.role not in {str(r) for r in CLUB_MANAGER_ROLES}:
            raise PermissionDeniedError("Only an advisor or president can change roles")
        target = await _active_membership(session, club_id, target_user_id)
        if target is None:
            raise NotFoundError("Membership not found")
        target.role = role
        await session.flush()
        return ClubMemberResponse.model_validate(target)


async def toggle_club_like(user_id: int, club_id: int) -> ToggleResponse:
    async with transaction() as session:
        await _get_active_club(session, club_id)
        like = await club_repository.get_like(session, user_id, club_id)
        if like is None:
            session.add(ClubLike(user_id=user_id, club_id=club_id))
        else:
            await session.delete(like)
        await session.flush()
        return ToggleResponse(
            active=like is None, count=await club_repository.count_likes(session, club_id)
        )
