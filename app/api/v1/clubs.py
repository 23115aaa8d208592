"""Clubs API."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.club import (
    ClubCreate,
    ClubFilters,
    ClubMemberResponse,
    ClubMemberRoleUpdate,
    ClubResponse,
    ClubUpdate,
)
from app.schemas.common import OffsetPage, ToggleResponse
from app.services import club_service

router = APIRouter(prefix="/clubs", tags=["clubs"])


@router.post("", response_model=ClubResponse, status_code=201)
async def post_club(
    payload: ClubCreate,
    current_user: User = Depends(get_current_active_user),
) -> ClubResponse:
    return await club_service.create_club(current_user.id, payload)


@router.get("", response_model=OffsetPage[ClubResponse])
async def get_clubs(
    filters: ClubFilters = Depends(),
    session: AsyncSession = Depends(get_db),
) -> OffsetPage[ClubResponse]:
    return await club_service.list_clubs(session, filters)


@router.get("/{club_id}", response_model=ClubResponse)
async def get_club(club_id: int, session: AsyncSession = Depends(get_db)) -> ClubResponse:
    return await club_service.get_club(session, club_id)


@router.patch("/{club_id}", response_model=ClubResponse)
async def patch_club(
    club_id: int,
    payload: ClubUpdate,
    current_user: User = Depends(get_current_active_user),
) -> ClubResponse:
    return await club_service.update_club(current_user.id, club_id, payload)


@router.delete("/{club_id}", status_code=204)
async def delete_club(
    club_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await club_service.delete_club(current_user.id, club_id)


@router.get("/{club_id}/members", response_model=list[ClubMemberResponse])
async def get_members(club_id: int, session: AsyncSession = Depends(get_db)) -> list[ClubMemberResponse]:
    return await club_service.list_club_members(session, club_id)


@router.post("/{club_id}/members", response_model=ClubMemberResponse, status_code=201)
async def post_join(
    club_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ClubMemberResponse:
    return await club_service.join_club(current_user.id, club_id)


@router.delete("/{club_id}/members/me", status_code=204)
async def delete_leave(
    club_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await club_service.leave_club(current_user.id, club_id)


@router.patch("/{club_id}/members/{user_id}", response_model=ClubMemberResponse)
async def patch_member_role(
    club_id: int,
    user_id: int,
    payload: ClubMemberRoleUpdate,
    current_user: User = Depends(get_current_active_user),
) -> ClubMemberResponse:
    return await club_service.update_club_member_role(
        current_user.id, club_id, user_id, payload.role
    )


@router.post("/{club_id}/like", response_model=ToggleResponse)
async def post_toggle_like(
    club_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ToggleResponse:
    return await club_service.toggle_club_like(current_user.id, club_id)
