"""
Invitations API. 초대 생성·조회·취소(초대자), 토큰 기반 조회·수락·거절.
토큰 조회/거절은 인증 없이 가능, 수락은 로그인 필요(이메일 일치 검사).
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.core.deps import get_client_meta
from app.models.user import User
from app.schemas.common import OffsetPage
from app.schemas.invitation import (
    InvitationCreate,
    InvitationDecline,
    InvitationFilters,
    InvitationResponse,
    PublicInvitationResponse,
)
from app.services import invitation_service

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post("", response_model=InvitationResponse, status_code=201)
async def post_invitation(
    payload: InvitationCreate,
    request: Request,
    current_user: User = Depends(get_current_active_user),
) -> InvitationResponse:
    ip, user_agent = get_client_meta(request)
    return await invitation_service.create_invitation(
        current_user.id, payload, ip_address=ip, user_agent=user_agent
    )


@router.get("", response_model=OffsetPage[InvitationResponse])
async def get_invitations(
    filters: InvitationFilters = Depends(),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> OffsetPage[InvitationResponse]:
    """내가 보낸 초대. PENDING 먼저, 이후 최신순."""
    return await invitation_service.list_invitations(session, current_user.id, filters)


@router.get("/pending", response_model=list[PublicInvitationResponse])
async def get_my_pending(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[PublicInvitationResponse]:
    """내 이메일로 온 유효한 초대."""
    return await invitation_service.list_my_pending_invitations(session, current_user.id)


@router.get("/token/{token}", response_model=PublicInvitationResponse)
async def get_by_token(token: str, session: AsyncSession = Depends(get_db)) -> PublicInvitationResponse:
    return await invitation_service.get_invitation_by_token(session, token)


@router.post("/token/{token}/accept", response_model=InvitationResponse)
async def post_accept(
    token: str,
    request: Request,
    current_user: User = Depends(get_current_active_user),
) -> InvitationResponse:
    ip, user_agent = get_client_meta(request)
    return await invitation_service.accept_invitation(
        token, current_user.id, ip_address=ip, user_agent=user_agent
    )


@router.post("/token/{token}/decline", response_model=InvitationResponse)
async def post_decline(token: str, payload: InvitationDecline | None = None) -> InvitationResponse:
    return await invitation_service.decline_invitation(token, payload.reason if payload else None)


@router.get("/{invitation_id}", response_model=InvitationResponse)
async def get_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> InvitationResponse:
    return await invitation_service.get_invitation(session, invitation_id, current_user.id)


@router.delete("/{invitation_id}", response_model=InvitationResponse)
async def delete_invitation(
    invitation_id: int,
    current_user: User = Depends(get_current_active_user),
) -> InvitationResponse:
    """초대 취소(초대자 전용, PENDING만)."""
    return await invitation_service.cancel_invitation(current_user.id, invitation_id)
