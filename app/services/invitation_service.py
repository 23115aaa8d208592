"""
Invitation Service. 조직 초대 수명 주기.

PENDING → ACCEPTED | DECLINED | CANCELLED | EXPIRED
만료는 조회 시 expires_at > now 필터로 즉시 반영되고, 정리 잡이 EXPIRED로 일괄 전환한다.
"""

import logging
import secrets
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.pagination import offset_for, total_pages
from app.models.enums import (
    INVITER_ROLES,
    AuditAction,
    InvitationStatus,
    InvitationType,
    MemberRole,
    NotificationType,
    parse_enum,
)
from app.models.invitation import Invitation
from app.models.organization import Member
from app.repositories import invitation_repository, organization_repository, user_repository
from app.schemas.common import OffsetPage
from app.schemas.invitation import (
    InvitationCreate,
    InvitationFilters,
    InvitationResponse,
    PublicInvitationResponse,
)
from app.services import soft_delete_service
from app.services.audit_service import create_audit_log, snapshot
from app.services.notification_service import create_notification
from app.services.organization_service import require_member

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """링크용 토큰. 32바이트 난수 hex(64자)."""
    return secrets.token_hex(32)


def resolve_expires_at(requested: datetime | None, now: datetime) -> datetime:
    """
    미지정 시 now + 기본 만료일. 지정 시 (now, now + 최대 만료일] 범위만 허용(400).
    tz 없는 값은 UTC로 간주.
    """
    if requested is None:
        return now + timedelta(days=settings.invitation_default_expire_days)
    if requested.tzinfo is None:
        requested = requested.replace(tzinfo=UTC)
    if requested <= now:
        raise BadRequestError("expires_at must be in the future", code="INVALID_EXPIRY")
    if requested > now + timedelta(days=settings.invitation_max_expire_days):
        raise BadRequestError(
            f"expires_at must be within {settings.invitation_max_expire_days} days",
            code="INVALID_EXPIRY",
        )
    return requested


def _is_open(inv: Invitation, now: datetime) -> bool:
    return inv.status == InvitationStatus.PENDING and not inv.is_deleted and inv.expires_at > now


async def create_invitation(
    inviter_id: int,
    payload: InvitationCreate,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> InvitationResponse:
    """초대 생성. 초대 권한 역할이 아니면 403, 같은 이메일+조직의 진행 중/수락된 초대가 있으면 409."""
    now = datetime.now(UTC)
    expires_at = resolve_expires_at(payload.expires_at, now)
    email = str(payload.email).strip().lower()

    async with transaction() as session:
        if await organization_repository.get_organization(session, payload.organization_id) is None:
            raise NotFoundError("Organization not found")
        inviter = await require_member(
            session,
            inviter_id,
            payload.organization_id,
            INVITER_ROLES,
            message="You do not have permission to invite members to this organization",
        )
        if payload.role == MemberRole.OWNER and inviter.role != MemberRole.OWNER:
            raise PermissionDeniedError("Only an owner can invite with the OWNER role")
        if await invitation_repository.find_open_for_email(
            session, email, payload.organization_id
        ) is not None:
            raise ConflictError(
                "An active invitation already exists for this email", code="INVITATION_EXISTS"
            )
        if payload.faculty_id is not None:
            faculty = await organization_repository.get_faculty(session, payload.faculty_id)
            if faculty is None or faculty.organization_id != payload.organization_id:
                raise BadRequestError("Faculty does not belong to the organization")
        if payload.school_id is not None:
            school = await organization_repository.get_school(session, payload.school_id)
            if school is None or school.organization_id != payload.organization_id:
                raise BadRequestError("School does not belong to the organization")

        inv = Invitation(
            **payload.model_dump(exclude={"email", "expires_at"}),
            email=email,
            token=generate_token(),
            status=InvitationStatus.PENDING,
            inviter_id=inviter_id,
            expires_at=expires_at,
            sent_at=now,
            inviter_ip=ip_address,
            inviter_user_agent=(user_agent or "")[:512] or None,
        )
        session.add(inv)
        await session.flush()

        await create_audit_log(
            session,
            "invitations",
            inv.id,
            AuditAction.CREATE,
            actor_id=inviter_id,
            new_data=snapshot(inv),
            ip_address=ip_address,
            user_agent=user_agent,
        )
        invitee = await user_repository.get_by_email(session, email)
        if invitee is not None:
            await create_notification(
                session,
                NotificationType.INVITATION,
                invitee.id,
                issuer_id=inviter_id,
                invitation_id=inv.id,
                title="Organization invitation",
                message=inv.message,
            )
        logger.info(
            "Invitation created: id=%s org=%s type=%s", inv.id, inv.organization_id, inv.type
        )
        return InvitationResponse.model_validate(inv)


async def list_invitations(
    session: AsyncSession, inviter_id: int, filters: InvitationFilters
) -> OffsetPage[InvitationResponse]:
    """보낸 초대 목록. status/type는 대소문자 무시, 알 수 없는 값은 필터 미적용."""
    status = parse_enum(InvitationStatus, filters.status)
    inv_type = parse_enum(InvitationType, filters.type)
    rows, total = await invitation_repository.list_for_inviter(
        session,
        inviter_id,
        now=datetime.now(UTC),
        status=status,
        type=inv_type,
        organization_id=filters.organization_id,
        include_expired=filters.include_expired,
        offset=offset_for(filters.page, filters.limit),
        limit=filters.limit,
    )
    return OffsetPage[InvitationResponse](
        items=[InvitationResponse.model_validate(r) for r in rows],
        total=total,
        page=filters.page,
        limit=filters.limit,
        total_pages=total_pages(total, filters.limit),
    )


async def get_invitation(
    session: AsyncSession, invitation_id: int, viewer_id: int
) -> InvitationResponse:
    """초대자 본인만. 타인에게는 존재 여부를 숨기고 404."""
    inv = await invitation_repository.get_by_id(session, invitation_id)
    if inv is None or inv.inviter_id != viewer_id:
        raise NotFoundError("Invitation not found")
    return InvitationResponse.model_validate(inv)


async def get_invitation_by_token(session: AsyncSession, token: str) -> PublicInvitationResponse:
    """공개 조회. PENDING이고 만료 전인 초대만."""
    inv = await invitation_repository.get_by_token(session, token)
    if inv is None or not _is_open(inv, datetime.now(UTC)):
        raise NotFoundError("Invitation not found or expired")
    return PublicInvitationResponse.model_validate(inv)


async def accept_invitation(
    token: str,
    user_id: int,
    *,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> InvitationResponse:
    """
    수락. 유저 이메일이 초대 이메일과 달라면 403, 이미 활성 멤버면 409.
    초대 ACCEPTED + 멤버 생성(비활성 멤버는 재활성화) + 초대자 알림을 한 트랜잭션으로.
    """
    now = datetime.now(UTC)
    async with transaction() as session:
        inv = await invitation_repository.get_by_token(session, token, for_update=True)
        if inv is None or not _is_open(inv, now):
            raise NotFoundError("Invitation not found or expired")
        user = await user_repository.get_by_id(session, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if (user.email or "").strip().lower() != inv.email.strip().lower():
            raise PermissionDeniedError(
                "This invitation was sent to a different email address", code="EMAIL_MISMATCH"
            )
        existing = await organization_repository.get_member(
            session, user_id, inv.organization_id, active_only=False
        )
        if existing is not None and existing.is_active:
            raise ConflictError(
                "You are already a member of this organization", code="ALREADY_MEMBER"
            )

        before = snapshot(inv)
        inv.status = InvitationStatus.ACCEPTED
        inv.responded_at = now
        inv.accepted_at = now

        member_values = {
            "role": inv.role,
            "faculty_id": inv.faculty_id,
            "academic_title": inv.proposed_title,
            "department": inv.department,
            "employment_type": inv.contract_type,
            "contract_start_date": inv.start_date,
            "assigned_at": now if inv.type == InvitationType.PROFESSOR_APPOINTMENT else None,
            "is_active": True,
        }
        if existing is not None:
            for key, value in member_values.items():
                setattr(existing, key, value)
            existing.joined_at = now
            member = existing
        else:
            member = Member(
                user_id=user_id, organization_id=inv.organization_id, joined_at=now, **member_values
            )
            session.add(member)
        await session.flush()

        await create_notification(
            session,
            NotificationType.INVITATION_ACCEPTED,
            inv.inviter_id,
            issuer_id=user_id,
            invitation_id=inv.id,
        )
        await create_audit_log(
            session, "invitations", inv.id, AuditAction.ACCEPT,
            actor_id=user_id, previous_data=before, new_data=snapshot(inv),
            ip_address=ip_address, user_agent=user_agent,
        )
        await create_audit_log(
            session, "members", member.id, AuditAction.CREATE,
            actor_id=user_id, new_data=snapshot(member),
            ip_address=ip_address, user_agent=user_agent,
        )
        return InvitationResponse.model_validate(inv)


async def decline_invitation(token: str, reason: str | None = None) -> InvitationResponse:
    now = datetime.now(UTC)
    async with transaction() as session:
        inv = await invitation_repository.get_by_token(session, token, for_update=True)
        if inv is None or not _is_open(inv, now):
            raise NotFoundError("Invitation not found or expired")
        before = snapshot(inv)
        inv.status = InvitationStatus.DECLINED
        inv.responded_at = now
        inv.declined_at = now
        inv.decline_reason = reason
        await session.flush()
        await create_audit_log(
            session, "invitations", inv.id, AuditAction.DECLINE,
            previous_data=before, new_data=snapshot(inv), reason=reason,
        )
        return InvitationResponse.model_validate(inv)


async def cancel_invitation(inviter_id: int, invitation_id: int) -> InvitationResponse:
    """초대자만. PENDING이 아니면 409. CANCELLED로 바꾼 뒤 soft delete(감사 new_data에 반영)."""
    async with transaction() as session:
        inv = await invitation_repository.get_by_id(session, invitation_id)
        if inv is None:
            raise NotFoundError("Invitation not found")
        if inv.inviter_id != inviter_id:
            raise PermissionDeniedError("Only the inviter can cancel this invitation")
        if inv.status != InvitationStatus.PENDING:
            raise ConflictError(
                f"Invitation is already {inv.status}", code="INVITATION_NOT_PENDING"
            )
        before = snapshot(inv)
        inv.status = InvitationStatus.CANCELLED
        inv.cancelled_at = datetime.now(UTC)
        await soft_delete_service.soft_delete(
            session,
            Invitation,
            inv.id,
            actor_id=inviter_id,
            reason="cancelled by inviter",
            previous_data=before,
        )
        return InvitationResponse.model_validate(inv)


async def list_my_pending_invitations(
    session: AsyncSession, user_id: int
) -> list[PublicInvitationResponse]:
    user = await user_repository.get_by_id(session, user_id)
    if user is None or not user.email:
        return []
    rows = await invitation_repository.list_pending_for_email(
        session, user.email, datetime.now(UTC)
    )
    return [PublicInvitationResponse.model_validate(r) for r in rows]
