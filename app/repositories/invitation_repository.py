"""Invitation Repository. 조회는 soft delete 제외가 기본."""

from datetime import datetime, timedelta

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.core.soft_delete import exclude_deleted, only_deleted
from app.models.enums import InvitationStatus
from app.models.invitation import Invitation

# 목록 정렬: PENDING 먼저, 이후 종료 상태.
_STATUS_ORDER = case(
    (Invitation.status == InvitationStatus.PENDING, 0),
    (Invitation.status == InvitationStatus.ACCEPTED, 1),
    (Invitation.status == InvitationStatus.DECLINED, 2),
    (Invitation.status == InvitationStatus.EXPIRED, 3),
    else_=4,
)


async def get_by_id(session: AsyncSession, invitation_id: int) -> Invitation | None:
    stmt = exclude_deleted(select(Invitation).where(Invitation.id == invitation_id), Invitation)
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def get_by_token(
    session: AsyncSession, token: str, *, for_update: bool = False
) -> Invitation | None:
    stmt = exclude_deleted(select(Invitation).where(Invitation.token == token), Invitation)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def find_open_for_email(
    session: AsyncSession, email: str, org_id: int
) -> Invitation | None:
    """같은 이메일+조직의 PENDING/ACCEPTED 초대(중복 발송 방지)."""
    stmt = exclude_deleted(
        select(Invitation).where(
            func.lower(Invitation.email) == email.lower(),
            Invitation.organization_id == org_id,
            Invitation.status.in_([InvitationStatus.PENDING, InvitationStatus.ACCEPTED]),
        ),
        Invitation,
    )
    result = await session.execute(stmt.limit(1))
    return result.scalars().first()


async def list_for_inviter(
    session: AsyncSession,
    inviter_id: int,
    *,
    now: datetime,
    status: str | None = None,
    type: str | None = None,
    organization_id: int | None = None,
    include_expired: bool = False,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Invitation], int]:
    """(rows, total). 정렬: 상태 → 최신순."""
    stmt = exclude_deleted(select(Invitation).where(Invitation.inviter_id == inviter_id), Invitation)
    if status is not None:
        stmt = stmt.where(Invitation.status == status)
    if type is not None:
        stmt = stmt.where(Invitation.type == type)
    if organization_id is not None:
        stmt = stmt.where(Invitation.organization_id == organization_id)
    if not include_expired:
        stmt = stmt.where(Invitation.expires_at > now)

    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()
    rows = await session.execute(
        stmt.order_by(_STATUS_ORDER, Invitation.created_at.desc(), Invitation.id.desc())
        .offset(offset)
        .limit(limit)
    )
    return list(rows.scalars().all()), int(total)


async def list_pending_for_email(
    session: AsyncSession, email: str, now: datetime
) -> list[Invitation]:
    stmt = exclude_deleted(
        select(Invitation).where(
            func.lower(Invitation.email) == email.lower(),
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at > now,
        ),
        Invitation,
    )
    result = await session.execute(stmt.order_by(Invitation.created_at.desc()))
    return list(result.scalars().all())


def expire_pending_sync(session: Session, now: datetime) -> int:
    """만료 시각이 지난 PENDING 초대를 EXPIRED로 일괄 전환."""
    result = session.execute(
        update(Invitation)
        .where(
            Invitation.status == InvitationStatus.PENDING,
            Invitation.is_deleted.is_(False),
            Invitation.expires_at < now,
        )
        .values(status=InvitationStatus.EXPIRED, updated_at=now)
    )
    return result.rowcount or 0


def mark_reminders_sync(
    session: Session,
    now: datetime,
    *,
    window_days: int,
    interval_hours: int,
    max_reminders: int,
) -> int:
    """
    만료 window_days 이내 PENDING 초대 중 마지막 리마인드가 interval_hours 이전(또는 없음)이고
    횟수가 max_reminders 미만인 행의 reminder_count 증가.
    """
    result = session.execute(
        update(Invitation)
        .where(
            Invitation.status == InvitationStatus.PENDING,
            Invitation.is_deleted.is_(False),
            Invitation.expires_at > now,
            Invitation.expires_at <= now + timedelta(days=window_days),
            Invitation.reminder_count < max_reminders,
            or_(
                Invitation.last_reminder_at.is_(None),
                Invitation.last_reminder_at < now - timedelta(hours=interval_hours),
            ),
        )
        .values(
            reminder_count=Invitation.reminder_count + 1,
            last_reminder_at=now,
        )
    )
    return result.rowcount or 0


async def count_by_status(session: AsyncSession, status: InvitationStatus) -> int:
    stmt = exclude_deleted(
        select(func.count(Invitation.id)).where(Invitation.status == status), Invitation
    )
    return int((await session.execute(stmt)).scalar_one())


async def count_deleted(session: AsyncSession) -> int:
    result = await session.execute(
        only_deleted(select(func.count(Invitation.id)), Invitation)
    )
    return int(result.scalar_one())
