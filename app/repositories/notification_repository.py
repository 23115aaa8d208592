"""Notification Repository."""

from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.core.pagination import apply_desc_cursor
from app.models.notification import Notification


async def create(session: AsyncSession, values: dict[str, Any]) -> Notification:
    row = Notification(**values)
    session.add(row)
    await session.flush()
    return row


def create_many_sync(session: Session, rows: list[dict[str, Any]]) -> int:
    """워커용 일괄 생성(이벤트 리마인더)."""
    if not rows:
        return 0
    session.add_all([Notification(**r) for r in rows])
    session.flush()
    return len(rows)


async def list_for_user(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int
) -> list[Notification]:
    stmt = select(Notification).where(Notification.recipient_id == user_id)
    stmt = apply_desc_cursor(stmt, Notification.id, cursor, limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def count_unread(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_id == user_id,
            Notification.is_read.is_(False),
        )
    )
    return int(result.scalar_one())


async def mark_read(
    session: AsyncSession, user_id: int, ids: list[int] | None, now: datetime
) -> int:
    """recipient가 본인인 알림만 갱신. ids=None이면 전체."""
    stmt = update(Notification).where(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    )
    if ids is not None:
        stmt = stmt.where(Notification.id.in_(ids))
    result = await session.execute(stmt.values(is_read=True, read_at=now))
    return result.rowcount or 0


async def get_by_id(session: AsyncSession, notification_id: int) -> Notification | None:
    return await session.get(Notification, notification_id)


async def delete_by_id(session: AsyncSession, notification_id: int) -> None:
    await session.execute(delete(Notification).where(Notification.id == notification_id))


async def delete_matching(
    session: AsyncSession, *, type: str, recipient_id: int, issuer_id: int
) -> int:
    """팔로우 요청 취소 시 상대에게 보낸 FOLLOW_REQUEST 알림 제거."""
    result = await session.execute(
        delete(Notification).where(
            Notification.type == type,
            Notification.recipient_id == recipient_id,
            Notification.issuer_id == issuer_id,
        )
    )
    return result.rowcount or 0


async def count_all_unread(session: AsyncSession) -> int:
    result = await session.execute(
        select(func.count(Notification.id)).where(Notification.is_read.is_(False))
    )
    return int(result.scalar_one())


def delete_read_before_sync(session: Session, cutoff: datetime) -> int:
    result = session.execute(
        delete(Notification).where(
            Notification.is_read.is_(True), Notification.created_at < cutoff
        )
    )
    return result.rowcount or 0
