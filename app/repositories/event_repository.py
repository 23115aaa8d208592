"""Event·EventAttendee·EventLike Repository. 리마인더 스윕용 sync 함수 포함."""

from datetime import datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.models.enums import AttendanceStatus, EventStatus
from app.models.event import Event, EventAttendee, EventLike


async def get_event(session: AsyncSession, event_id: int, *, for_update: bool = False) -> Event | None:
    stmt = select(Event).where(Event.id == event_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def list_events(
    session: AsyncSession,
    *,
    status: str,
    upcoming_after: datetime | None,
    search: str | None,
    offset: int,
    limit: int,
) -> tuple[list[Event], int]:
    """활성 이벤트. 시작 시각 오름차순."""
    stmt = select(Event).where(Event.is_active.is_(True), Event.status == status)
    if upcoming_after is not None:
        stmt = stmt.where(Event.start_at > upcoming_after)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Event.title.ilike(pattern), Event.description.ilike(pattern)))
    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()
    result = await session.execute(
        stmt.order_by(Event.start_at, Event.id).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), int(total)


async def list_user_events(session: AsyncSession, user_id: int) -> list[Event]:
    """참가 등록(취소 제외)했거나 직접 만든 활성 이벤트."""
    attending = select(EventAttendee.event_id).where(
        EventAttendee.user_id == user_id,
        EventAttendee.status != AttendanceStatus.CANCELLED,
    )
    result = await session.execute(
        select(Event)
        .where(
            Event.is_active.is_(True),
            or_(Event.id.in_(attending), Event.created_by_id == user_id),
        )
        .order_by(Event.start_at)
    )
    return list(result.scalars().all())


async def count_attendees(session: AsyncSession, event_id: int) -> int:
    """CANCELLED 제외."""
    result = await session.execute(
        select(func.count(EventAttendee.id)).where(
            EventAttendee.event_id == event_id,
            EventAttendee.status != AttendanceStatus.CANCELLED,
        )
    )
    return int(result.scalar_one())


async def count_attendees_for(session: AsyncSession, event_ids: list[int]) -> dict[int, int]:
    if not event_ids:
        return {}
    result = await session.execute(
        select(EventAttendee.event_id, func.count(EventAttendee.id))
        .where(
            EventAttendee.event_id.in_(event_ids),
            EventAttendee.status != AttendanceStatus.CANCELLED,
        )
        .group_by(EventAttendee.event_id)
    )
    return {event_id: int(n) for event_id, n in result.all()}


async def get_attendee(session: AsyncSession, event_id: int, user_id: int) -> EventAttendee | None:
    result = await session.execute(
        select(EventAttendee).where(
            EventAttendee.event_id == event_id, EventAttendee.user_id == user_id
        )
    )
    return result.scalars().one_or_none()


async def list_attendees(session: AsyncSession, event_id: int) -> list[EventAttendee]:
    result = await session.execute(
        select(EventAttendee)
        .where(
            EventAttendee.event_id == event_id,
            EventAttendee.status != AttendanceStatus.CANCELLED,
        )
        .order_by(EventAttendee.registered_at)
    )
    return list(result.scalars().all())


async def get_like(session: AsyncSession, user_id: int, event_id: int) -> EventLike | None:
    result = await session.execute(
        select(EventLike).where(EventLike.user_id == user_id, EventLike.event_id == event_id)
    )
    return result.scalars().one_or_none()


async def count_likes(session: AsyncSession, event_id: int) -> int:
    result = await session.execute(
        select(func.count(EventLike.id)).where(EventLike.event_id == event_id)
    )
    return int(result.scalar_one())


# --- 워커(sync) ---


def list_due_for_reminder_sync(
    session: Session, window_start: datetime, window_end: datetime
) -> list[Event]:
    """[window_start, window_end)에 시작하는 PUBLISHED·활성·미발송 이벤트. 행 잠금."""
    stmt = (
        select(Event)
        .where(
            Event.status == EventStatus.PUBLISHED,
            Event.is_active.is_(True),
            Event.reminder_sent.is_(False),
            Event.start_at >= window_start,
            Event.start_at < window_end,
        )
        .with_for_update(skip_locked=True)
    )
    return list(session.execute(stmt).scalars().all())


def list_registered_user_ids_sync(session: Session, event_id: int) -> list[int]:
    result = session.execute(
        select(EventAttendee.user_id).where(
            EventAttendee.event_id == event_id,
            EventAttendee.status == AttendanceStatus.REGISTERED,
        )
    )
    return [row[0] for row in result.all()]


def reset_reminders_sync(session: Session, started_before: datetime) -> int:
    result = session.execute(
        update(Event)
        .where(Event.reminder_sent.is_(True), Event.start_at < started_before)
        .values(reminder_sent=False)
    )
    return result.rowcount or 0
