"""
Event Service. 이벤트 생성/게시/취소, 참가 등록, 좋아요, 리마인더.

상태: DRAFT → PUBLISHED → CANCELLED | COMPLETED
참가 등록은 PUBLISHED·활성 이벤트만. 정원의 event_capacity_warning_ratio 이상
찼을 때 생성자에게 1회 알림하고, 정원 아래로 내려가면 다시 알림 가능 상태로 돌린다.
리마인더(send_event_reminders / reset_event_reminders)는 워커에서 sync 세션으로 호출.
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.pagination import clamp_limit, offset_for, total_pages
from app.models.enums import AttendanceStatus, EventStatus, NotificationType, parse_enum
from app.models.event import Event, EventAttendee, EventLike
from app.repositories import club_repository, event_repository, notification_repository
from app.schemas.common import OffsetPage, ToggleResponse
from app.schemas.event import AttendeeResponse, EventCreate, EventResponse, EventUpdate
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)

REMINDER_RESET_AFTER = timedelta(hours=24)


def is_near_capacity(count: int, max_attendees: int | None, ratio: float) -> bool:
    if not max_attendees:
        return False
    return count >= max_attendees * ratio


def _to_response(event: Event, attendee_count: int) -> EventResponse:
    return EventResponse.model_validate(event).model_copy(
        update={"attendee_count": attendee_count}
    )


async def _get_active_event(
    session: AsyncSession, event_id: int, *, for_update: bool = False
) -> Event:
    event = await event_repository.get_event(session, event_id, for_update=for_update)
    if event is None or not event.is_active:
        raise NotFoundError("Event not found")
    return event


def _ensure_creator(event: Event, user_id: int) -> None:
    if event.created_by_id != user_id:
        raise PermissionDeniedError("Only the creator can manage this event")


async def create_event(user_id: int, payload: EventCreate) -> EventResponse:
    async with transaction() as session:
        if payload.club_id is not None:
            club = await club_repository.get_club(session, payload.club_id)
            if club is None or not club.is_active:
                raise NotFoundError("Club not found")
        event = Event(**payload.model_dump(), created_by_id=user_id, status=EventStatus.DRAFT)
        session.add(event)
        await session.flush()
        return _to_response(event, 0)


async def update_event(user_id: int, event_id: int, payload: EventUpdate) -> EventResponse:
    async with transaction() as session:
        event = await _get_active_event(session, event_id, for_update=True)
        _ensure_creator(event, user_id)
        changes = payload.model_dump(exclude_unset=True)
        start_at = changes.get("start_at", event.start_at)
        end_at = changes.get("end_at", event.end_at)
        deadline = changes.get("registration_deadline", event.registration_deadline)
        if start_at >= end_at:
            raise BadRequestError("start_at must be before end_at")
        if deadline is not None and deadline > start_at:
            raise BadRequestError("registration_deadline must not be after start_at")
        if "start_at" in changes and changes["start_at"] != event.start_at:
            event.reminder_sent = False
        for key, value in changes.items():
            setattr(event, key, value)
        await session.flush()
        return _to_response(event, await event_repository.count_attendees(session, event.id))


async def publish_event(user_id: int, event_id: int) -> EventResponse:
    async with transaction() as session:
        event = await _get_active_event(session, event_id, for_update=True)
        _ensure_creator(event, user_id)
        if event.status != EventStatus.DRAFT:
            raise ConflictError(f"Event is {event.status}", code="INVALID_STATUS")
        event.status = EventStatus.PUBLISHED
        await session.flush()
        return _to_response(event, await event_repository.count_attendees(session, event.id))


async def cancel_event(user_id: int, event_id: int) -> EventResponse:
    async with transaction() as session:
        event = await _get_active_event(session, event_id, for_update=True)
        _ensure_creator(event, user_id)
        if event.status in (EventStatus.CANCELLED, EventStatus.COMPLETED):
            raise ConflictError(f"Event is {event.status}", code="INVALID_STATUS")
        event.status = EventStatus.CANCELLED
        await session.flush()
        return _to_response(event, await event_repository.count_attendees(session, event.id))


async def delete_event(user_id: int, event_id: int) -> None:
    async with transaction() as session:
        event = await _get_active_event(session, event_id, for_update=True)
        _ensure_creator(event, user_id)
        event.is_active = False
        await session.flush()


async def get_event(session: AsyncSession, event_id: int) -> EventResponse:
    event = await _get_active_event(session, event_id)
    return _to_response(event, await event_repository.count_attendees(session, event.id))


async def list_events(
    session: AsyncSession,
    *,
    status: str | None = None,
    upcoming: bool = False,
    search: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> OffsetPage[EventResponse]:
    """status 미지정 시 PUBLISHED."""
    size = clamp_limit(limit)
    parsed = parse_enum(EventStatus, status) or EventStatus.PUBLISHED
    rows, total = await event_repository.list_events(
        session,
        status=str(parsed),
        upcoming_after=datetime.now(UTC) if upcoming else None,
        search=search,
        offset=offset_for(page, size),
        limit=size,
    )
    counts = await event_repository.count_attendees_for(session, [e.id for e in rows])
    return OffsetPage[EventResponse](
        items=[_to_response(e, counts.get(e.id, 0)) for e in rows],
        total=total,
        page=page,
        limit=size,
        total_pages=total_pages(total, size),
    )


async def list_my_events(session: AsyncSession, user_id: int) -> list[EventResponse]:
    rows = await event_repository.list_user_events(session, user_id)
    counts = await event_repository.count_attendees_for(session, [e.id for e in rows])
    return [_to_response(e, counts.get(e.id, 0)) for e in rows]


async def list_attendees(session: AsyncSession, event_id: int) -> list[AttendeeResponse]:
    await _get_active_event(session, event_id)
    rows = await event_repository.list_attendees(session, event_id)
    return [AttendeeResponse.model_validate(a) for a in rows]


async def join_event(user_id: int, event_id: int) -> AttendeeResponse:
    async with transaction() as session:
        event = await _get_active_event(session, event_id, for_update=True)
        if event.status != EventStatus.PUBLISHED:
            raise BadRequestError("Event is not open for registration")
        now = datetime.now(UTC)
        if event.registration_deadline is not None and now > event.registration_deadline:
            raise BadRequestError("Registration deadline has passed", code="DEADLINE_PASSED")
        attendee = await event_repository.get_attendee(session, event_id, user_id)
        if attendee is not None and attendee.status != AttendanceStatus.CANCELLED:
            raise ConflictError("Already registered", code="ALREADY_REGISTERED")
        count = await event_repository.count_attendees(session, event_id)
        if event.max_attendees is not None and count >= event.max_attendees:
            raise ConflictError("Event is full", code="EVENT_FULL")

        if attendee is not None:
            attendee.status = AttendanceStatus.REGISTERED
            attendee.registered_at = now
        else:
            attendee = EventAttendee(
                event_id=event_id,
                user_id=user_id,
                status=AttendanceStatus.REGISTERED,
                registered_at=now,
            )
            session.add(attendee)
        await session.flush()

        count += 1
        if not event.capacity_warning_sent and is_near_capacity(
            count, event.max_attendees, settings.event_capacity_warning_ratio
        ):
            event.capacity_warning_sent = True
            await create_notification(
                session,
                NotificationType.EVENT_CAPACITY_WARNING,
                event.created_by_id,
                event_id=event.id,
                title=f"{event.title} is almost full",
                message=f"{count}/{event.max_attendees} registered",
            )
            logger.info("Event %s reached capacity warning (%s/%s)", event.id, count, event.max_attendees)
        return AttendeeResponse.model_validate(attendee)


async def leave_event(user_id: int, event_id: int) -> AttendeeResponse:
    async with transaction() as session:
        event = await _get_active_event(session, event_id, for_update=True)
        attendee = await event_repository.get_attendee(session, event_id, user_id)
        if attendee is None or attendee.status == AttendanceStatus.CANCELLED:
            raise NotFoundError("Registration not found")
        attendee.status = AttendanceStatus.CANCELLED
        await session.flush()
        count = await event_repository.count_attendees(session, event_id)
        if event.capacity_warning_sent and not is_near_capacity(
            count, event.max_attendees, settings.event_capacity_warning_ratio
        ):
            event.capacity_warning_sent = False
        return AttendeeResponse.model_validate(attendee)


async def toggle_event_like(user_id: int, event_id: int) -> ToggleResponse:
    async with transaction() as session:
        await _get_active_event(session, event_id)
        like = await event_repository.get_like(session, user_id, event_id)
        if like is None:
            session.add(EventLike(user_id=user_id, event_id=event_id))
        else:
            await session.delete(like)
        await session.flush()
        return ToggleResponse(
            active=like is None, count=await event_repository.count_likes(session, event_id)
        )


def send_event_reminders(session: Session, now: datetime | None = None) -> dict[str, int]:
    """
    [now + lead, now + lead + window)에 시작하는 이벤트의 REGISTERED 참가자에게
    EVENT_REMINDER 알림, 이벤트별 reminder_sent=True.
    """
    now = now or datetime.now(UTC)
    window_start = now + timedelta(hours=settings.event_reminder_lead_hours)
    window_end = window_start + timedelta(minutes=settings.event_reminder_window_minutes)
    events = event_repository.list_due_for_reminder_sync(session, window_start, window_end)

    notified = 0
    for event in events:
        user_ids = event_repository.list_registered_user_ids_sync(session, event.id)
        notified += notification_repository.create_many_sync(
            session,
            [
                {
                    "type": str(NotificationType.EVENT_REMINDER),
                    "recipient_id": uid,
                    "event_id": event.id,
                    "title": f"Reminder: {event.title}",
                    "message": f"Starts at {event.start_at.isoformat()}",
                }
                for uid in user_ids
            ],
        )
        event.reminder_sent = True
    session.flush()
    logger.info("Event reminders: events=%s notifications=%s", len(events), notified)
    return {"events": len(events), "notifications": notified}


def reset_event_reminders(session: Session, now: datetime | None = None) -> int:
    """시작 후 24시간 지난 이벤트의 reminder_sent 해제."""
    now = now or datetime.now(UTC)
    return event_repository.reset_reminders_sync(session, now - REMINDER_RESET_AFTER)
