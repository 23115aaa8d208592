"""Events API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import OffsetPage, ToggleResponse
from app.schemas.event import AttendeeResponse, EventCreate, EventResponse, EventUpdate
from app.services import event_service

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=201)
async def post_event(
    payload: EventCreate,
    current_user: User = Depends(get_current_active_user),
) -> EventResponse:
    """DRAFT로 생성. publish 후 참가 등록 가능."""
    return await event_service.create_event(current_user.id, payload)


@router.get("", response_model=OffsetPage[EventResponse])
async def get_events(
    status: str | None = Query(None),
    upcoming: bool = Query(False),
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> OffsetPage[EventResponse]:
    return await event_service.list_events(
        session, status=status, upcoming=upcoming, search=search, page=page, limit=limit
    )


@router.get("/mine", response_model=list[EventResponse])
async def get_my_events(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[EventResponse]:
    return await event_service.list_my_events(session, current_user.id)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: int, session: AsyncSession = Depends(get_db)) -> EventResponse:
    return await event_service.get_event(session, event_id)


@router.patch("/{event_id}", response_model=EventResponse)
async def patch_event(
    event_id: int,
    payload: EventUpdate,
    current_user: User = Depends(get_current_active_user),
) -> EventResponse:
    return await event_service.update_event(current_user.id, event_id, payload)


@router.post("/{event_id}/publish", response_model=EventResponse)
async def post_publish(
    event_id: int,
    current_user: User = Depends(get_current_active_user),
) -> EventResponse:
    return await event_service.publish_event(current_user.id, event_id)


@router.post("/{event_id}/cancel", response_model=EventResponse)
async def post_cancel(
    event_id: int,
    current_user: User = Depends(get_current_active_user),
) -> EventResponse:
    return await event_service.cancel_event(current_user.id, event_id)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await event_service.delete_event(current_user.id, event_id)


@router.get("/{event_id}/attendees", response_model=list[AttendeeResponse])
async def get_attendees(
    event_id: int, session: AsyncSession = Depends(get_db)
) -> list[AttendeeResponse]:
    return await event_service.list_attendees(session, event_id)


@router.post("/{event_id}/attendees", response_model=AttendeeResponse, status_code=201)
async def post_join(
    event_id: int,
    current_user: User = Depends(get_current_active_user),
) -> AttendeeResponse:
    return await event_service.join_event(current_user.id, event_id)


@router.delete("/{event_id}/attendees/me", response_model=AttendeeResponse)
async def delete_leave(
    event_id: int,
    current_user: User = Depends(get_current_active_user),
) -> AttendeeResponse:
    return await event_service.leave_event(current_user.id, event_id)


@router.post("/{event_id}/like", response_model=ToggleResponse)
async def post_toggle_like(
    event_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ToggleResponse:
    return await event_service.toggle_event_like(current_user.id, event_id)
