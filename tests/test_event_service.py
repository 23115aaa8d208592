"""Event Service 테스트. 정원 경고, 참가 가드, 리마인더."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.exceptions import BadRequestError, ConflictError, PermissionDeniedError
from app.models.enums import AttendanceStatus, EventStatus, NotificationType
from app.schemas.event import EventUpdate
from app.services import event_service
from app.services.event_service import is_near_capacity

MODULE = "app.services.event_service"


def test_is_near_capacity() -> None:
    assert is_near_capacity(9, 10, 0.9) is True
    assert is_near_capacity(8, 10, 0.9) is False
    assert is_near_capacity(100, None, 0.9) is False


def _event(**overrides) -> SimpleNamespace:
    start = datetime.now(UTC) + timedelta(days=2)
    data = {
        "id": 3,
        "title": "Hackathon",
        "status": EventStatus.PUBLISHED,
        "is_active": True,
        "created_by_id": 1,
        "start_at": start,
        "end_at": start + timedelta(hours=3),
        "registration_deadline": None,
        "max_attendees": None,
        "capacity_warning_sent": False,
        "reminder_sent": True,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _attendee(status=AttendanceStatus.CANCELLED) -> SimpleNamespace:
    return SimpleNamespace(
        id=11, event_id=3, user_id=2, status=status, registered_at=datetime.now(UTC)
    )


@pytest.fixture
def event_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_event=AsyncMock(),
        get_attendee=AsyncMock(return_value=None),
        count_attendees=AsyncMock(return_value=0),
        notify=AsyncMock(),
    )
    monkeypatch.setattr(f"{MODULE}.event_repository.get_event", mocks.get_event)
    monkeypatch.setattr(f"{MODULE}.event_repository.get_attendee", mocks.get_attendee)
    monkeypatch.setattr(f"{MODULE}.event_repository.count_attendees", mocks.count_attendees)
    monkeypatch.setattr(f"{MODULE}.create_notification", mocks.notify)
    return mocks


@pytest.mark.asyncio
async def test_join_draft_event_400(event_repos) -> None:
    event_repos.get_event.return_value = _event(status=EventStatus.DRAFT)
    with pytest.raises(BadRequestError):
        await event_service.join_event(2, 3)


@pytest.mark.asyncio
async def test_join_after_deadline_400(event_repos) -> None:
    event_repos.get_event.return_value = _event(
        registration_deadline=datetime.now(UTC) - timedelta(minutes=1)
    )
    with pytest.raises(BadRequestError) as exc:
        await event_service.join_event(2, 3)
    assert exc.value.code == "DEADLINE_PASSED"


@pytest.mark.asyncio
async def test_join_twice_409(event_repos) -> None:
    event_repos.get_event.return_value = _event()
    event_repos.get_attendee.return_value = _attendee(status=AttendanceStatus.REGISTERED)
    with pytest.raises(ConflictError):
        await event_service.join_event(2, 3)


@pytest.mark.asyncio
async def test_join_full_event_409(event_repos) -> None:
    event_repos.get_event.return_value = _event(max_attendees=5)
    event_repos.count_attendees.return_value = 5
    with pytest.raises(ConflictError) as exc:
        await event_service.join_event(2, 3)
    assert exc.value.code == "EVENT_FULL"


@pytest.mark.asyncio
async def test_rejoin_reactivates_and_warns_creator_once(event_repos) -> None:
    """취소했던 등록은 재활성화. 정원 임계 도달 시 생성자에게 한 번만 경고."""
    event = _event(max_attendees=10)
    event_repos.get_event.return_value = event
    attendee = _attendee()
    event_repos.get_attendee.return_value = attendee
    event_repos.count_attendees.return_value = 8

    result = await event_service.join_event(2, 3)

    assert result.status == AttendanceStatus.REGISTERED
    assert event.capacity_warning_sent is True
    event_repos.notify.assert_awaited_once()
    assert event_repos.notify.await_args.args[1] == NotificationType.EVENT_CAPACITY_WARNING
    assert event_repos.notify.await_args.args[2] == event.created_by_id


@pytest.mark.asyncio
async def test_leave_below_threshold_resets_warning(event_repos) -> None:
    event = _event(max_attendees=10, capacity_warning_sent=True)
    event_repos.get_event.return_value = event
    event_repos.get_attendee.return_value = _attendee(status=AttendanceStatus.REGISTERED)
    event_repos.count_attendees.return_value = 8

    result = await event_service.leave_event(2, 3)

    assert result.status == AttendanceStatus.CANCELLED
    assert event.capacity_warning_sent is False


@pytest.mark.asyncio
async def test_update_by_non_creator_forbidden(event_repos) -> None:
    event_repos.get_event.return_value = _event()
    with pytest.raises(PermissionDeniedError):
        await event_service.update_event(9, 3, EventUpdate(title="x"))


@pytest.mark.asyncio
async def test_update_rejects_end_before_start(event_repos) -> None:
    event = _event()
    event_repos.get_event.return_value = event
    with pytest.raises(BadRequestError):
        await event_service.update_event(1, 3, EventUpdate(end_at=event.start_at))


@pytest.mark.asyncio
async def test_update_compares_naive_input_as_utc(event_repos) -> None:
    """DB 값은 aware. naive 입력도 UTC로 맞춰 비교하므로 400(500 아님)."""
    event = _event()
    event_repos.get_event.return_value = event
    naive_start = event.start_at.replace(tzinfo=None)
    with pytest.raises(BadRequestError):
        await event_service.update_event(1, 3, EventUpdate(end_at=naive_start))


@pytest.mark.asyncio
async def test_publish_only_from_draft(event_repos) -> None:
    event_repos.get_event.return_value = _event(status=EventStatus.PUBLISHED)
    with pytest.raises(ConflictError):
        await event_service.publish_event(1, 3)


def test_send_event_reminders(monkeypatch: pytest.MonkeyPatch) -> None:
    now = datetime(2026, 5, 1, 9, 0, tzinfo=UTC)
    event = _event(start_at=now + timedelta(hours=24, minutes=5), reminder_sent=False)
    monkeypatch.setattr(
        f"{MODULE}.event_repository.list_due_for_reminder_sync", MagicMock(return_value=[event])
    )
    monkeypatch.setattr(
        f"{MODULE}.event_repository.list_registered_user_ids_sync", MagicMock(return_value=[4, 5])
    )
    create_many = MagicMock(return_value=2)
    monkeypatch.setattr(f"{MODULE}.notification_repository.create_many_sync", create_many)

    result = event_service.send_event_reminders(MagicMock(), now=now)

    assert result == {"events": 1, "notifications": 2}
    assert event.reminder_sent is True
    rows = create_many.call_args.args[1]
    assert {r["recipient_id"] for r in rows} == {4, 5}
    assert all(r["type"] == "EVENT_REMINDER" for r in rows)
