"""입력 스키마 검증 테스트."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from app.models.enums import InvitationStatus, JobType, parse_enum
from app.schemas.club import ClubUpdate
from app.schemas.course import CourseCreate, CourseUpdate
from app.schemas.event import EventCreate, EventUpdate
from app.schemas.invitation import PublicInvitationResponse
from app.schemas.organization import OrganizationCreate, SchoolUpdate
from app.schemas.post import PostCreate
from app.schemas.user import ProfileUpdate

START = datetime(2026, 5, 1, 10, 0, tzinfo=UTC)


def test_event_requires_start_before_end() -> None:
    with pytest.raises(ValidationError):
        EventCreate(title="Meetup", start_at=START, end_at=START)
    EventCreate(title="Meetup", start_at=START, end_at=START + timedelta(hours=2))


def test_event_deadline_not_after_start() -> None:
    with pytest.raises(ValidationError):
        EventCreate(
            title="Meetup",
            start_at=START,
            end_at=START + timedelta(hours=2),
            registration_deadline=START + timedelta(minutes=1),
        )
    EventCreate(
        title="Meetup",
        start_at=START,
        end_at=START + timedelta(hours=2),
        registration_deadline=START,
    )


def test_event_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        EventCreate(
            title="Meetup", start_at=START, end_at=START + timedelta(hours=1), status="PUBLISHED"
        )


@pytest.mark.parametrize("code", ["CS-101", "MATH2", "AB"])
def test_course_code_accepts_upper_alnum_dash(code: str) -> None:
    CourseCreate(code=code, title="Course", faculty_id=1)


@pytest.mark.parametrize("code", ["cs-101", "A", "CS 101", "X" * 21])
def test_course_code_rejects_invalid(code: str) -> None:
    with pytest.raises(ValidationError):
        CourseCreate(code=code, title="Course", faculty_id=1)


def test_organization_slug_lowercase_only() -> None:
    with pytest.raises(ValidationError):
        OrganizationCreate(name="Uni", slug="Big_Uni")
    OrganizationCreate(name="Uni", slug="big-uni")


def test_post_content_length() -> None:
    with pytest.raises(ValidationError):
        PostCreate(content="")
    with pytest.raises(ValidationError):
        PostCreate(content="x" * 5001)


def test_public_invitation_has_no_token_or_inviter_meta() -> None:
    fields = set(PublicInvitationResponse.model_fields)
    assert "token" not in fields
    assert "inviter_ip" not in fields
    assert "inviter_user_agent" not in fields


def test_parse_enum_is_case_insensitive() -> None:
    assert parse_enum(InvitationStatus, " pending ") == InvitationStatus.PENDING
    assert parse_enum(JobType, "internship") == JobType.INTERNSHIP
    assert parse_enum(JobType, "bogus") is None
    assert parse_enum(JobType, None) is None


def test_event_naive_time_treated_as_utc() -> None:
    """aware·naive 혼합 입력은 naive를 UTC로 맞춘 뒤 비교."""
    event = EventCreate.model_validate(
        {"title": "t", "start_at": "2026-12-01T10:00:00Z", "end_at": "2026-12-01T12:00:00"}
    )
    assert event.end_at == datetime(2026, 12, 1, 12, 0, tzinfo=UTC)


def test_event_mixed_timezones_out_of_order_is_validation_error() -> None:
    with pytest.raises(ValidationError):
        EventCreate.model_validate(
            {"title": "t", "start_at": "2026-12-01T10:00:00Z", "end_at": "2026-12-01T09:00:00"}
        )


def test_event_update_normalizes_naive_times() -> None:
    update = EventUpdate(registration_deadline=datetime(2026, 12, 1, 8, 0))
    assert update.registration_deadline.tzinfo is UTC


@pytest.mark.parametrize(
    ("schema", "field"),
    [
        (EventUpdate, "start_at"),
        (EventUpdate, "title"),
        (CourseUpdate, "title"),
        (CourseUpdate, "credits"),
        (SchoolUpdate, "slug"),
        (ClubUpdate, "name"),
        (ProfileUpdate, "is_private"),
    ],
)
def test_update_rejects_null_for_required_column(schema, field) -> None:
    with pytest.raises(ValidationError):
        schema.model_validate({field: None})


def test_update_allows_clearing_nullable_fields() -> None:
    update = EventUpdate.model_validate({"description": None, "registration_deadline": None})
    assert update.model_dump(exclude_unset=True) == {
        "description": None,
        "registration_deadline": None,
    }
    assert ProfileUpdate.model_validate({"bio": None}).model_dump(exclude_unset=True) == {
        "bio": None
    }
