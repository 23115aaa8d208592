"""Event 스키마."""

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator

from app.models.enums import AttendanceStatus, EventStatus
from app.schemas.common import PartialUpdate


def _as_utc(value: datetime) -> datetime:
    """tz 없는 값은 UTC로 간주. aware·naive 비교 TypeError 방지."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class EventCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, max_length=10000)
    location: str | None = Field(None, max_length=256)
    start_at: UtcDatetime
    end_at: UtcDatetime
    registration_deadline: UtcDatetime | None = None
    max_attendees: int | None = Field(None, ge=1, le=100000)
    club_id: int | None = None

    @model_validator(mode="after")
    def check_dates(self) -> "EventCreate":
        """start < end, 등록 마감 ≤ 시작."""
        if self.start_at >= self.end_at:
            raise ValueError("start_at must be before end_at")
        if self.registration_deadline is not None and self.registration_deadline > self.start_at:
            raise ValueError("registration_deadline must not be after start_at")
        return self


class EventUpdate(PartialUpdate):
    non_nullable = frozenset({"title", "start_at", "end_at"})

    title: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = Field(None, max_length=10000)
    location: str | None = Field(None, max_length=256)
    start_at: UtcDatetime | None = None
    end_at: UtcDatetime | None = None
    registration_deadline: UtcDatetime | None = None
    max_attendees: int | None = Field(None, ge=1, le=100000)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    location: str | None = None
    start_at: datetime
    end_at: datetime
    registration_deadline: datetime | None = None
    max_attendees: int | None = None
    status: EventStatus
    club_id: int | None = None
    created_by_id: int
    is_active: bool
    created_at: datetime
    attendee_count: int = 0


class AttendeeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    event_id: int
    user_id: int
    status: AttendanceStatus
    registered_at: datetime
