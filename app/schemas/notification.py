"""Notification 스키마."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    type: NotificationType
    recipient_id: int
    issuer_id: int | None = None
    post_id: int | None = None
    comment_id: int | None = None
    course_id: int | None = None
    job_id: int | None = None
    research_id: int | None = None
    invitation_id: int | None = None
    club_id: int | None = None
    event_id: int | None = None
    title: str | None = None
    message: str | None = None
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime


class MarkReadRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ids: list[int] = Field(..., min_length=1, max_length=500)


class UnreadCount(BaseModel):
    unread: int


class UpdatedCount(BaseModel):
    updated: int
