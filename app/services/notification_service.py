"""Notification Service. 다른 서비스가 같은 트랜잭션 안에서 알림을 남길 때 사용."""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import NotFoundError
from app.core.pagination import clamp_limit, split_cursor_page
from app.models.enums import NotificationType
from app.models.notification import Notification
from app.repositories import notification_repository
from app.schemas.common import CursorPage
from app.schemas.notification import NotificationResponse

logger = logging.getLogger(__name__)

_REFERENCE_FIELDS = (
    "post_id",
    "comment_id",
    "course_id",
    "job_id",
    "research_id",
    "invitation_id",
    "club_id",
    "event_id",
)


async def create_notification(
    session: AsyncSession,
    type: NotificationType,
    recipient_id: int,
    *,
    issuer_id: int | None = None,
    title: str | None = None,
    message: str | None = None,
    **refs: int | None,
) -> Notification:
    """알림 1건 생성. refs는 post_id, course_id 등 참조 대상 id."""
    unknown = set(refs) - set(_REFERENCE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown notification reference: {sorted(unknown)}")
    values = {
        "type": str(type),
        "recipient_id": recipient_id,
        "issuer_id": issuer_id,
        "title": title,
        "message": message,
        **{k: v for k, v in refs.items() if v is not None},
    }
    return await notification_repository.create(session, values)


async def list_notifications(
    session: AsyncSession, user_id: int, cursor: int | None, limit: int | None
) -> CursorPage[NotificationResponse]:
    size = clamp_limit(limit)
    rows = await notification_repository.list_for_user(session, user_id, cursor, size)
    items, next_cursor = split_cursor_page(rows, size)
    return CursorPage[NotificationResponse](
        items=[NotificationResponse.model_validate(n) for n in items],
        next_cursor=next_cursor,
    )


async def unread_count(session: AsyncSession, user_id: int) -> int:
    return await notification_repository.count_unread(session, user_id)


async def mark_read(user_id: int, ids: list[int]) -> int:
    """본인 알림만 읽음 처리. 남의 알림 id는 조용히 무시."""
    async with transaction() as session:
        return await notification_repository.mark_read(
            session, user_id, ids, datetime.now(UTC)
        )


async def mark_all_read(user_id: int) -> int:
    async with transaction() as session:
        return await notification_repository.mark_read(
            session, user_id, None, datetime.now(UTC)
        )


async def delete_notification(user_id: int, notification_id: int) -> None:
    """본인 알림이 아니면 존재 여부를 숨기고 404."""
    async with transaction() as session:
        row = await notification_repository.get_by_id(session, notification_id)
        if row is None or row.recipient_id != user_id:
            raise NotFoundError("Notification not found")
        await notification_repository.delete_by_id(session, notification_id)
