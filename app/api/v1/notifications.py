"""Notifications API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage
from app.schemas.notification import MarkReadRequest, NotificationResponse, UnreadCount, UpdatedCount
from app.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=CursorPage[NotificationResponse])
async def get_notifications(
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[NotificationResponse]:
    return await notification_service.list_notifications(session, current_user.id, cursor, limit)


@router.get("/unread-count", response_model=UnreadCount)
async def get_unread_count(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> UnreadCount:
    return UnreadCount(unread=await notification_service.unread_count(session, current_user.id))


@router.post("/read", response_model=UpdatedCount)
async def post_mark_read(
    payload: MarkReadRequest,
    current_user: User = Depends(get_current_active_user),
) -> UpdatedCount:
    return UpdatedCount(updated=await notification_service.mark_read(current_user.id, payload.ids))


@router.post("/read-all", response_model=UpdatedCount)
async def post_mark_all_read(
    current_user: User = Depends(get_current_active_user),
) -> UpdatedCount:
    return UpdatedCount(updated=await notification_service.mark_all_read(current_user.id))


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await notification_service.delete_notification(current_user.id, notification_id)
