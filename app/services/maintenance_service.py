"""
정리(cleanup) 잡. 워커에서 sync 세션으로 실행.

순서:
1. 만료된 PENDING 초대 → EXPIRED
2. 보존 기간 지난 soft delete 과목·초대 영구 삭제
3. 보존 기간 지난 감사 로그 삭제 (CREATE/DELETE 제외)
4. 보존 기간 지난 읽은 알림 삭제
5. 만료 임박 초대 리마인드 카운트 증가
6. CLEANUP_JOB 감사 (실패 시 CLEANUP_JOB_FAILED 후 재발생)
"""

import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.course import Course
from app.models.enums import AuditAction, InvitationStatus
from app.models.invitation import Invitation
from app.repositories import (
    audit_log_repository,
    course_repository,
    invitation_repository,
    notification_repository,
)
from app.schemas.maintenance import CleanupResult, CleanupStats
from app.services.audit_service import create_audit_log_sync
from app.services.soft_delete_service import purge_expired

logger = logging.getLogger(__name__)

CLEANUP_ENTITY = "maintenance"
PRESERVED_AUDIT_ACTIONS = (AuditAction.CREATE, AuditAction.DELETE)
CLEANUP_ACTIONS = (AuditAction.CLEANUP_JOB, AuditAction.CLEANUP_JOB_FAILED)


def run_cleanup(session: Session, now: datetime | None = None) -> CleanupResult:
    now = now or datetime.now(UTC)
    result = CleanupResult()
    try:
        result.expired_invitations = invitation_repository.expire_pending_sync(session, now)
        result.purged_courses = purge_expired(
            session, Course, settings.soft_delete_retention_days, now
        )
        result.purged_invitations = purge_expired(
            session, Invitation, settings.soft_delete_retention_days, now
        )
        result.deleted_audit_logs = audit_log_repository.delete_before_sync(
            session,
            now - timedelta(days=settings.audit_log_retention_days),
            [str(a) for a in PRESERVED_AUDIT_ACTIONS],
        )
        result.deleted_notifications = notification_repository.delete_read_before_sync(
            session, now - timedelta(days=settings.read_notification_retention_days)
        )
        result.reminded_invitations = invitation_repository.mark_reminders_sync(
            session,
            now,
            window_days=settings.invitation_reminder_window_days,
            interval_hours=settings.invitation_reminder_interval_hours,
            max_reminders=settings.invitation_reminder_max,
        )
    except Exception as e:
        logger.exception("Cleanup job failed")
        session.rollback()
        create_audit_log_sync(
            session,
            CLEANUP_ENTITY,
            None,
            AuditAction.CLEANUP_JOB_FAILED,
            new_data={"error": str(e)[:2000], "partial": result.model_dump()},
        )
        session.commit()
        raise

    create_audit_log_sync(
        session, CLEANUP_ENTITY, None, AuditAction.CLEANUP_JOB, new_data=result.model_dump()
    )
    logger.info("Cleanup job finished: %s", result.model_dump())
    return result


async def cleanup_stats(session: AsyncSession, now: datetime | None = None) -> CleanupStats:
    now = now or datetime.now(UTC)
    last = await audit_log_repository.get_latest_by_actions(
        session, [str(a) for a in CLEANUP_ACTIONS]
    )
    return CleanupStats(
        pending_invitations=await invitation_repository.count_by_status(
            session, InvitationStatus.PENDING
        ),
        expired_invitations=await invitation_repository.count_by_status(
            session, InvitationStatus.EXPIRED
        ),
        soft_deleted_courses=await course_repository.count_deleted(session),
        soft_deleted_invitations=await invitation_repository.count_deleted(session),
        total_audit_logs=await audit_log_repository.count_all(session),
        old_audit_logs=await audit_log_repository.count_before(
            session, now - timedelta(days=settings.audit_log_retention_days)
        ),
        unread_notifications=await notification_repository.count_all_unread(session),
        last_cleanup_at=last.created_at if last else None,
        last_cleanup_status=last.action if last else None,
    )
