"""
Celery 워커가 실행할 작업(Task) 정의.
동기 DB(psycopg) 세션 사용. "Too many connections" 방지.
각 태스크는 라우터가 획득한 잡 락 토큰을 받아 완료/예외 시 해제.
"""

import logging

from celery import shared_task
from sqlalchemy.exc import OperationalError

from app.core.database_sync import get_sync_session
from app.core.redis import release_job_lock_sync
from app.services import event_service, maintenance_service

logger = logging.getLogger(__name__)

CLEANUP_JOB = "cleanup"
EVENT_REMINDER_JOB = "event_reminders"


def _set_task_context(task_id: str | None, job_name: str | None = None):
    """Sentry·로그용 컨텍스트. task_id·job 이름 태그."""
    try:
        import sentry_sdk
        if task_id:
            sentry_sdk.set_tag("celery.task_id", task_id)
        if job_name:
            sentry_sdk.set_tag("job_name", job_name)
    except ImportError:
        pass


@shared_task(
    name="app.services.tasks.run_cleanup_task",
    autoretry_for=(OperationalError, ConnectionError, TimeoutError),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=3,
)
def run_cleanup_task(lock_token: str | None = None):
    """정리 잡. 초대 만료·보존 기간 경과 삭제·리마인드. 결과는 감사 로그에도 기록."""
    task_id = getattr(run_cleanup_task.request, "id", None) or ""
    _set_task_context(str(task_id) if task_id else None, CLEANUP_JOB)
    logger.info("Task Started: task_id=%s job=%s", task_id, CLEANUP_JOB)
    try:
        with get_sync_session() as session:
            result = maintenance_service.run_cleanup(session)
        return result.model_dump()
    finally:
        release_job_lock_sync(CLEANUP_JOB, lock_token)


@shared_task(
    name="app.services.tasks.send_event_reminders_task",
    autoretry_for=(OperationalError, ConnectionError, TimeoutError),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=3,
)
def send_event_reminders_task(lock_token: str | None = None):
    """
    곧 시작하는 이벤트 참가자에게 리마인더 알림.
    FOR UPDATE SKIP LOCKED로 이벤트 선점, 동시 워커 중복 발송 방지.
    시작 24시간 경과 이벤트의 reminder_sent 플래그 해제도 함께 수행.
    """
    task_id = getattr(send_event_reminders_task.request, "id", None) or ""
    _set_task_context(str(task_id) if task_id else None, EVENT_REMINDER_JOB)
    logger.info("Task Started: task_id=%s job=%s", task_id, EVENT_REMINDER_JOB)
    try:
        with get_sync_session() as session:
            sent = event_service.send_event_reminders(session)
            reset = event_service.reset_event_reminders(session)
        logger.info("Event reminders done: %s, reset=%s", sent, reset)
        return {**sent, "reset": reset}
    finally:
        release_job_lock_sync(EVENT_REMINDER_JOB, lock_token)
