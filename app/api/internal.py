"""
내부 전용 API (Cron·관리). 보안 키는 Header만 허용(X-Internal-Secret 또는 Authorization: Bearer).
Query 파라미터 시크릿 미지원(Access Log 유출 방지). 잡 이름별 분산락으로 중복 enqueue 방지.
"""

import asyncio
import logging
import secrets
from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import get_redis_job_lock
from app.core.redis import RedisLockUnavailableError, acquire_job_lock, release_job_lock
from app.schemas.maintenance import CleanupStats
from app.services import maintenance_service

router = APIRouter(prefix="/internal", tags=["internal"])
logger = logging.getLogger(__name__)

CLEANUP_JOB = "cleanup"
EVENT_REMINDER_JOB = "event_reminders"


def validate_internal_secret(
    x_internal_secret: str | None = Header(None, alias="X-Internal-Secret"),
    authorization: str | None = Header(None),
) -> None:
    """INTERNAL_API_SECRET 검증. Header만 사용. timing-safe 비교. 실패 시 HTTPException."""
    if settings.internal_api_secret is None or not settings.internal_api_secret.get_secret_value():
        raise HTTPException(
            status_code=503,
            detail="Internal API not configured (INTERNAL_API_SECRET missing)",
        )
    provided = (
        x_internal_secret
        or (authorization and authorization.startswith("Bearer ") and authorization[7:].strip())
    ) or ""
    expected = settings.internal_api_secret.get_secret_value()
    if not secrets.compare_digest(provided.encode(), expected.encode()):
        raise HTTPException(status_code=401, detail="Invalid or missing internal secret")


async def _enqueue_locked(redis_client: Any, job_name: str, task: Any) -> dict | JSONResponse:
    """
    잡 락 획득 후 태스크 enqueue. 이미 실행 중이면 skipped.
    락 토큰은 태스크 인자로 넘겨 워커가 종료 시 해제. enqueue 실패 시 즉시 해제.
    """
    lock_token: str | None = None
    if redis_client is not None:
        try:
            acquired, lock_token = await acquire_job_lock(redis_client, job_name)
        except RedisLockUnavailableError:
            logger.exception("Job lock unavailable (Redis error) for job=%s", job_name)
            return JSONResponse(
                status_code=503,
                content={
                    "detail": "Service temporarily unavailable",
                    "code": "REDIS_LOCK_UNAVAILABLE",
                },
            )
        if not acquired:
            logger.info("Job %s already running, skipped", job_name)
            return {"enqueued": False, "skipped": True, "job": job_name}
    try:
        result = await asyncio.to_thread(task.apply_async, args=[lock_token])
    except Exception:
        logger.exception("apply_async failed: job=%s", job_name)
        if redis_client is not None and lock_token:
            await release_job_lock(redis_client, job_name, lock_token)
        return JSONResponse(
            status_code=503,
            content={"detail": "Service temporarily unavailable", "code": "ENQUEUE_FAILED"},
        )
    return {"enqueued": True, "job": job_name, "task_id": result.id}


@router.post("/cleanup", dependencies=[Depends(validate_internal_secret)])
async def post_cleanup(redis_client: Any = Depends(get_redis_job_lock)) -> Any:
    """정리 잡 enqueue (초대 만료, 보존 기간 경과 데이터 삭제, 초대 리마인드)."""
    from app.services.tasks import run_cleanup_task

    return await _enqueue_locked(redis_client, CLEANUP_JOB, run_cleanup_task)


@router.post("/event-reminders", dependencies=[Depends(validate_internal_secret)])
async def post_event_reminders(redis_client: Any = Depends(get_redis_job_lock)) -> Any:
    """이벤트 리마인더 잡 enqueue."""
    from app.services.tasks import send_event_reminders_task

    return await _enqueue_locked(redis_client, EVENT_REMINDER_JOB, send_event_reminders_task)


@router.get(
    "/cleanup-stats",
    response_model=CleanupStats,
    dependencies=[Depends(validate_internal_secret)],
)
async def get_cleanup_stats(session: AsyncSession = Depends(get_db)) -> CleanupStats:
    """정리 대상 현황과 마지막 정리 실행 결과."""
    return await maintenance_service.cleanup_stats(session)
