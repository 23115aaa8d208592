"""Health check 엔드포인트. Redis는 app.state 비동기 클라이언트(Blocklist·Job Lock) 재사용."""

import asyncio

from fastapi import APIRouter, Request
from sqlalchemy import text

from app.core.database import get_async_session_maker

router = APIRouter(tags=["health"])

HEALTH_REDIS_PING_TIMEOUT = 2.0
REDIS_CLIENT_ATTRS = ("redis_blocklist_client", "redis_job_lock_client")


async def _check_db() -> str:
    """DB 연결 상태. SELECT 1 실행. 'ok' 또는 'error'. DB 미초기화 시 'error'."""
    maker = get_async_session_maker()
    if not maker:
        return "error"
    try:
        async with maker() as session:
            await session.execute(text("SELECT 1"))
        return "ok"
    except Exception:
        return "error"


async def _check_redis(request: Request) -> str:
    """Redis 연결 상태. 설정된 클라이언트 모두 PING(짧은 timeout). 미설정 클라이언트는 건너뜀."""
    for attr in REDIS_CLIENT_ATTRS:
        client = getattr(request.app.state, attr, None)
        if client is None:
            continue
        try:
            await asyncio.wait_for(client.ping(), timeout=HEALTH_REDIS_PING_TIMEOUT)
        except Exception:
            return "error"
    return "ok"


@router.get("/health")
async def get_health(request: Request) -> dict[str, str]:
    """헬스 체크. DB(SELECT 1)·Redis(PING, 기존 비동기 풀 재사용). status: ok | degraded."""
    db_status = await _check_db()
    redis_status = await _check_redis(request)
    status = "ok" if db_status == "ok" and redis_status == "ok" else "degraded"
    return {
        "status": status,
        "db": db_status,
        "redis": redis_status,
    }
