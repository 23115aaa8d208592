"""Redis 클라이언트. Access Token Blocklist와 내부 잡(정리·리마인더) 분산락."""

import logging
import uuid
from typing import Any

from app.core.config import settings

logger = logging.getLogger(__name__)

BLOCKLIST_KEY_PREFIX = "campusnet:blocklist:access:"
# 잡 이름별 락. TTL 내 중복 enqueue 방지, 워커 완료 시 소유자 확인 후 조기 해제.
JOB_LOCK_KEY_PREFIX = "campusnet:job_lock:"
JOB_LOCK_TTL_SECONDS = 900

# 값이 token일 때만 삭제. 1=삭제됨, 0=소유자 아님/키 없음.
LUA_RELEASE_IF_OWNER = """
if redis.call('get', KEYS[1]) == ARGV[1] then
    return redis.call('del', KEYS[1])
else
    return 0
end
"""


class RedisLockUnavailableError(Exception):
    """Redis 오류로 락 획득 불가. 라우터에서 503 + code REDIS_LOCK_UNAVAILABLE."""

    pass


def _pool_kwargs() -> dict:
    return {
        "decode_responses": True,
        "socket_timeout": settings.redis_socket_timeout,
        "socket_connect_timeout": settings.redis_socket_connect_timeout,
    }


def _create_async_client(max_connections: int) -> Any:
    if not settings.redis_url:
        return None
    import redis.asyncio as redis

    pool = redis.ConnectionPool.from_url(
        settings.redis_url,
        max_connections=max_connections,
        **_pool_kwargs(),
    )
    return redis.Redis(connection_pool=pool)


def create_blocklist_client() -> Any:
    """Blocklist용 비동기 클라이언트. REDIS_URL 없으면 None. lifespan에서 1회 생성."""
    return _create_async_client(settings.redis_blocklist_max_connections)


def create_job_lock_client() -> Any:
    """잡 락 전용 비동기 클라이언트. 인증 풀과 분리."""
    return _create_async_client(settings.redis_job_lock_max_connections)


async def add_access_to_blocklist(client: Any, jti: str, ttl_seconds: int) -> None:
    """Access Token jti를 TTL 동안 차단. 실패는 경고만(로그아웃 자체는 성공 처리)."""
    if client is None or ttl_seconds <= 0:
        return
    try:
        await client.set(f"{BLOCKLIST_KEY_PREFIX}{jti}", "1", ex=ttl_seconds)
    except Exception as e:
        logger.warning("Blocklist add failed (jti=%s): %s", jti, e, exc_info=True)


async def is_access_blocked(client: Any, jti: str, *, fail_closed: bool) -> bool:
    """
    jti가 Blocklist에 있으면 True.
    Redis 장애 시 fail_closed=True면 True(인증 거부), False면 False.
    """
    if client is None:
        return False
    try:
        return bool(await client.exists(f"{BLOCKLIST_KEY_PREFIX}{jti}"))
    except Exception as e:
        logger.warning("Blocklist check failed (jti=%s): %s", jti, e, exc_info=True)
        return fail_closed


async def acquire_job_lock(client: Any, job_name: str) -> tuple[bool, str | None]:
    """
    SET key <uuid> NX EX. 성공 시 (True, token), 이미 잠김 시 (False, None).
    client가 None이면 락 비활성으로 (True, None). Redis 오류 시 RedisLockUnavailableError.
    """
    if client is None:
        return (True, None)
    token = str(uuid.uuid4())
    try:
        ok = await client.set(
            f"{JOB_LOCK_KEY_PREFIX}{job_name}", token, nx=True, ex=JOB_LOCK_TTL_SECONDS
        )
    except Exception as e:
        logger.warning("Job lock acquire failed (job=%s): %s", job_name, e, exc_info=True)
        raise RedisLockUnavailableError("Redis unavailable") from e
    return (bool(ok), token if ok else None)


async def release_job_lock(client: Any, job_name: str, token: str | None) -> bool:
    """소유자만 해제(Lua compare-and-del). enqueue 실패 시 라우터에서 호출."""
    if client is None or not token:
        return False
    try:
        n = await client.eval(LUA_RELEASE_IF_OWNER, 1, f"{JOB_LOCK_KEY_PREFIX}{job_name}", token)
        return n == 1
    except Exception as e:
        logger.warning("Job lock release failed (job=%s): %s", job_name, e, exc_info=True)
        return False


def release_job_lock_sync(job_name: str, token: str | None) -> None:
    """워커 완료/예외 시 락 해제. 동기 Redis(Celery 환경)."""
    if not token or not settings.redis_url:
        return
    import redis

    try:
        client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
        client.eval(LUA_RELEASE_IF_OWNER, 1, f"{JOB_LOCK_KEY_PREFIX}{job_name}", token)
        client.close()
    except Exception as e:
        logger.warning("Job lock release failed (job=%s): %s", job_name, e, exc_info=True)
