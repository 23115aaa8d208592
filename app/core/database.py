"""비동기 DB 엔진·세션·트랜잭션 경계. SQLAlchemy 2.0 + asyncpg.

라우터는 get_db(읽기 전용 세션), 서비스는 transaction()으로만 쓰기 경계를 연다.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings

logger = logging.getLogger(__name__)


class _DbHolder:
    """엔진·세션 팩토리 보관. 테스트에서 override_db_for_testing으로 교체."""

    engine: AsyncEngine | None = None
    session_maker: async_sessionmaker[AsyncSession] | None = None


_holder = _DbHolder()

# transaction() 중첩 시 같은 세션 공유. 최외곽에서만 commit/rollback.
_current_session: ContextVar[AsyncSession | None] = ContextVar(
    "current_session", default=None
)


def _async_database_url(url: str) -> str:
    """드라이버를 asyncpg로 고정. postgresql://, postgresql+psycopg:// 모두 허용."""
    return str(make_url(url.strip()).set(drivername="postgresql+asyncpg"))


def get_engine() -> AsyncEngine | None:
    return _holder.engine


def get_async_session_maker() -> async_sessionmaker[AsyncSession] | None:
    return _holder.session_maker


def init_db() -> None:
    """DATABASE_URL이 있으면 엔진·세션 팩토리 생성. 없으면 DB 기능 비활성(경고만)."""
    if not settings.database_url:
        logger.warning("DATABASE_URL not set. DB features disabled.")
        return

    _holder.engine = create_async_engine(
        _async_database_url(settings.database_url),
        echo=False,
        pool_pre_ping=True,
    )
    _holder.session_maker = async_sessionmaker(
        _holder.engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def override_db_for_testing(
    engine: AsyncEngine | None = None,
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> None:
    """테스트용 엔진/세션 팩토리 주입."""
    _holder.engine = engine
    _holder.session_maker = session_maker


def _report_connection_failure(exc: Exception | None, retries: int) -> None:
    """부팅 실패를 Sentry에 남긴다. sentry_sdk 미설치 시 생략."""
    try:
        import sentry_sdk
    except ImportError:
        return
    with sentry_sdk.push_scope() as scope:
        scope.set_tag("context", "database_connection_check")
        scope.set_context(
            "database",
            {"url_set": bool(settings.database_url), "retries": retries},
        )
        sentry_sdk.capture_exception(exc)


async def verify_db_connection() -> None:
    """
    SELECT 1로 연결 검증. 컨테이너 기동 순서 문제로 DB가 늦게 뜨는 경우를 위해 재시도.
    모두 실패하면 Sentry 보고 후 RuntimeError로 부팅 중단.
    """
    maker = get_async_session_maker()
    if not _holder.engine or not maker:
        return

    retries = max(1, settings.db_connect_retries)
    interval = max(0.5, settings.db_connect_retry_interval_sec)
    last_exc: Exception | None = None

    for attempt in range(1, retries + 1):
        try:
            async with maker() as session:
                await session.execute(text("SELECT 1"))
            return
        except Exception as exc:
            last_exc = exc
            if attempt == retries:
                break
            logger.warning(
                "Database connection attempt %d/%d failed: %s. Retrying in %.1fs...",
                attempt,
                retries,
                exc,
                interval,
            )
            await asyncio.sleep(interval)

    _report_connection_failure(last_exc, retries)
    logger.critical(
        "Database connection failed after %d attempts: %s. Aborting startup.",
        retries,
        last_exc,
        exc_info=True,
    )
    raise RuntimeError(
        "Database connection failed after %d attempts: %s" % (retries, last_exc)
    ) from last_exc


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI Depends용 조회 세션. 쓰기는 서비스의 transaction()에서만."""
    maker = get_async_session_maker()
    if not maker:
        raise RuntimeError("Database not initialized. Set DATABASE_URL.")

    async with maker() as session:
        yield session


@asynccontextmanager
async def transaction() -> AsyncGenerator[AsyncSession, None]:
    """
    서비스 레이어 트랜잭션. 성공 시 commit, 예외 시 rollback 후 재전파.
    상위에서 이미 열린 트랜잭션이 있으면 그 세션을 그대로 넘긴다(하나의 트랜잭션).
    """
    existing = _current_session.get()
    if existing is not None:
        yield existing
        return

    maker = get_async_session_maker()
    if not maker:
        raise RuntimeError("Database not initialized. Set DATABASE_URL.")

    session: AsyncSession | None = None
    token: Any = None
    try:
        session = maker()
        token = _current_session.set(session)
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    finally:
        if token is not None:
            _current_session.reset(token)
        if session is not None:
            await session.close()
