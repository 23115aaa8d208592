"""
동기 DB 연결 (Celery 워커 전용). SQLAlchemy 2.0 + psycopg (sync).
웹은 asyncpg 풀, 워커는 이 모듈의 작은 풀만 사용해 커넥션 수를 분리한다.
"""

import logging
from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)

sync_engine = None
sync_session_factory = None


def _sync_database_url() -> str | None:
    """DATABASE_URL의 드라이버를 psycopg(3)로 교체. 미설정 시 None."""
    url = settings.database_url
    if not url:
        return None
    return str(make_url(url.strip()).set(drivername="postgresql+psycopg"))


def init_sync_db() -> None:
    """워커 프로세스에서 최초 1회 엔진·세션 팩토리 생성."""
    global sync_engine, sync_session_factory
    url = _sync_database_url()
    if not url:
        logger.warning("DATABASE_URL not set. Sync DB features disabled.")
        return
    sync_engine = create_engine(
        url,
        echo=False,
        pool_pre_ping=True,
        pool_size=2,
        max_overflow=0,
    )
    sync_session_factory = sessionmaker(
        bind=sync_engine,
        autoflush=False,
        expire_on_commit=False,
    )


@contextmanager
def get_sync_session() -> Generator[Session, None, None]:
    """with get_sync_session() as session: 블록 종료 시 commit, 예외 시 rollback."""
    if not sync_session_factory:
        init_sync_db()
    if not sync_session_factory:
        raise RuntimeError("Sync database not initialized. Set DATABASE_URL.")
    session = sync_session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
