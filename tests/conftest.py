"""Pytest fixtures. 테스트 시 DB 없이 실행 가능하도록 환경 조정."""

import os
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# CI에서 DATABASE_URL이 주입되면 그대로 사용. 로컬에서 비어 있으면 DB 없이 부팅 가능하도록 빈 문자열.
if not os.environ.get("DATABASE_URL"):
    os.environ["DATABASE_URL"] = ""
# Settings Fail-fast 대비: 테스트 시 필수 Auth env 설정
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-for-pytest")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-google-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-google-client-secret")
os.environ.setdefault("INTERNAL_API_SECRET", "test-internal-secret")
os.environ.setdefault("REDIS_URL", "")


def make_session() -> MagicMock:
    """AsyncSession 대역. add는 동기, flush/refresh/execute는 await 가능."""
    session = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.execute = AsyncMock()
    session.delete = AsyncMock()
    return session


@pytest.fixture
def session() -> MagicMock:
    return make_session()


@pytest.fixture
def fake_transaction(session: MagicMock):
    """서비스 모듈의 transaction()을 대체. 동일 session을 넘긴다."""

    @asynccontextmanager
    async def _transaction():
        yield session

    return _transaction


@pytest.fixture
def patch_transaction(monkeypatch: pytest.MonkeyPatch, fake_transaction):
    """patch_transaction("app.services.follow_service") 형태로 사용."""

    def _patch(*module_paths: str) -> None:
        for path in module_paths:
            monkeypatch.setattr(f"{path}.transaction", fake_transaction)

    return _patch


def _make_user(**overrides) -> SimpleNamespace:
    data = {
        "id": 1,
        "email": "user@example.com",
        "name": "Test User",
        "username": "tester",
        "role": "STUDENT",
        "status": "ACTIVE",
        "is_private": False,
        "refresh_token_version": 0,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


@pytest.fixture
def user_factory():
    """User 대역 생성기. user_factory(id=2, is_private=True)."""
    return _make_user


@pytest.fixture
def client() -> TestClient:
    """FastAPI TestClient. DB 없이 /health 등 테스트용. lifespan 미실행."""
    from app.main import app
    return TestClient(app)


@pytest.fixture
def auth_client():
    """get_current_active_user·get_db를 대체한 TestClient. 종료 시 override 해제."""
    from app.api.v1.auth import get_current_active_user
    from app.core.database import get_db
    from app.main import app

    user = _make_user()

    async def _db():
        yield make_session()

    app.dependency_overrides[get_current_active_user] = lambda: user
    app.dependency_overrides[get_db] = _db
    try:
        yield TestClient(app, raise_server_exceptions=False), user
    finally:
        app.dependency_overrides.clear()
