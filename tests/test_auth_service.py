"""Auth Service 단위 테스트. DB/Google 호출 없이 검증."""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import SecretStr

from app.services.auth_service import (
    AuthError,
    create_jwt_pair,
    decode_google_id_token,
    decode_refresh_token,
    refresh_tokens,
    verify_access_token,
)


def test_create_jwt_pair_returns_two_tokens() -> None:
    """create_jwt_pair: JWT_SECRET 설정 시 access, refresh 두 토큰 반환."""
    access, refresh = create_jwt_pair(user_id=1)
    assert isinstance(access, str)
    assert isinstance(refresh, str)
    assert len(access) > 0
    assert len(refresh) > 0
    assert access != refresh


def test_create_jwt_pair_raises_without_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    """create_jwt_pair: JWT_SECRET 비어 있으면 AuthError."""
    monkeypatch.setattr(
        "app.services.auth_service.settings.jwt_secret",
        SecretStr(""),
    )
    with pytest.raises(AuthError):
        create_jwt_pair(user_id=1)


@pytest.mark.asyncio
async def test_decode_google_id_token_valid() -> None:
    """decode_google_id_token: key_fetcher.get_key + jwt.decode mock 시 claims 반환."""
    mock_fetcher = AsyncMock()
    mock_fetcher.get_key = AsyncMock(return_value={"key": "dummy-key-for-test"})
    with patch(
        "app.services.auth_service.jwt.decode",
        return_value={"sub": "123", "email": "a@b.com", "name": "Test"},
    ):
        result = await decode_google_id_token("fake-id-token", mock_fetcher)
        assert result["sub"] == "123"
        assert result["email"] == "a@b.com"


def _refresh_for(user_id: int, version: int) -> str:
    _, refresh = create_jwt_pair(user_id=user_id, token_version=version)
    return refresh


def test_decode_refresh_token_rejects_access_token() -> None:
    """decode_refresh_token: access 토큰을 넣으면 type 불일치로 AuthError."""
    access, _ = create_jwt_pair(user_id=1)
    with pytest.raises(AuthError):
        decode_refresh_token(access)


@pytest.mark.asyncio
async def test_refresh_tokens_rotates_version(patch_transaction, user_factory, monkeypatch) -> None:
    """refresh_tokens: 버전 일치 시 버전을 올리고 새 토큰 쌍 발급."""
    patch_transaction("app.services.auth_service")
    user = user_factory(id=7, refresh_token_version=2)
    monkeypatch.setattr("app.services.auth_service.get_by_id", AsyncMock(return_value=user))
    bump = AsyncMock(return_value=3)
    monkeypatch.setattr("app.services.auth_service.increment_refresh_token_version", bump)

    result = await refresh_tokens(_refresh_for(7, 2))

    bump.assert_awaited_once()
    payload = decode_refresh_token(result.refresh_token)
    assert payload["sub"] == "7"
    assert payload["token_version"] == 3


@pytest.mark.asyncio
async def test_refresh_tokens_rejects_reused_token(patch_transaction, user_factory, monkeypatch) -> None:
    """refresh_tokens: 이미 회전된(버전 불일치) Refresh 토큰은 AuthError."""
    patch_transaction("app.services.auth_service")
    user = user_factory(id=7, refresh_token_version=3)
    monkeypatch.setattr("app.services.auth_service.get_by_id", AsyncMock(return_value=user))
    bump = AsyncMock()
    monkeypatch.setattr("app.services.auth_service.increment_refresh_token_version", bump)

    with pytest.raises(AuthError):
        await refresh_tokens(_refresh_for(7, 2))
    bump.assert_not_awaited()


@pytest.mark.asyncio
async def test_refresh_tokens_rejects_suspended_user(patch_transaction, user_factory, monkeypatch) -> None:
    patch_transaction("app.services.auth_service")
    user = user_factory(id=7, refresh_token_version=0, status="SUSPENDED")
    monkeypatch.setattr("app.services.auth_service.get_by_id", AsyncMock(return_value=user))

    with pytest.raises(AuthError):
        await refresh_tokens(_refresh_for(7, 0))


@pytest.mark.asyncio
async def test_verify_access_token_blocked_jti() -> None:
    """verify_access_token: Blocklist에 있는 jti면 AuthError."""
    access, _ = create_jwt_pair(user_id=1)
    redis_client = AsyncMock()
    redis_client.exists = AsyncMock(return_value=1)
    with pytest.raises(AuthError):
        await verify_access_token(access, redis_client)
