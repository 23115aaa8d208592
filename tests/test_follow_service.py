"""Follow Service 상태 머신 테스트. 저장소·알림은 mock, DB 없이 검증."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from app.models.enums import FollowRequestStatus
from app.schemas.follow import FollowState
from app.services import follow_service

MODULE = "app.services.follow_service"


@pytest.fixture
def repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_by_id=AsyncMock(),
        get_follow=AsyncMock(return_value=None),
        get_request=AsyncMock(return_value=None),
        get_request_by_id=AsyncMock(),
        create_follow=AsyncMock(),
        delete_follow=AsyncMock(return_value=1),
        delete_matching=AsyncMock(return_value=1),
        notify=AsyncMock(),
    )
    monkeypatch.setattr(f"{MODULE}.user_repository.get_by_id", mocks.get_by_id)
    monkeypatch.setattr(f"{MODULE}.follow_repository.get_follow", mocks.get_follow)
    monkeypatch.setattr(f"{MODULE}.follow_repository.get_request", mocks.get_request)
    monkeypatch.setattr(f"{MODULE}.follow_repository.get_request_by_id", mocks.get_request_by_id)
    monkeypatch.setattr(f"{MODULE}.follow_repository.create_follow", mocks.create_follow)
    monkeypatch.setattr(f"{MODULE}.follow_repository.delete_follow", mocks.delete_follow)
    monkeypatch.setattr(f"{MODULE}.notification_repository.delete_matching", mocks.delete_matching)
    monkeypatch.setattr(f"{MODULE}.create_notification", mocks.notify)
    return mocks


def _request(status=FollowRequestStatus.PENDING, requester_id=1, target_id=2):
    return SimpleNamespace(
        id=10,
        requester_id=requester_id,
        target_id=target_id,
        status=status,
        created_at=datetime.now(UTC),
        responded_at=None,
    )


@pytest.mark.asyncio
async def test_follow_self_is_rejected(repos) -> None:
    with pytest.raises(BadRequestError):
        await follow_service.follow(1, 1)


@pytest.mark.asyncio
async def test_follow_unknown_user_404(repos) -> None:
    repos.get_by_id.return_value = None
    with pytest.raises(NotFoundError):
        await follow_service.follow(1, 2)


@pytest.mark.asyncio
async def test_follow_public_user_creates_edge(repos, user_factory) -> None:
    repos.get_by_id.return_value = user_factory(id=2, is_private=False)

    result = await follow_service.follow(1, 2)

    assert result.state == FollowState.FOLLOWING
    repos.create_follow.assert_awaited_once()
    repos.notify.assert_awaited_once()


@pytest.mark.asyncio
async def test_follow_is_idempotent_when_already_following(repos, user_factory) -> None:
    repos.get_by_id.return_value = user_factory(id=2)
    repos.get_follow.return_value = SimpleNamespace(id=5)

    result = await follow_service.follow(1, 2)

    assert result.state == FollowState.FOLLOWING
    repos.create_follow.assert_not_awaited()
    repos.notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_follow_private_user_creates_request(repos, user_factory, session) -> None:
    repos.get_by_id.return_value = user_factory(id=2, is_private=True)

    result = await follow_service.follow(1, 2)

    assert result.state == FollowState.REQUESTED
    session.add.assert_called_once()
    repos.create_follow.assert_not_awaited()


@pytest.mark.asyncio
async def test_follow_private_user_with_pending_request_conflicts(repos, user_factory) -> None:
    repos.get_by_id.return_value = user_factory(id=2, is_private=True)
    repos.get_request.return_value = _request()

    with pytest.raises(ConflictError):
        await follow_service.follow(1, 2)


@pytest.mark.asyncio
async def test_follow_private_user_reuses_closed_request(repos, user_factory, session) -> None:
    """REJECTED 등 종료된 요청 행은 PENDING으로 재사용."""
    repos.get_by_id.return_value = user_factory(id=2, is_private=True)
    old = _request(status=FollowRequestStatus.REJECTED)
    old.responded_at = datetime.now(UTC)
    repos.get_request.return_value = old

    result = await follow_service.follow(1, 2)

    assert result.state == FollowState.REQUESTED
    assert old.status == FollowRequestStatus.PENDING
    assert old.responded_at is None
    session.add.assert_not_called()


@pytest.mark.asyncio
async def test_unfollow_is_idempotent(repos) -> None:
    repos.delete_follow.return_value = 0
    result = await follow_service.unfollow(1, 2)
    assert result.state == FollowState.NONE


@pytest.mark.asyncio
async def test_accept_creates_edge_and_notifies(repos) -> None:
    req = _request()
    repos.get_request_by_id.return_value = req

    result = await follow_service.accept_follow_request(2, req.id)

    assert result.status == FollowRequestStatus.ACCEPTED
    assert req.responded_at is not None
    repos.create_follow.assert_awaited_once()
    repos.notify.assert_awaited_once()


@pytest.mark.asyncio
async def test_accept_by_non_target_forbidden(repos) -> None:
    repos.get_request_by_id.return_value = _request()
    with pytest.raises(PermissionDeniedError):
        await follow_service.accept_follow_request(3, 10)


@pytest.mark.asyncio
async def test_accept_already_rejected_conflicts(repos) -> None:
    repos.get_request_by_id.return_value = _request(status=FollowRequestStatus.REJECTED)
    with pytest.raises(ConflictError):
        await follow_service.accept_follow_request(2, 10)


@pytest.mark.asyncio
async def test_reject_sets_status(repos) -> None:
    repos.get_request_by_id.return_value = _request()
    result = await follow_service.reject_follow_request(2, 10)
    assert result.status == FollowRequestStatus.REJECTED
    repos.create_follow.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_only_by_requester_and_removes_notification(repos) -> None:
    repos.get_request_by_id.return_value = _request()
    with pytest.raises(PermissionDeniedError):
        await follow_service.cancel_follow_request(2, 10)

    repos.get_request_by_id.return_value = _request()
    result = await follow_service.cancel_follow_request(1, 10)
    assert result.status == FollowRequestStatus.CANCELLED
    repos.delete_matching.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_request_404(repos) -> None:
    repos.get_request_by_id.return_value = None
    with pytest.raises(NotFoundError):
        await follow_service.reject_follow_request(2, 99)
