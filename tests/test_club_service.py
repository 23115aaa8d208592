"""Club Service 테스트. 가입·탈퇴·역할 변경 가드."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from app.models.enums import ClubMemberRole, ClubStatus, NotificationType
from app.services import club_service

MODULE = "app.services.club_service"


def _club(**overrides) -> SimpleNamespace:
    data = {
        "id": 4,
        "name": "Robotics",
        "status": ClubStatus.ACTIVE,
        "is_active": True,
        "is_public": True,
        "max_members": None,
        "created_by_id": 1,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _membership(user_id=2, role=ClubMemberRole.MEMBER, is_active=True) -> SimpleNamespace:
    return SimpleNamespace(
        id=20 + user_id,
        club_id=4,
        user_id=user_id,
        role=role,
        is_active=is_active,
        joined_at=datetime.now(UTC),
    )


@pytest.fixture
def club_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_club=AsyncMock(return_value=_club()),
        get_membership=AsyncMock(return_value=None),
        count_active_members=AsyncMock(return_value=0),
        list_members=AsyncMock(return_value=[]),
        notify=AsyncMock(),
    )
    monkeypatch.setattr(f"{MODULE}.club_repository.get_club", mocks.get_club)
    monkeypatch.setattr(f"{MODULE}.club_repository.get_membership", mocks.get_membership)
    monkeypatch.setattr(
        f"{MODULE}.club_repository.count_active_members", mocks.count_active_members
    )
    monkeypatch.setattr(f"{MODULE}.club_repository.list_members", mocks.list_members)
    monkeypatch.setattr(f"{MODULE}.create_notification", mocks.notify)
    return mocks


@pytest.mark.asyncio
async def test_join_inactive_club_404(club_repos) -> None:
    club_repos.get_club.return_value = _club(is_active=False)
    with pytest.raises(NotFoundError):
        await club_service.join_club(2, 4)


@pytest.mark.asyncio
async def test_join_suspended_club_400(club_repos) -> None:
    club_repos.get_club.return_value = _club(status=ClubStatus.SUSPENDED)
    with pytest.raises(BadRequestError):
        await club_service.join_club(2, 4)


@pytest.mark.asyncio
async def test_join_private_club_403(club_repos) -> None:
    club_repos.get_club.return_value = _club(is_public=False)
    with pytest.raises(PermissionDeniedError):
        await club_service.join_club(2, 4)


@pytest.mark.asyncio
async def test_join_twice_409(club_repos) -> None:
    club_repos.get_membership.return_value = _membership()
    with pytest.raises(ConflictError) as exc:
        await club_service.join_club(2, 4)
    assert exc.value.code == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_join_full_club_409(club_repos) -> None:
    club_repos.get_club.return_value = _club(max_members=3)
    club_repos.count_active_members.return_value = 3
    with pytest.raises(ConflictError) as exc:
        await club_service.join_club(2, 4)
    assert exc.value.code == "CLUB_FULL"


@pytest.mark.asyncio
async def test_rejoin_reactivates_as_member_and_notifies_advisors(club_repos) -> None:
    old = _membership(role=ClubMemberRole.VICE_PRESIDENT, is_active=False)
    club_repos.get_membership.return_value = old
    club_repos.list_members.return_value = [_membership(user_id=7, role=ClubMemberRole.ADVISOR)]

    result = await club_service.join_club(2, 4)

    assert result.is_active is True
    assert result.role == ClubMemberRole.MEMBER
    club_repos.notify.assert_awaited_once()
    assert club_repos.notify.await_args.args[1] == NotificationType.CLUB_JOIN
    assert club_repos.notify.await_args.args[2] == 7


@pytest.mark.asyncio
async def test_sole_president_cannot_leave(club_repos) -> None:
    president = _membership(user_id=1, role=ClubMemberRole.PRESIDENT)
    club_repos.get_membership.return_value = president
    club_repos.list_members.return_value = [president]
    with pytest.raises(ConflictError) as exc:
        await club_service.leave_club(1, 4)
    assert exc.value.code == "SOLE_PRESIDENT"
    assert president.is_active is True


@pytest.mark.asyncio
async def test_leave_deactivates_membership(club_repos) -> None:
    membership = _membership()
    club_repos.get_membership.return_value = membership
    await club_service.leave_club(2, 4)
    assert membership.is_active is False


@pytest.mark.asyncio
async def test_member_cannot_change_roles(club_repos) -> None:
    club_repos.get_membership.return_value = _membership()
    with pytest.raises(PermissionDeniedError):
        await club_service.update_club_member_role(2, 4, 3, ClubMemberRole.VICE_PRESIDENT)
