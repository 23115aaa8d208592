"""Invitation Service 테스트. 만료일 범위와 수락 가드."""

from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.config import settings
from app.core.exceptions import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from app.models.enums import AuditAction, InvitationStatus, InvitationType, MemberRole
from app.models.invitation import Invitation
from app.schemas.invitation import InvitationCreate
from app.services import invitation_service

MODULE = "app.services.invitation_service"
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def test_generate_token_is_64_hex() -> None:
    token = invitation_service.generate_token()
    assert len(token) == 64
    int(token, 16)
    assert token != invitation_service.generate_token()


def test_resolve_expires_at_defaults() -> None:
    expires = invitation_service.resolve_expires_at(None, NOW)
    assert expires == NOW + timedelta(days=settings.invitation_default_expire_days)


def test_resolve_expires_at_rejects_past() -> None:
    with pytest.raises(BadRequestError):
        invitation_service.resolve_expires_at(NOW - timedelta(minutes=1), NOW)
    with pytest.raises(BadRequestError):
        invitation_service.resolve_expires_at(NOW, NOW)


def test_resolve_expires_at_rejects_beyond_max() -> None:
    too_far = NOW + timedelta(days=settings.invitation_max_expire_days, seconds=1)
    with pytest.raises(BadRequestError):
        invitation_service.resolve_expires_at(too_far, NOW)


def test_resolve_expires_at_accepts_max_and_naive() -> None:
    at_max = NOW + timedelta(days=settings.invitation_max_expire_days)
    assert invitation_service.resolve_expires_at(at_max, NOW) == at_max
    naive = (NOW + timedelta(days=3)).replace(tzinfo=None)
    assert invitation_service.resolve_expires_at(naive, NOW).tzinfo is not None


def _invitation(**overrides):
    data = {
        "id": 4,
        "email": "Invitee@Example.com",
        "status": InvitationStatus.PENDING,
        "is_deleted": False,
        "expires_at": datetime.now(UTC) + timedelta(days=3),
        "organization_id": 9,
        "inviter_id": 1,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


@pytest.fixture
def accept_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_by_token=AsyncMock(),
        get_user=AsyncMock(),
        get_member=AsyncMock(return_value=None),
    )
    monkeypatch.setattr(f"{MODULE}.invitation_repository.get_by_token", mocks.get_by_token)
    monkeypatch.setattr(f"{MODULE}.user_repository.get_by_id", mocks.get_user)
    monkeypatch.setattr(f"{MODULE}.organization_repository.get_member", mocks.get_member)
    return mocks


@pytest.mark.asyncio
async def test_accept_expired_invitation_404(accept_repos) -> None:
    accept_repos.get_by_token.return_value = _invitation(
        expires_at=datetime.now(UTC) - timedelta(seconds=1)
    )
    with pytest.raises(NotFoundError):
        await invitation_service.accept_invitation("tok", 2)


@pytest.mark.asyncio
async def test_accept_cancelled_invitation_404(accept_repos) -> None:
    accept_repos.get_by_token.return_value = _invitation(status=InvitationStatus.CANCELLED)
    with pytest.raises(NotFoundError):
        await invitation_service.accept_invitation("tok", 2)


@pytest.mark.asyncio
async def test_accept_email_mismatch_403(accept_repos, user_factory) -> None:
    accept_repos.get_by_token.return_value = _invitation()
    accept_repos.get_user.return_value = user_factory(id=2, email="someone@else.com")
    with pytest.raises(PermissionDeniedError):
        await invitation_service.accept_invitation("tok", 2)


@pytest.mark.asyncio
async def test_accept_already_member_409(accept_repos, user_factory) -> None:
    """이메일 비교는 대소문자 무시. 활성 멤버면 409."""
    accept_repos.get_by_token.return_value = _invitation()
    accept_repos.get_user.return_value = user_factory(id=2, email="invitee@example.com")
    accept_repos.get_member.return_value = SimpleNamespace(is_active=True)
    with pytest.raises(ConflictError):
        await invitation_service.accept_invitation("tok", 2)


@pytest.fixture
def create_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_organization=AsyncMock(return_value=SimpleNamespace(id=5)),
        get_member=AsyncMock(),
        find_open=AsyncMock(return_value=None),
    )
    monkeypatch.setattr(
        f"{MODULE}.organization_repository.get_organization", mocks.get_organization
    )
    monkeypatch.setattr(f"{MODULE}.organization_repository.get_member", mocks.get_member)
    monkeypatch.setattr(f"{MODULE}.invitation_repository.find_open_for_email", mocks.find_open)
    return mocks


def _create_payload(**overrides) -> InvitationCreate:
    data = {"email": "new@example.com", "organization_id": 5}
    data.update(overrides)
    return InvitationCreate(**data)


@pytest.mark.asyncio
async def test_create_by_non_inviting_role_403(create_repos) -> None:
    create_repos.get_member.return_value = SimpleNamespace(role=MemberRole.MEMBER)
    with pytest.raises(PermissionDeniedError):
        await invitation_service.create_invitation(1, _create_payload())
    create_repos.find_open.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_by_non_member_403(create_repos) -> None:
    create_repos.get_member.return_value = None
    with pytest.raises(PermissionDeniedError):
        await invitation_service.create_invitation(1, _create_payload())


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "inviter_role", [MemberRole.ADMIN, MemberRole.SCHOOL_ADMIN, MemberRole.FACULTY_ADMIN]
)
async def test_only_owner_may_invite_an_owner(create_repos, inviter_role) -> None:
    create_repos.get_member.return_value = SimpleNamespace(role=inviter_role)
    with pytest.raises(PermissionDeniedError):
        await invitation_service.create_invitation(1, _create_payload(role=MemberRole.OWNER))
    create_repos.find_open.assert_not_awaited()


@pytest.mark.asyncio
async def test_owner_may_invite_an_owner(create_repos) -> None:
    """OWNER는 권한 검사를 통과하고 중복 검사까지 진행."""
    create_repos.get_member.return_value = SimpleNamespace(role=MemberRole.OWNER)
    create_repos.find_open.return_value = _invitation()
    with pytest.raises(ConflictError):
        await invitation_service.create_invitation(1, _create_payload(role=MemberRole.OWNER))
    create_repos.find_open.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_duplicate_open_invitation_409(create_repos) -> None:
    create_repos.get_member.return_value = SimpleNamespace(role=MemberRole.ADMIN)
    create_repos.find_open.return_value = _invitation()
    with pytest.raises(ConflictError) as exc:
        await invitation_service.create_invitation(1, _create_payload(email="New@Example.com"))
    assert exc.value.code == "INVITATION_EXISTS"
    assert create_repos.find_open.await_args.args[1] == "new@example.com"


@pytest.mark.asyncio
async def test_create_unknown_organization_404(create_repos) -> None:
    create_repos.get_organization.return_value = None
    with pytest.raises(NotFoundError):
        await invitation_service.create_invitation(1, _create_payload())


@pytest.mark.asyncio
async def test_decline_non_pending_404(accept_repos) -> None:
    accept_repos.get_by_token.return_value = _invitation(status=InvitationStatus.ACCEPTED)
    with pytest.raises(NotFoundError):
        await invitation_service.decline_invitation("tok", "busy")


@pytest.mark.asyncio
async def test_decline_sets_status_and_audits_reason(accept_repos, monkeypatch) -> None:
    inv = _orm_invitation()
    accept_repos.get_by_token.return_value = inv
    audit = AsyncMock()
    monkeypatch.setattr(f"{MODULE}.create_audit_log", audit)

    result = await invitation_service.decline_invitation("tok", "busy")

    assert result.status == InvitationStatus.DECLINED
    assert inv.declined_at is not None
    assert audit.await_args.args[3] == AuditAction.DECLINE
    assert audit.await_args.kwargs["reason"] == "busy"


def _orm_invitation(**overrides) -> Invitation:
    now = datetime.now(UTC)
    data = {
        "id": 4,
        "email": "invitee@example.com",
        "token": "tok",
        "type": InvitationType.ORGANIZATION_MEMBER,
        "role": MemberRole.MEMBER,
        "status": InvitationStatus.PENDING,
        "organization_id": 9,
        "inviter_id": 1,
        "expires_at": now + timedelta(days=3),
        "is_deleted": False,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return Invitation(**data)


@pytest.fixture
def cancel_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction, session):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(get_by_id=AsyncMock(), audit=AsyncMock())
    monkeypatch.setattr(f"{MODULE}.invitation_repository.get_by_id", mocks.get_by_id)
    monkeypatch.setattr("app.services.soft_delete_service.create_audit_log", mocks.audit)
    session.get = AsyncMock(side_effect=lambda model, entity_id: mocks.get_by_id.return_value)
    return mocks


@pytest.mark.asyncio
async def test_cancel_by_other_user_403(cancel_repos) -> None:
    cancel_repos.get_by_id.return_value = _orm_invitation()
    with pytest.raises(PermissionDeniedError):
        await invitation_service.cancel_invitation(2, 4)


@pytest.mark.asyncio
async def test_cancel_non_pending_409(cancel_repos) -> None:
    cancel_repos.get_by_id.return_value = _orm_invitation(status=InvitationStatus.ACCEPTED)
    with pytest.raises(ConflictError) as exc:
        await invitation_service.cancel_invitation(1, 4)
    assert exc.value.code == "INVITATION_NOT_PENDING"
    cancel_repos.audit.assert_not_awaited()


@pytest.mark.asyncio
async def test_cancel_soft_deletes_and_audits_cancelled_state(cancel_repos) -> None:
    inv = _orm_invitation()
    cancel_repos.get_by_id.return_value = inv

    result = await invitation_service.cancel_invitation(1, 4)

    assert result.status == InvitationStatus.CANCELLED
    assert result.cancelled_at is not None
    assert inv.is_deleted is True
    args, kwargs = cancel_repos.audit.await_args
    assert args[3] == AuditAction.SOFT_DELETE
    assert kwargs["previous_data"]["status"] == "PENDING"
    assert kwargs["new_data"]["status"] == "CANCELLED"
    assert kwargs["new_data"]["is_deleted"] is True
