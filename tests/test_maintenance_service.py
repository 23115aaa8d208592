"""정리 잡 테스트. sync 저장소 함수는 mock, 실행 순서와 실패 감사 확인."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.models.course import Course
from app.models.enums import AuditAction
from app.models.invitation import Invitation
from app.services import maintenance_service

MODULE = "app.services.maintenance_service"
NOW = datetime(2026, 6, 1, 3, 0, tzinfo=UTC)


@pytest.fixture
def steps(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """단계별 mock을 하나의 manager에 묶어 호출 순서를 mock_calls로 확인."""
    manager = MagicMock()
    manager.expire.return_value = 2
    manager.purge.side_effect = [1, 3]
    manager.delete_audit.return_value = 4
    manager.delete_notifications.return_value = 5
    manager.remind.return_value = 6
    monkeypatch.setattr(f"{MODULE}.invitation_repository.expire_pending_sync", manager.expire)
    monkeypatch.setattr(f"{MODULE}.purge_expired", manager.purge)
    monkeypatch.setattr(f"{MODULE}.audit_log_repository.delete_before_sync", manager.delete_audit)
    monkeypatch.setattr(
        f"{MODULE}.notification_repository.delete_read_before_sync", manager.delete_notifications
    )
    monkeypatch.setattr(f"{MODULE}.invitation_repository.mark_reminders_sync", manager.remind)
    monkeypatch.setattr(f"{MODULE}.create_audit_log_sync", manager.audit)
    return manager


def _order(manager: MagicMock) -> list[str]:
    return [name for name, _, _ in manager.mock_calls]


def test_run_cleanup_runs_steps_in_order(steps) -> None:
    session = MagicMock()

    result = maintenance_service.run_cleanup(session, NOW)

    assert _order(steps) == [
        "expire",
        "purge",
        "purge",
        "delete_audit",
        "delete_notifications",
        "remind",
        "audit",
    ]
    assert result.model_dump() == {
        "expired_invitations": 2,
        "purged_courses": 1,
        "purged_invitations": 3,
        "deleted_audit_logs": 4,
        "deleted_notifications": 5,
        "reminded_invitations": 6,
    }
    assert steps.purge.call_args_list[0].args[1] is Course
    assert steps.purge.call_args_list[1].args[1] is Invitation
    assert steps.audit.call_args.args[3] == AuditAction.CLEANUP_JOB
    assert steps.audit.call_args.kwargs["new_data"] == result.model_dump()


def test_run_cleanup_uses_retention_cutoffs(steps) -> None:
    maintenance_service.run_cleanup(MagicMock(), NOW)

    audit_cutoff, preserved = steps.delete_audit.call_args.args[1:]
    assert audit_cutoff == NOW - timedelta(days=settings.audit_log_retention_days)
    assert set(preserved) == {"CREATE", "DELETE"}
    assert steps.delete_notifications.call_args.args[1] == NOW - timedelta(
        days=settings.read_notification_retention_days
    )
    assert steps.remind.call_args.kwargs["max_reminders"] == settings.invitation_reminder_max


def test_run_cleanup_failure_audits_and_reraises(steps) -> None:
    """중간 단계 실패 시 rollback, CLEANUP_JOB_FAILED 감사(부분 결과 포함) 후 예외 전파."""
    steps.delete_audit.side_effect = OperationalError("DELETE", {}, Exception("db gone"))
    session = MagicMock()

    with pytest.raises(OperationalError):
        maintenance_service.run_cleanup(session, NOW)

    session.rollback.assert_called_once()
    session.commit.assert_called_once()
    steps.remind.assert_not_called()
    assert steps.audit.call_count == 1
    args, kwargs = steps.audit.call_args
    assert args[3] == AuditAction.CLEANUP_JOB_FAILED
    assert kwargs["new_data"]["partial"]["expired_invitations"] == 2
    assert kwargs["new_data"]["partial"]["purged_invitations"] == 3
    assert "db gone" in kwargs["new_data"]["error"]
