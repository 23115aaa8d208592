"""Celery 태스크 테스트. 동기 세션·서비스는 mock, 락 해제 보장 확인."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

from app.schemas.maintenance import CleanupResult
from app.services import tasks

MODULE = "app.services.tasks"


@pytest.fixture
def sync_session(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    session = MagicMock()

    @contextmanager
    def _session():
        yield session

    monkeypatch.setattr(f"{MODULE}.get_sync_session", _session)
    return session


@pytest.fixture
def release(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    mock = MagicMock()
    monkeypatch.setattr(f"{MODULE}.release_job_lock_sync", mock)
    return mock


def test_cleanup_task_returns_result_and_releases_lock(sync_session, release, monkeypatch) -> None:
    result = CleanupResult(expired_invitations=2)
    run_cleanup = MagicMock(return_value=result)
    monkeypatch.setattr(f"{MODULE}.maintenance_service.run_cleanup", run_cleanup)

    assert tasks.run_cleanup_task(lock_token="tok")["expired_invitations"] == 2
    run_cleanup.assert_called_once_with(sync_session)
    release.assert_called_once_with("cleanup", "tok")


def test_cleanup_task_releases_lock_on_failure(sync_session, release, monkeypatch) -> None:
    monkeypatch.setattr(
        f"{MODULE}.maintenance_service.run_cleanup", MagicMock(side_effect=ValueError("bad row"))
    )
    with pytest.raises(ValueError):
        tasks.run_cleanup_task(lock_token="tok")
    release.assert_called_once_with("cleanup", "tok")


def test_event_reminders_task_merges_reset_count(sync_session, release, monkeypatch) -> None:
    monkeypatch.setattr(
        f"{MODULE}.event_service.send_event_reminders",
        MagicMock(return_value={"events": 1, "notifications": 4}),
    )
    monkeypatch.setattr(f"{MODULE}.event_service.reset_event_reminders", MagicMock(return_value=2))

    assert tasks.send_event_reminders_task() == {"events": 1, "notifications": 4, "reset": 2}
    release.assert_called_once_with("event_reminders", None)
