"""Soft delete 공통 로직 테스트. AsyncSession은 mock, 모델은 실제 ORM 객체."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.exceptions import ConflictError, NotFoundError
from app.core.soft_delete import exclude_deleted, only_deleted
from app.models.course import Course
from app.models.enums import AuditAction, CourseStatus
from app.services import soft_delete_service

MODULE = "app.services.soft_delete_service"


def _course(**overrides) -> Course:
    now = datetime.now(UTC)
    data = dict(
        id=1,
        code="CS-101",
        title="Intro",
        credits=3,
        status=CourseStatus.DRAFT,
        instructor_id=2,
        organization_id=3,
        is_deleted=False,
        deleted_at=None,
        created_at=now,
        updated_at=now,
    )
    data.update(overrides)
    return Course(**data)


@pytest.fixture
def audit(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    mock = AsyncMock()
    monkeypatch.setattr(f"{MODULE}.create_audit_log", mock)
    return mock


def test_exclude_deleted_adds_filter() -> None:
    from sqlalchemy import select

    sql = str(exclude_deleted(select(Course), Course))
    assert "courses.is_deleted IS false" in sql


def test_only_deleted_adds_filter() -> None:
    from sqlalchemy import select

    sql = str(only_deleted(select(Course), Course))
    assert "courses.is_deleted IS true" in sql


@pytest.mark.asyncio
async def test_soft_delete_marks_row_and_audits(session, audit) -> None:
    course = _course()
    session.get = AsyncMock(return_value=course)

    result = await soft_delete_service.soft_delete(session, Course, 1, actor_id=2, reason="dup")

    assert result.is_deleted is True
    assert result.deleted_at is not None
    action = audit.await_args.args[3]
    assert action == AuditAction.SOFT_DELETE
    assert audit.await_args.kwargs["previous_data"]["is_deleted"] is False


@pytest.mark.asyncio
async def test_soft_delete_twice_conflicts(session, audit) -> None:
    session.get = AsyncMock(return_value=_course(is_deleted=True, deleted_at=datetime.now(UTC)))
    with pytest.raises(ConflictError):
        await soft_delete_service.soft_delete(session, Course, 1)
    audit.assert_not_awaited()


@pytest.mark.asyncio
async def test_soft_delete_missing_row_404(session, audit) -> None:
    session.get = AsyncMock(return_value=None)
    with pytest.raises(NotFoundError):
        await soft_delete_service.soft_delete(session, Course, 1)


@pytest.mark.asyncio
async def test_restore_requires_deleted_row(session, audit) -> None:
    session.get = AsyncMock(return_value=_course())
    with pytest.raises(ConflictError):
        await soft_delete_service.restore(session, Course, 1)

    deleted = _course(is_deleted=True, deleted_at=datetime.now(UTC))
    session.get = AsyncMock(return_value=deleted)
    restored = await soft_delete_service.restore(session, Course, 1)
    assert restored.is_deleted is False
    assert restored.deleted_at is None
    assert audit.await_args.args[3] == AuditAction.RESTORE


@pytest.mark.asyncio
async def test_bulk_soft_delete_empty_is_noop(session, audit) -> None:
    assert await soft_delete_service.bulk_soft_delete(session, Course, []) == []
    session.execute.assert_not_awaited()


def test_purge_expired_deletes_and_audits(monkeypatch: pytest.MonkeyPatch) -> None:
    old = _course(id=5, is_deleted=True, deleted_at=datetime.now(UTC) - timedelta(days=60))
    sync_session = MagicMock()
    sync_session.execute.return_value.scalars.return_value.all.return_value = [old]
    audit_sync = MagicMock()
    monkeypatch.setattr(f"{MODULE}.create_audit_log_sync", audit_sync)

    purged = soft_delete_service.purge_expired(sync_session, Course, 30)

    assert purged == 1
    assert audit_sync.call_args.args[3] == AuditAction.HARD_DELETE
    assert sync_session.execute.call_count == 2


def test_purge_expired_nothing_to_do(monkeypatch: pytest.MonkeyPatch) -> None:
    sync_session = MagicMock()
    sync_session.execute.return_value.scalars.return_value.all.return_value = []
    assert soft_delete_service.purge_expired(sync_session, Course, 30) == 0
    sync_session.flush.assert_not_called()
