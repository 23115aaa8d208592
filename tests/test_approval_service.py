"""Approval Service 테스트. 결정값 검증과 심사 가드."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    UnavailableError,
)
from app.models.course import Course, CourseApproval
from app.models.enums import AuditAction, CourseStatus
from app.schemas.course import ApprovalReview
from app.services import approval_service

MODULE = "app.services.approval_service"


def test_validate_decision_rejects_non_decision_status() -> None:
    with pytest.raises(BadRequestError) as exc:
        approval_service.validate_decision(ApprovalReview(decision=CourseStatus.DRAFT))
    assert exc.value.code == "INVALID_DECISION"


def test_reject_requires_comments() -> None:
    with pytest.raises(BadRequestError):
        approval_service.validate_decision(
            ApprovalReview(decision=CourseStatus.REJECTED, comments="   ")
        )
    approval_service.validate_decision(
        ApprovalReview(decision=CourseStatus.REJECTED, comments="Outdated syllabus")
    )


def test_needs_revision_accepts_comments_or_required_changes() -> None:
    with pytest.raises(BadRequestError):
        approval_service.validate_decision(ApprovalReview(decision=CourseStatus.NEEDS_REVISION))
    approval_service.validate_decision(
        ApprovalReview(decision=CourseStatus.NEEDS_REVISION, required_changes=["Add week 3"])
    )


def test_publish_needs_nothing_extra() -> None:
    approval_service.validate_decision(ApprovalReview(decision=CourseStatus.PUBLISHED))


def _course() -> Course:
    now = datetime.now(UTC)
    return Course(
        id=3,
        code="CS-101",
        title="Intro",
        credits=3,
        status=CourseStatus.UNDER_REVIEW,
        instructor_id=20,
        organization_id=1,
        is_deleted=False,
        created_at=now,
        updated_at=now,
    )


def _approval(status=CourseStatus.UNDER_REVIEW, reviewer_id=30) -> CourseApproval:
    return CourseApproval(
        id=8,
        course_id=3,
        submitted_by_id=20,
        reviewer_id=reviewer_id,
        status=status,
        submitted_at=datetime.now(UTC),
    )


@pytest.fixture
def review_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_approval=AsyncMock(),
        get_course=AsyncMock(),
        notify=AsyncMock(),
        audit=AsyncMock(),
    )
    monkeypatch.setattr(f"{MODULE}.course_repository.get_approval", mocks.get_approval)
    monkeypatch.setattr(f"{MODULE}.course_repository.get_course", mocks.get_course)
    monkeypatch.setattr(f"{MODULE}.create_notification", mocks.notify)
    monkeypatch.setattr(f"{MODULE}.create_audit_log", mocks.audit)
    return mocks


@pytest.mark.asyncio
async def test_review_only_assigned_reviewer(review_repos) -> None:
    review_repos.get_approval.return_value = _approval()
    review_repos.get_course.return_value = _course()
    with pytest.raises(PermissionDeniedError):
        await approval_service.review(99, 8, ApprovalReview(decision=CourseStatus.PUBLISHED))


@pytest.mark.asyncio
async def test_review_twice_conflicts(review_repos) -> None:
    review_repos.get_approval.return_value = _approval(status=CourseStatus.PUBLISHED)
    review_repos.get_course.return_value = _course()
    with pytest.raises(ConflictError):
        await approval_service.review(30, 8, ApprovalReview(decision=CourseStatus.PUBLISHED))


@pytest.mark.asyncio
async def test_review_publishes_course(review_repos) -> None:
    course = _course()
    review_repos.get_approval.return_value = _approval()
    review_repos.get_course.return_value = course

    result = await approval_service.review(
        30, 8, ApprovalReview(decision=CourseStatus.PUBLISHED, overall_score=90)
    )

    assert result.status == CourseStatus.PUBLISHED
    assert result.overall_score == 90
    assert course.status == CourseStatus.PUBLISHED
    review_repos.notify.assert_awaited_once()
    assert review_repos.audit.await_args.args[3] == AuditAction.APPROVE


@pytest.mark.asyncio
async def test_invalid_decision_fails_before_db(review_repos) -> None:
    with pytest.raises(BadRequestError):
        await approval_service.review(30, 8, ApprovalReview(decision=CourseStatus.REJECTED))
    review_repos.get_approval.assert_not_awaited()


@pytest.fixture
def submit_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction, session):
    patch_transaction(MODULE)

    async def _assign_id() -> None:
        added = session.add.call_args
        if added is not None and added.args[0].id is None:
            added.args[0].id = 8

    session.flush = AsyncMock(side_effect=_assign_id)
    mocks = SimpleNamespace(
        get_course=AsyncMock(),
        get_under_review=AsyncMock(return_value=None),
        find_reviewer=AsyncMock(return_value=SimpleNamespace(user_id=30)),
        get_member=AsyncMock(return_value=None),
        notify=AsyncMock(),
        audit=AsyncMock(),
    )
    monkeypatch.setattr(f"{MODULE}.course_repository.get_course", mocks.get_course)
    monkeypatch.setattr(
        f"{MODULE}.course_repository.get_under_review_approval", mocks.get_under_review
    )
    monkeypatch.setattr(f"{MODULE}.organization_repository.find_reviewer", mocks.find_reviewer)
    monkeypatch.setattr(f"{MODULE}.organization_repository.get_member", mocks.get_member)
    monkeypatch.setattr(f"{MODULE}.create_notification", mocks.notify)
    monkeypatch.setattr(f"{MODULE}.create_audit_log", mocks.audit)
    return mocks


def _draft_course(status=CourseStatus.DRAFT) -> Course:
    course = _course()
    course.status = status
    return course


@pytest.mark.asyncio
async def test_submit_assigns_reviewer_and_notifies(submit_repos, session) -> None:
    course = _draft_course()
    submit_repos.get_course.return_value = course

    result = await approval_service.submit_for_approval(20, 3)

    assert course.status == CourseStatus.UNDER_REVIEW
    assert result.reviewer_id == 30
    assert result.status == CourseStatus.UNDER_REVIEW
    assert submit_repos.find_reviewer.await_args.kwargs["exclude_user_id"] == 20
    submit_repos.notify.assert_awaited_once()
    assert submit_repos.notify.await_args.args[2] == 30
    assert submit_repos.audit.await_args.args[3] == AuditAction.SUBMIT_APPROVAL


@pytest.mark.asyncio
async def test_submit_resubmits_after_revision(submit_repos) -> None:
    course = _draft_course(CourseStatus.NEEDS_REVISION)
    submit_repos.get_course.return_value = course
    await approval_service.submit_for_approval(20, 3)
    assert course.status == CourseStatus.UNDER_REVIEW


@pytest.mark.asyncio
async def test_submit_without_reviewer_503(submit_repos) -> None:
    course = _draft_course()
    submit_repos.get_course.return_value = course
    submit_repos.find_reviewer.return_value = None

    with pytest.raises(UnavailableError) as exc:
        await approval_service.submit_for_approval(20, 3)

    assert exc.value.status_code == 503
    assert exc.value.code == "NO_REVIEWER"
    assert course.status == CourseStatus.DRAFT


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [CourseStatus.PUBLISHED, CourseStatus.UNDER_REVIEW])
async def test_submit_rejects_non_submittable_status(submit_repos, status) -> None:
    submit_repos.get_course.return_value = _draft_course(status)
    with pytest.raises(BadRequestError) as exc:
        await approval_service.submit_for_approval(20, 3)
    assert exc.value.code == "INVALID_STATUS"


@pytest.mark.asyncio
async def test_submit_while_review_open_conflicts(submit_repos) -> None:
    submit_repos.get_course.return_value = _draft_course(CourseStatus.REJECTED)
    submit_repos.get_under_review.return_value = _approval()
    with pytest.raises(ConflictError) as exc:
        await approval_service.submit_for_approval(20, 3)
    assert exc.value.code == "ALREADY_UNDER_REVIEW"
    submit_repos.find_reviewer.assert_not_awaited()


@pytest.mark.asyncio
async def test_submit_by_stranger_forbidden(submit_repos) -> None:
    submit_repos.get_course.return_value = _draft_course()
    with pytest.raises(PermissionDeniedError):
        await approval_service.submit_for_approval(77, 3)


@pytest.mark.asyncio
async def test_submit_missing_course_404(submit_repos) -> None:
    submit_repos.get_course.return_value = None
    with pytest.raises(NotFoundError):
        await approval_service.submit_for_approval(20, 3)
