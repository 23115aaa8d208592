"""Job Service 테스트. 매칭 계산과 지원 가드."""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import BadRequestError, ConflictError, PermissionDeniedError
from app.models.enums import ApplicationStatus
from app.schemas.job import ApplicationCreate
from app.services import job_service
from app.services.job_service import compute_match

MODULE = "app.services.job_service"


def _course(course_id: int, title: str) -> SimpleNamespace:
    return SimpleNamespace(id=course_id, title=title)


def test_match_full_overlap() -> None:
    result = compute_match(1, ["Python", "SQL"], ["python", "sql", "go"], [_course(1, "DB")], {1})
    assert result.skill_match_percentage == 100.0
    assert result.course_match_percentage == 100.0
    assert result.overall_match_percentage == 100.0
    assert result.missing_skills == []
    assert result.missing_courses == []


def test_match_partial_weights_skills_70_courses_30() -> None:
    result = compute_match(
        1,
        ["Python", "SQL", "Docker", "Go"],
        ["python", "docker"],
        [_course(1, "Databases"), _course(2, "Networks")],
        {2},
    )
    assert result.skill_match_percentage == 50.0
    assert result.course_match_percentage == 50.0
    assert result.overall_match_percentage == 50.0
    assert result.missing_skills == ["SQL", "Go"]
    assert result.missing_courses == ["Databases"]


def test_match_nothing_required_counts_as_zero() -> None:
    result = compute_match(1, [], ["python"], [], set())
    assert result.skill_match_percentage == 0.0
    assert result.course_match_percentage == 0.0
    assert result.overall_match_percentage == 0.0


def test_match_rounds_to_two_decimals() -> None:
    result = compute_match(1, ["a", "b", "c"], ["a"], [], set())
    assert result.skill_match_percentage == 33.33
    assert result.overall_match_percentage == 23.33


@pytest.fixture
def job_repos(monkeypatch: pytest.MonkeyPatch, patch_transaction):
    patch_transaction(MODULE)
    mocks = SimpleNamespace(
        get_job=AsyncMock(),
        get_application=AsyncMock(return_value=None),
        get_application_by_id=AsyncMock(),
        notify=AsyncMock(),
    )
    monkeypatch.setattr(f"{MODULE}.job_repository.get_job", mocks.get_job)
    monkeypatch.setattr(f"{MODULE}.job_repository.get_application", mocks.get_application)
    monkeypatch.setattr(
        f"{MODULE}.job_repository.get_application_by_id", mocks.get_application_by_id
    )
    monkeypatch.setattr(f"{MODULE}.create_notification", mocks.notify)
    return mocks


def _job(**overrides) -> SimpleNamespace:
    data = {"id": 5, "owner_id": 1, "is_open": True, "title": "TA"}
    data.update(overrides)
    return SimpleNamespace(**data)


@pytest.mark.asyncio
async def test_apply_to_own_job_400(job_repos) -> None:
    job_repos.get_job.return_value = _job(owner_id=2)
    with pytest.raises(BadRequestError):
        await job_service.apply(2, 5, ApplicationCreate())


@pytest.mark.asyncio
async def test_apply_to_closed_job_400(job_repos) -> None:
    job_repos.get_job.return_value = _job(is_open=False)
    with pytest.raises(BadRequestError):
        await job_service.apply(2, 5, ApplicationCreate())


@pytest.mark.asyncio
async def test_apply_twice_409(job_repos) -> None:
    job_repos.get_job.return_value = _job()
    job_repos.get_application.return_value = SimpleNamespace(id=1)
    with pytest.raises(ConflictError):
        await job_service.apply(2, 5, ApplicationCreate())
    job_repos.notify.assert_not_awaited()


@pytest.mark.asyncio
async def test_applicant_may_only_withdraw(job_repos) -> None:
    application = SimpleNamespace(
        id=7,
        job_id=5,
        applicant_id=2,
        status=ApplicationStatus.PENDING,
        cover_letter=None,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )
    job_repos.get_application_by_id.return_value = application
    job_repos.get_job.return_value = _job(owner_id=1)

    with pytest.raises(PermissionDeniedError):
        await job_service.update_application_status(2, 7, ApplicationStatus.ACCEPTED)

    result = await job_service.update_application_status(2, 7, ApplicationStatus.WITHDRAWN)
    assert result.status == ApplicationStatus.WITHDRAWN
