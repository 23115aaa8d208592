"""
Job Service. 채용 공고, 지원, 저장/좋아요, 학생-공고 매칭.

매칭 점수: overall = 0.7 * 스킬 일치율 + 0.3 * 과목 일치율.
요구 스킬/과목이 없으면 해당 일치율은 0.
"""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.pagination import clamp_limit, split_cursor_page
from app.models.course import Course
from app.models.enums import ApplicationStatus, JobType, NotificationType, UserRole, parse_enum
from app.models.job import Job, JobApplication, JobLike
from app.repositories import course_repository, job_repository, user_repository
from app.schemas.common import CursorPage, ToggleResponse
from app.schemas.job import (
    ApplicationCreate,
    ApplicationResponse,
    JobCreate,
    JobMatch,
    JobMatchResult,
    JobResponse,
    SavedStatus,
)
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)

JOB_CREATOR_ROLES = frozenset(
    {UserRole.INSTITUTION, UserRole.ORGANIZATION, UserRole.PROFESSOR, UserRole.ADMIN}
)
SKILL_WEIGHT = 0.7
COURSE_WEIGHT = 0.3


def compute_match(
    job_id: int,
    required_skills: Iterable[str],
    user_skills: Iterable[str],
    required_courses: Iterable[Course],
    enrolled_course_ids: set[int],
) -> JobMatch:
    required = [s for s in required_skills if s]
    owned = {s.lower() for s in user_skills}
    missing_skills = [s for s in required if s.lower() not in owned]
    skill_pct = (len(required) - len(missing_skills)) / len(required) * 100 if required else 0.0

    courses = list(required_courses)
    missing_courses = [c.title for c in courses if c.id not in enrolled_course_ids]
    course_pct = (len(courses) - len(missing_courses)) / len(courses) * 100 if courses else 0.0

    return JobMatch(
        job_id=job_id,
        skill_match_percentage=round(skill_pct, 2),
        course_match_percentage=round(course_pct, 2),
        overall_match_percentage=round(skill_pct * SKILL_WEIGHT + course_pct * COURSE_WEIGHT, 2),
        missing_skills=missing_skills,
        missing_courses=missing_courses,
    )


async def _get_job_or_404(session: AsyncSession, job_id: int) -> Job:
    job = await job_repository.get_job(session, job_id)
    if job is None:
        raise NotFoundError("Job not found")
    return job


async def create_job(user_id: int, payload: JobCreate) -> JobResponse:
    async with transaction() as session:
        user = await user_repository.get_by_id(session, user_id)
        if user is None or user.role not in {str(r) for r in JOB_CREATOR_ROLES}:
            raise PermissionDeniedError("Your role cannot post jobs")
        data = payload.model_dump(exclude={"required_course_ids"})
        job = Job(owner_id=user_id, **data)
        session.add(job)
        await session.flush()
        course_ids = sorted(set(payload.required_course_ids or []))
        if course_ids:
            found = await course_repository.get_courses_by_ids(session, course_ids)
            if len(found) != len(course_ids):
                raise BadRequestError("Unknown required course", code="UNKNOWN_COURSE")
            await job_repository.add_job_courses(session, job.id, course_ids)
        logger.info("Job %s created by user %s", job.id, user_id)
        return JobResponse.model_validate(job)


async def list_jobs(
    session: AsyncSession,
    *,
    q: str | None = None,
    types: list[str] | None = None,
    cursor: int | None = None,
    limit: int | None = None,
) -> CursorPage[JobResponse]:
    """열린 공고만. types는 대소문자 무시, 잘못된 값은 무시."""
    parsed = [str(p) for p in (parse_enum(JobType, t) for t in types or []) if p is not None]
    size = clamp_limit(limit)
    rows = await job_repository.list_jobs(
        session, q=q, job_types=parsed or None, cursor=cursor, limit=size
    )
    items, next_cursor = split_cursor_page(rows, size)
    return CursorPage[JobResponse](
        items=[JobResponse.model_validate(j) for j in items], next_cursor=next_cursor
    )


async def get_job(session: AsyncSession, job_id: int) -> JobResponse:
    return JobResponse.model_validate(await _get_job_or_404(session, job_id))


async def delete_job(user_id: int, job_id: int) -> None:
    async with transaction() as session:
        job = await _get_job_or_404(session, job_id)
        if job.owner_id != user_id:
            user = await user_repository.get_by_id(session, user_id)
            if user is None or user.role != UserRole.ADMIN:
                raise PermissionDeniedError("Only the owner can delete this job")
        await session.delete(job)


async def apply(user_id: int, job_id: int, payload: ApplicationCreate) -> ApplicationResponse:
    async with transaction() as session:
        job = await _get_job_or_404(session, job_id)
        if job.owner_id == user_id:
            raise BadRequestError("You cannot apply to your own job")
        if not job.is_open:
            raise BadRequestError("Job is closed")
        if await job_repository.get_application(session, job_id, user_id) is not None:
            raise ConflictError("Already applied", code="ALREADY_APPLIED")
        application = JobApplication(
            job_id=job_id,
            applicant_id=user_id,
            status=ApplicationStatus.PENDING,
            cover_letter=payload.cover_letter,
        )
        session.add(application)
        await session.flush()
        await create_notification(
            session,
            NotificationType.JOB_APPLICATION,
            job.owner_id,
            issuer_id=user_id,
            job_id=job.id,
            title=f"New application: {job.title}",
        )
        return ApplicationResponse.model_validate(application)


async def list_applications(
    session: AsyncSession, user_id: int, job_id: int
) -> list[ApplicationResponse]:
    job = await _get_job_or_404(session, job_id)
    if job.owner_id != user_id:
        raise PermissionDeniedError("Only the owner can view applications")
    rows = await job_repository.list_applications(session, job_id)
    return [ApplicationResponse.model_validate(a) for a in rows]


async def update_application_status(
    user_id: int, application_id: int, status: ApplicationStatus
) -> ApplicationResponse:
    """공고 소유자는 모든 상태로, 지원자는 WITHDRAWN으로만."""
    async with transaction() as session:
        application = await job_repository.get_application_by_id(session, application_id)
        if application is None:
            raise NotFoundError("Application not found")
        job = await _get_job_or_404(session, application.job_id)
        is_owner = job.owner_id == user_id
        is_withdrawal = (
            application.applicant_id == user_id and status == ApplicationStatus.WITHDRAWN
        )
        if not (is_owner or is_withdrawal):
            raise PermissionDeniedError("You cannot change this application")
        application.status = status
        await session.flush()
        return ApplicationResponse.model_validate(application)


async def save_job(user_id: int, job_id: int) -> SavedStatus:
    async with transaction() as session:
        await _get_job_or_404(session, job_id)
        await job_repository.insert_saved(session, user_id, job_id)
        return SavedStatus(is_saved=True)


async def unsave_job(user_id: int, job_id: int) -> SavedStatus:
    async with transaction() as session:
        await job_repository.delete_saved(session, user_id, job_id)
        return SavedStatus(is_saved=False)


async def get_saved_status(session: AsyncSession, user_id: int, job_id: int) -> SavedStatus:
    return SavedStatus(is_saved=await job_repository.is_saved(session, user_id, job_id))


async def list_saved_jobs(session: AsyncSession, user_id: int) -> list[JobResponse]:
    rows = await job_repository.list_saved(session, user_id)
    return [JobResponse.model_validate(j) for j in rows]


async def get_like_info(session: AsyncSession, user_id: int, job_id: int) -> ToggleResponse:
    await _get_job_or_404(session, job_id)
    liked = await job_repository.get_like(session, user_id, job_id) is not None
    return ToggleResponse(active=liked, count=await job_repository.count_likes(session, job_id))


async def like_job(user_id: int, job_id: int) -> ToggleResponse:
    async with transaction() as session:
        await _get_job_or_404(session, job_id)
        if await job_repository.get_like(session, user_id, job_id) is None:
            session.add(JobLike(user_id=user_id, job_id=job_id))
            await session.flush()
        return ToggleResponse(active=True, count=await job_repository.count_likes(session, job_id))


async def unlike_job(user_id: int, job_id: int) -> ToggleResponse:
    async with transaction() as session:
        like = await job_repository.get_like(session, user_id, job_id)
        if like is not None:
            await session.delete(like)
            await session.flush()
        return ToggleResponse(active=False, count=await job_repository.count_likes(session, job_id))


async def _match_inputs(session: AsyncSession, user_id: int) -> tuple[list[str], set[int]]:
    skills = await user_repository.get_skill_names(session, user_id)
    enrolled = await course_repository.list_enrolled(session, user_id)
    return skills, {c.id for c in enrolled}


async def calculate_job_match(session: AsyncSession, user_id: int, job_id: int) -> JobMatch:
    job = await _get_job_or_404(session, job_id)
    skills, enrolled_ids = await _match_inputs(session, user_id)
    courses = await job_repository.list_required_courses(session, job.id)
    return compute_match(job.id, job.required_skills or [], skills, courses, enrolled_ids)


async def list_job_matches(
    session: AsyncSession, user_id: int, min_percentage: float = 0.0
) -> list[JobMatchResult]:
    """열린 공고 전체를 점수화해 overall 내림차순."""
    skills, enrolled_ids = await _match_inputs(session, user_id)
    results: list[JobMatchResult] = []
    for job in await job_repository.list_open_jobs(session):
        courses = await job_repository.list_required_courses(session, job.id)
        match = compute_match(job.id, job.required_skills or [], skills, courses, enrolled_ids)
        if match.overall_match_percentage < min_percentage:
            continue
        results.append(
            JobMatchResult(**match.model_dump(), job=JobResponse.model_validate(job))
        )
    results.sort(key=lambda r: r.overall_match_percentage, reverse=True)
    return results
