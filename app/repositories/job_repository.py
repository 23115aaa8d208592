"""Job·JobApplication·SavedJob·JobLike Repository."""

from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import apply_desc_cursor
from app.models.course import Course
from app.models.job import Job, JobApplication, JobCourse, JobLike, SavedJob


async def get_job(session: AsyncSession, job_id: int) -> Job | None:
    return await session.get(Job, job_id)


async def list_jobs(
    session: AsyncSession,
    *,
    q: str | None,
    job_types: list[str] | None,
    cursor: int | None,
    limit: int,
) -> list[Job]:
    stmt = select(Job).where(Job.is_open.is_(True))
    if q:
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(or_(Job.title.ilike(pattern), Job.description.ilike(pattern)))
    if job_types:
        stmt = stmt.where(Job.job_type.in_(job_types))
    result = await session.execute(apply_desc_cursor(stmt, Job.id, cursor, limit))
    return list(result.scalars().all())


async def list_open_jobs(session: AsyncSession) -> list[Job]:
    result = await session.execute(
        select(Job).where(Job.is_open.is_(True)).order_by(Job.id.desc())
    )
    return list(result.scalars().all())


async def add_job_courses(session: AsyncSession, job_id: int, course_ids: list[int]) -> None:
    if not course_ids:
        return
    await session.execute(
        pg_insert(JobCourse)
        .values([{"job_id": job_id, "course_id": cid} for cid in course_ids])
        .on_conflict_do_nothing(constraint="uq_job_course")
    )


async def list_required_courses(session: AsyncSession, job_id: int) -> list[Course]:
    result = await session.execute(
        select(Course)
        .join(JobCourse, JobCourse.course_id == Course.id)
        .where(JobCourse.job_id == job_id)
        .order_by(Course.title)
    )
    return list(result.scalars().all())


async def get_application(
    session: AsyncSession, job_id: int, applicant_id: int
) -> JobApplication | None:
    result = await session.execute(
        select(JobApplication).where(
            JobApplication.job_id == job_id, JobApplication.applicant_id == applicant_id
        )
    )
    return result.scalars().one_or_none()


async def get_application_by_id(
    session: AsyncSession, application_id: int
) -> JobApplication | None:
    return await session.get(JobApplication, application_id)


async def list_applications(session: AsyncSession, job_id: int) -> list[JobApplication]:
    result = await session.execute(
        select(JobApplication)
        .where(JobApplication.job_id == job_id)
        .order_by(JobApplication.created_at.desc())
    )
    return list(result.scalars().all())


async def insert_saved(session: AsyncSession, user_id: int, job_id: int) -> None:
    await session.execute(
        pg_insert(SavedJob)
        .values(user_id=user_id, job_id=job_id)
        .on_conflict_do_nothing(constraint="uq_saved_job")
    )


async def delete_saved(session: AsyncSession, user_id: int, job_id: int) -> int:
    result = await session.execute(
        delete(SavedJob).where(SavedJob.user_id == user_id, SavedJob.job_id == job_id)
    )
    return result.rowcount or 0


async def is_saved(session: AsyncSession, user_id: int, job_id: int) -> bool:
    result = await session.execute(
        select(SavedJob.id).where(SavedJob.user_id == user_id, SavedJob.job_id == job_id)
    )
    return result.first() is not None


async def list_saved(session: AsyncSession, user_id: int) -> list[Job]:
    result = await session.execute(
        select(Job)
        .join(SavedJob, SavedJob.job_id == Job.id)
        .where(SavedJob.user_id == user_id)
        .order_by(SavedJob.created_at.desc())
    )
    return list(result.scalars().all())


async def get_like(session: AsyncSession, user_id: int, job_id: int) -> JobLike | None:
    result = await session.execute(
        select(JobLike).where(JobLike.user_id == user_id, JobLike.job_id == job_id)
    )
    return result.scalars().one_or_none()


async def count_likes(session: AsyncSession, job_id: int) -> int:
    result = await session.execute(select(func.count(JobLike.id)).where(JobLike.job_id == job_id))
    return int(result.scalar_one())
