"""Course·CourseApproval·Enrollment Repository."""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import apply_desc_cursor
from app.core.soft_delete import exclude_deleted, only_deleted
from app.models.course import Course, CourseApproval, Enrollment
from app.models.enums import CourseStatus, EnrollmentStatus


async def get_course(
    session: AsyncSession,
    course_id: int,
    *,
    include_deleted: bool = False,
    for_update: bool = False,
) -> Course | None:
    stmt = select(Course).where(Course.id == course_id)
    if not include_deleted:
        stmt = exclude_deleted(stmt, Course)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def list_published(
    session: AsyncSession,
    *,
    faculty_id: int | None,
    search: str | None,
    cursor: int | None,
    limit: int,
) -> list[Course]:
    stmt = exclude_deleted(
        select(Course).where(Course.status == CourseStatus.PUBLISHED), Course
    )
    if faculty_id is not None:
        stmt = stmt.where(Course.faculty_id == faculty_id)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Course.title.ilike(pattern), Course.code.ilike(pattern)))
    stmt = apply_desc_cursor(stmt, Course.id, cursor, limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_teaching(session: AsyncSession, user_id: int) -> list[Course]:
    stmt = exclude_deleted(select(Course).where(Course.instructor_id == user_id), Course)
    result = await session.execute(stmt.order_by(Course.created_at.desc()))
    return list(result.scalars().all())


async def list_enrolled(
    session: AsyncSession,
    user_id: int,
    statuses: tuple[str, ...] = (EnrollmentStatus.ENROLLED, EnrollmentStatus.COMPLETED),
) -> list[Course]:
    stmt = exclude_deleted(
        select(Course)
        .join(Enrollment, Enrollment.course_id == Course.id)
        .where(Enrollment.student_id == user_id, Enrollment.status.in_(statuses)),
        Course,
    )
    result = await session.execute(stmt.order_by(Enrollment.enrolled_at.desc()))
    return list(result.scalars().all())


async def get_courses_by_ids(session: AsyncSession, course_ids: list[int]) -> list[Course]:
    if not course_ids:
        return []
    result = await session.execute(select(Course).where(Course.id.in_(course_ids)))
    return list(result.scalars().all())


async def get_under_review_approval(
    session: AsyncSession, course_id: int
) -> CourseApproval | None:
    result = await session.execute(
        select(CourseApproval).where(
            CourseApproval.course_id == course_id,
            CourseApproval.status == CourseStatus.UNDER_REVIEW,
        )
    )
    return result.scalars().first()


async def get_approval(
    session: AsyncSession, approval_id: int, *, for_update: bool = False
) -> CourseApproval | None:
    stmt = select(CourseApproval).where(CourseApproval.id == approval_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def list_approvals_for_reviewer(
    session: AsyncSession,
    reviewer_id: int,
    statuses: list[str],
    offset: int,
    limit: int,
) -> tuple[list[CourseApproval], int]:
    """삭제되지 않은 과목의 심사 건. 먼저 제출된 순."""
    stmt = (
        select(CourseApproval)
        .join(Course, Course.id == CourseApproval.course_id)
        .where(
            CourseApproval.reviewer_id == reviewer_id,
            CourseApproval.status.in_(statuses),
            Course.is_deleted.is_(False),
        )
    )
    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()
    rows = await session.execute(
        stmt.order_by(CourseApproval.submitted_at.asc(), CourseApproval.id.asc())
        .offset(offset)
        .limit(limit)
    )
    return list(rows.scalars().all()), int(total)


async def get_enrollment(
    session: AsyncSession, course_id: int, student_id: int
) -> Enrollment | None:
    result = await session.execute(
        select(Enrollment).where(
            Enrollment.course_id == course_id, Enrollment.student_id == student_id
        )
    )
    return result.scalars().one_or_none()


async def get_enrollment_by_id(session: AsyncSession, enrollment_id: int) -> Enrollment | None:
    return await session.get(Enrollment, enrollment_id)


async def count_deleted(session: AsyncSession) -> int:
    result = await session.execute(
        only_deleted(select(func.count(Course.id)), Course)
    )
    return int(result.scalar_one())
