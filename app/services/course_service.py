"""Course Service. 과목 CRUD, soft delete/복구, 수강 신청."""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from app.core.pagination import clamp_limit, split_cursor_page
from app.models.course import Course, Enrollment
from app.models.enums import (
    REVIEWER_ROLES,
    AuditAction,
    CourseStatus,
    EnrollmentStatus,
    MemberRole,
    NotificationType,
)
from app.repositories import course_repository, organization_repository
from app.schemas.common import CursorPage
from app.schemas.course import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    EnrollmentResponse,
    MyCoursesResponse,
)
from app.services import soft_delete_service
from app.services.audit_service import create_audit_log, snapshot
from app.services.notification_service import create_notification
from app.services.organization_service import can_manage_faculty

logger = logging.getLogger(__name__)

# 심사 중/게시된 과목은 식별 필드(code, title) 변경 불가.
_LOCKED_STATUSES = frozenset({CourseStatus.PUBLISHED, CourseStatus.UNDER_REVIEW})
_LOCKED_FIELDS = ("code", "title")


async def is_course_admin(session: AsyncSession, user_id: int, course: Course) -> bool:
    """과목 소유 조직의 OWNER/ADMIN."""
    member = await organization_repository.get_member(session, user_id, course.organization_id)
    return member is not None and member.role in {str(r) for r in REVIEWER_ROLES}


async def _ensure_instructor_or_admin(session: AsyncSession, user_id: int, course: Course) -> None:
    if course.instructor_id == user_id:
        return
    if not await is_course_admin(session, user_id, course):
        raise PermissionDeniedError("You do not have permission for this course")


async def create_course(user_id: int, payload: CourseCreate) -> CourseResponse:
    """학부 소속 교수 또는 학부 관리자만. DRAFT로 생성, 생성자가 담당 교수."""
    async with transaction() as session:
        faculty = await organization_repository.get_faculty(session, payload.faculty_id)
        if faculty is None or not faculty.is_active:
            raise NotFoundError("Faculty not found")
        member = await organization_repository.get_member(
            session, user_id, faculty.organization_id
        )
        is_faculty_professor = (
            member is not None
            and member.role == MemberRole.PROFESSOR
            and member.faculty_id == faculty.id
        )
        if not is_faculty_professor and not await can_manage_faculty(session, user_id, faculty):
            raise PermissionDeniedError("Only faculty professors or managers can create courses")

        course = Course(
            **payload.model_dump(),
            status=CourseStatus.DRAFT,
            instructor_id=user_id,
            organization_id=faculty.organization_id,
        )
        session.add(course)
        await session.flush()
        await create_audit_log(
            session, "courses", course.id, AuditAction.CREATE,
            actor_id=user_id, new_data=snapshot(course),
        )
        return CourseResponse.model_validate(course)


async def update_course(user_id: int, course_id: int, payload: CourseUpdate) -> CourseResponse:
    async with transaction() as session:
        course = await course_repository.get_course(session, course_id, for_update=True)
        if course is None:
            raise NotFoundError("Course not found")
        if course.instructor_id != user_id:
            raise PermissionDeniedError("Only the instructor can edit this course")
        changes = payload.model_dump(exclude_unset=True)
        if course.status in _LOCKED_STATUSES:
            locked = [f for f in _LOCKED_FIELDS if f in changes and changes[f] != getattr(course, f)]
            if locked:
                raise ConflictError(
                    f"Cannot change {', '.join(locked)} while course is {course.status}",
                    code="COURSE_LOCKED",
                )
        before = snapshot(course)
        for key, value in changes.items():
            setattr(course, key, value)
        await session.flush()
        await create_audit_log(
            session, "courses", course.id, AuditAction.UPDATE,
            actor_id=user_id, previous_data=before, new_data=snapshot(course),
        )
        return CourseResponse.model_validate(course)


async def get_course(session: AsyncSession, course_id: int) -> CourseResponse:
    course = await course_repository.get_course(session, course_id)
    if course is None:
        raise NotFoundError("Course not found")
    return CourseResponse.model_validate(course)


async def list_courses(
    session: AsyncSession,
    *,
    faculty_id: int | None = None,
    search: str | None = None,
    cursor: int | None = None,
    limit: int | None = None,
) -> CursorPage[CourseResponse]:
    """게시된 과목만."""
    size = clamp_limit(limit)
    rows = await course_repository.list_published(
        session, faculty_id=faculty_id, search=search, cursor=cursor, limit=size
    )
    items, next_cursor = split_cursor_page(rows, size)
    return CursorPage[CourseResponse](
        items=[CourseResponse.model_validate(c) for c in items], next_cursor=next_cursor
    )


async def list_my_courses(session: AsyncSession, user_id: int) -> MyCoursesResponse:
    teaching = await course_repository.list_teaching(session, user_id)
    enrolled = await course_repository.list_enrolled(session, user_id)
    return MyCoursesResponse(
        teaching=[CourseResponse.model_validate(c) for c in teaching],
        enrolled=[CourseResponse.model_validate(c) for c in enrolled],
    )


async def delete_course(user_id: int, course_id: int, reason: str | None = None) -> None:
    async with transaction() as session:
        course = await course_repository.get_course(session, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        await _ensure_instructor_or_admin(session, user_id, course)
        await soft_delete_service.soft_delete(
            session, Course, course_id, actor_id=user_id, reason=reason
        )


async def restore_course(user_id: int, course_id: int, reason: str | None = None) -> CourseResponse:
    async with transaction() as session:
        course = await course_repository.get_course(session, course_id, include_deleted=True)
        if course is None:
            raise NotFoundError("Course not found")
        await _ensure_instructor_or_admin(session, user_id, course)
        restored = await soft_delete_service.restore(
            session, Course, course_id, actor_id=user_id, reason=reason
        )
        return CourseResponse.model_validate(restored)


async def enroll(user_id: int, course_id: int) -> EnrollmentResponse:
    """
    게시된 과목만(아니면 400), 본인 과목 수강 불가(400), 중복 409.
    DROPPED였던 수강은 ENROLLED로 재활성화. 담당 교수에게 알림.
    """
    async with transaction() as session:
        course = await course_repository.get_course(session, course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if course.status != CourseStatus.PUBLISHED:
            raise BadRequestError("Course is not open for enrollment")
        if course.instructor_id == user_id:
            raise BadRequestError("Instructors cannot enroll in their own course")
        now = datetime.now(UTC)
        enrollment = await course_repository.get_enrollment(session, course_id, user_id)
        if enrollment is not None:
            if enrollment.status != EnrollmentStatus.DROPPED:
                raise ConflictError("Already enrolled", code="ALREADY_ENROLLED")
            enrollment.status = EnrollmentStatus.ENROLLED
            enrollment.enrolled_at = now
            enrollment.completed_at = None
        else:
            enrollment = Enrollment(
                course_id=course_id,
                student_id=user_id,
                status=EnrollmentStatus.ENROLLED,
                enrolled_at=now,
            )
            session.add(enrollment)
        await session.flush()
        await create_notification(
            session,
            NotificationType.COURSE_ENROLLMENT,
            course.instructor_id,
            issuer_id=user_id,
            course_id=course.id,
        )
        return EnrollmentResponse.model_validate(enrollment)


async def update_enrollment_status(
    user_id: int, enrollment_id: int, status: EnrollmentStatus
) -> EnrollmentResponse:
    """담당 교수만."""
    async with transaction() as session:
        enrollment = await course_repository.get_enrollment_by_id(session, enrollment_id)
        if enrollment is None:
            raise NotFoundError("Enrollment not found")
        course = await course_repository.get_course(session, enrollment.course_id)
        if course is None:
            raise NotFoundError("Course not found")
        if course.instructor_id != user_id:
            raise PermissionDeniedError("Only the instructor can update enrollments")
        enrollment.status = status
        enrollment.completed_at = (
            datetime.now(UTC) if status == EnrollmentStatus.COMPLETED else None
        )
        await session.flush()
        return EnrollmentResponse.model_validate(enrollment)


async def drop_enrollment(user_id: int, course_id: int) -> EnrollmentResponse:
    async with transaction() as session:
        enrollment = await course_repository.get_enrollment(session, course_id, user_id)
        if enrollment is None or enrollment.status == EnrollmentStatus.DROPPED:
            raise NotFoundError("Enrollment not found")
        enrollment.status = EnrollmentStatus.DROPPED
        await session.flush()
        return EnrollmentResponse.model_validate(enrollment)
