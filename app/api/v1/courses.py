"""Courses API. 과목 CRUD·soft delete/복구, 심사 제출, 수강 신청."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage
from app.schemas.course import (
    ApprovalResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
    MyCoursesResponse,
    SoftDeleteRequest,
)
from app.services import approval_service, course_service

router = APIRouter(prefix="/courses", tags=["courses"])


@router.post("", response_model=CourseResponse, status_code=201)
async def post_course(
    payload: CourseCreate,
    current_user: User = Depends(get_current_active_user),
) -> CourseResponse:
    return await course_service.create_course(current_user.id, payload)


@router.get("", response_model=CursorPage[CourseResponse])
async def get_courses(
    faculty_id: int | None = Query(None),
    search: str | None = Query(None, max_length=100),
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[CourseResponse]:
    """게시(PUBLISHED)된 과목 목록."""
    return await course_service.list_courses(
        session, faculty_id=faculty_id, search=search, cursor=cursor, limit=limit
    )


@router.get("/mine", response_model=MyCoursesResponse)
async def get_my_courses(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> MyCoursesResponse:
    return await course_service.list_my_courses(session, current_user.id)


@router.get("/{course_id}", response_model=CourseResponse)
async def get_course(course_id: int, session: AsyncSession = Depends(get_db)) -> CourseResponse:
    return await course_service.get_course(session, course_id)


@router.patch("/{course_id}", response_model=CourseResponse)
async def patch_course(
    course_id: int,
    payload: CourseUpdate,
    current_user: User = Depends(get_current_active_user),
) -> CourseResponse:
    return await course_service.update_course(current_user.id, course_id, payload)


@router.delete("/{course_id}", status_code=204)
async def delete_course(
    course_id: int,
    payload: SoftDeleteRequest | None = None,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await course_service.delete_course(
        current_user.id, course_id, payload.reason if payload else None
    )


@router.post("/{course_id}/restore", response_model=CourseResponse)
async def post_restore_course(
    course_id: int,
    payload: SoftDeleteRequest | None = None,
    current_user: User = Depends(get_current_active_user),
) -> CourseResponse:
    return await course_service.restore_course(
        current_user.id, course_id, payload.reason if payload else None
    )


@router.post("/{course_id}/submit", response_model=ApprovalResponse, status_code=201)
async def post_submit_for_approval(
    course_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ApprovalResponse:
    """심사 제출. 심사자는 조직 OWNER/ADMIN 중 자동 배정."""
    return await approval_service.submit_for_approval(current_user.id, course_id)


@router.post("/{course_id}/enroll", response_model=EnrollmentResponse, status_code=201)
async def post_enroll(
    course_id: int,
    current_user: User = Depends(get_current_active_user),
) -> EnrollmentResponse:
    return await course_service.enroll(current_user.id, course_id)


@router.delete("/{course_id}/enroll", response_model=EnrollmentResponse)
async def delete_enroll(
    course_id: int,
    current_user: User = Depends(get_current_active_user),
) -> EnrollmentResponse:
    return await course_service.drop_enrollment(current_user.id, course_id)


@router.patch("/enrollments/{enrollment_id}", response_model=EnrollmentResponse)
async def patch_enrollment(
    enrollment_id: int,
    payload: EnrollmentStatusUpdate,
    current_user: User = Depends(get_current_active_user),
) -> EnrollmentResponse:
    return await course_service.update_enrollment_status(
        current_user.id, enrollment_id, payload.status
    )
