"""
Course Approval Service. 과목 심사 워크플로.

DRAFT | REJECTED | NEEDS_REVISION → UNDER_REVIEW → PUBLISHED | REJECTED | NEEDS_REVISION
심사자는 과목 소유 조직의 활성 OWNER/ADMIN 중 자동 배정(제출자 제외). 없으면 503.
"""

import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    UnavailableError,
)
from app.core.pagination import offset_for, total_pages
from app.models.course import CourseApproval
from app.models.enums import AuditAction, CourseStatus, NotificationType, parse_enum
from app.repositories import course_repository, organization_repository
from app.schemas.common import OffsetPage
from app.schemas.course import ApprovalResponse, ApprovalReview
from app.services.audit_service import create_audit_log, snapshot
from app.services.course_service import is_course_admin
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)

SUBMITTABLE_STATUSES = frozenset(
    {CourseStatus.DRAFT, CourseStatus.REJECTED, CourseStatus.NEEDS_REVISION}
)
DECISIONS = {
    CourseStatus.PUBLISHED: AuditAction.APPROVE,
    CourseStatus.REJECTED: AuditAction.REJECT,
    CourseStatus.NEEDS_REVISION: AuditAction.REQUEST_REVISION,
}
DEFAULT_LIST_STATUSES = [
    CourseStatus.UNDER_REVIEW,
    CourseStatus.PUBLISHED,
    CourseStatus.REJECTED,
    CourseStatus.NEEDS_REVISION,
]


def validate_decision(review: ApprovalReview) -> None:
    """결정값과 결정별 필수 입력 검증. 위반 시 400."""
    if review.decision not in DECISIONS:
        raise BadRequestError(
            "decision must be one of PUBLISHED, REJECTED, NEEDS_REVISION", code="INVALID_DECISION"
        )
    has_comments = bool((review.comments or "").strip())
    if review.decision == CourseStatus.REJECTED and not has_comments:
        raise BadRequestError("Comments are required when rejecting", code="COMMENTS_REQUIRED")
    if review.decision == CourseStatus.NEEDS_REVISION and not (
        has_comments or review.required_changes
    ):
        raise BadRequestError(
            "Comments or required changes are required when requesting revision",
            code="COMMENTS_REQUIRED",
        )


async def submit_for_approval(user_id: int, course_id: int) -> ApprovalResponse:
    async with transaction() as session:
        course = await course_repository.get_course(session, course_id, for_update=True)
        if course is None:
            raise NotFoundError("Course not found")
        if course.instructor_id != user_id and not await is_course_admin(session, user_id, course):
            raise PermissionDeniedError("Only the instructor or an organization admin can submit")
        if course.status not in SUBMITTABLE_STATUSES:
            raise BadRequestError(
                f"Course in status {course.status} cannot be submitted", code="INVALID_STATUS"
            )
        if await course_repository.get_under_review_approval(session, course_id) is not None:
            raise ConflictError("Course is already under review", code="ALREADY_UNDER_REVIEW")
        reviewer = await organization_repository.find_reviewer(
            session, course.organization_id, exclude_user_id=course.instructor_id
        )
        if reviewer is None:
            raise UnavailableError("No reviewer available", code="NO_REVIEWER")

        now = datetime.now(UTC)
        before = snapshot(course)
        course.status = CourseStatus.UNDER_REVIEW
        approval = CourseApproval(
            course_id=course.id,
            submitted_by_id=user_id,
            reviewer_id=reviewer.user_id,
            status=CourseStatus.UNDER_REVIEW,
            submitted_at=now,
        )
        session.add(approval)
        await session.flush()
        await create_notification(
            session,
            NotificationType.COURSE_APPROVAL_REQUEST,
            reviewer.user_id,
            issuer_id=user_id,
            course_id=course.id,
            title=f"Review requested: {course.title}",
        )
        await create_audit_log(
            session, "courses", course.id, AuditAction.SUBMIT_APPROVAL,
            actor_id=user_id, previous_data=before, new_data=snapshot(course),
        )
        logger.info("Course %s submitted for approval (reviewer=%s)", course.id, reviewer.user_id)
        return ApprovalResponse.model_validate(approval)


async def list_approvals(
    session: AsyncSession,
    reviewer_id: int,
    status: str | None = None,
    page: int = 1,
    limit: int = 20,
) -> OffsetPage[ApprovalResponse]:
    parsed = parse_enum(CourseStatus, status)
    statuses = [parsed] if parsed is not None else DEFAULT_LIST_STATUSES
    rows, total = await course_repository.list_approvals_for_reviewer(
        session, reviewer_id, [str(s) for s in statuses], offset_for(page, limit), limit
    )
    return OffsetPage[ApprovalResponse](
        items=[ApprovalResponse.model_validate(r) for r in rows],
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages(total, limit),
    )


async def get_approval(session: AsyncSession, user_id: int, approval_id: int) -> ApprovalResponse:
    """심사자, 담당 교수, 조직 OWNER/ADMIN만."""
    approval = await course_repository.get_approval(session, approval_id)
    if approval is None:
        raise NotFoundError("Approval not found")
    course = await course_repository.get_course(session, approval.course_id)
    if course is None:
        raise NotFoundError("Approval not found")
    if user_id not in (approval.reviewer_id, course.instructor_id) and not await is_course_admin(
        session, user_id, course
    ):
        raise PermissionDeniedError("You cannot view this approval")
    return ApprovalResponse.model_validate(approval)


async def review(user_id: int, approval_id: int, payload: ApprovalReview) -> ApprovalResponse:
    """배정된 심사자만(403), UNDER_REVIEW 아니면 409. 과목 상태를 결정값으로 갱신하고 교수에게 알림."""
    validate_decision(payload)
    async with transaction() as session:
        approval = await course_repository.get_approval(session, approval_id, for_update=True)
        if approval is None:
            raise NotFoundError("Approval not found")
        course = await course_repository.get_course(session, approval.course_id, for_update=True)
        if course is None:
            raise NotFoundError("Approval not found")
        if approval.reviewer_id != user_id:
            raise PermissionDeniedError("Only the assigned reviewer can review")
        if approval.status != CourseStatus.UNDER_REVIEW:
            raise ConflictError(
                f"Approval is already {approval.status}", code="APPROVAL_NOT_UNDER_REVIEW"
            )

        before = snapshot(course)
        approval.status = payload.decision
        approval.reviewed_at = datetime.now(UTC)
        approval.comments = payload.comments
        approval.required_changes = payload.required_changes
        approval.content_score = payload.content_score
        approval.structure_score = payload.structure_score
        approval.overall_score = payload.overall_score
        course.status = payload.decision
        await session.flush()

        await create_notification(
            session,
            NotificationType.COURSE_APPROVAL_RESULT,
            course.instructor_id,
            issuer_id=user_id,
            course_id=course.id,
            title=f"Course {course.title}: {payload.decision}",
            message=payload.comments,
        )
        await create_audit_log(
            session, "courses", course.id, DECISIONS[payload.decision],
            actor_id=user_id, previous_data=before, new_data=snapshot(course),
            reason=payload.comments,
        )
        return ApprovalResponse.model_validate(approval)
