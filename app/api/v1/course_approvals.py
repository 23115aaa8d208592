"""Course Approvals API. 심사자용 목록·상세·심사."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import OffsetPage
from app.schemas.course import ApprovalResponse, ApprovalReview
from app.services import approval_service

router = APIRouter(prefix="/course-approvals", tags=["course-approvals"])


@router.get("", response_model=OffsetPage[ApprovalResponse])
async def get_approvals(
    status: str | None = Query(None, description="UNDER_REVIEW, PUBLISHED, REJECTED, NEEDS_REVISION"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> OffsetPage[ApprovalResponse]:
    """나에게 배정된 심사. 제출 시각 오름차순."""
    return await approval_service.list_approvals(session, current_user.id, status, page, limit)


@router.get("/{approval_id}", response_model=ApprovalResponse)
async def get_approval(
    approval_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> ApprovalResponse:
    return await approval_service.get_approval(session, current_user.id, approval_id)


@router.post("/{approval_id}/review", response_model=ApprovalResponse)
async def post_review(
    approval_id: int,
    payload: ApprovalReview,
    current_user: User = Depends(get_current_active_user),
) -> ApprovalResponse:
    return await approval_service.review(current_user.id, approval_id, payload)
