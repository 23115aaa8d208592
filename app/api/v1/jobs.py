"""Jobs API. 공고, 지원, 저장·좋아요, 매칭."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage, ToggleResponse
from app.schemas.job import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationStatusUpdate,
    JobCreate,
    JobMatch,
    JobMatchResult,
    JobResponse,
    SavedStatus,
)
from app.services import job_service

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("", response_model=JobResponse, status_code=201)
async def post_job(
    payload: JobCreate,
    current_user: User = Depends(get_current_active_user),
) -> JobResponse:
    return await job_service.create_job(current_user.id, payload)


@router.get("", response_model=CursorPage[JobResponse])
async def get_jobs(
    q: str | None = Query(None, max_length=100),
    types: list[str] | None = Query(None, description="FULL_TIME, INTERNSHIP, ..."),
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[JobResponse]:
    return await job_service.list_jobs(session, q=q, types=types, cursor=cursor, limit=limit)


@router.get("/saved", response_model=list[JobResponse])
async def get_saved_jobs(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[JobResponse]:
    return await job_service.list_saved_jobs(session, current_user.id)


@router.get("/matches", response_model=list[JobMatchResult])
async def get_job_matches(
    min_percentage: float = Query(0.0, ge=0.0, le=100.0),
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[JobMatchResult]:
    return await job_service.list_job_matches(session, current_user.id, min_percentage)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, session: AsyncSession = Depends(get_db)) -> JobResponse:
    return await job_service.get_job(session, job_id)


@router.delete("/{job_id}", status_code=204)
async def delete_job(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await job_service.delete_job(current_user.id, job_id)


@router.get("/{job_id}/match", response_model=JobMatch)
async def get_job_match(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> JobMatch:
    return await job_service.calculate_job_match(session, current_user.id, job_id)


@router.post("/{job_id}/applications", response_model=ApplicationResponse, status_code=201)
async def post_application(
    job_id: int,
    payload: ApplicationCreate,
    current_user: User = Depends(get_current_active_user),
) -> ApplicationResponse:
    return await job_service.apply(current_user.id, job_id, payload)


@router.get("/{job_id}/applications", response_model=list[ApplicationResponse])
async def get_applications(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[ApplicationResponse]:
    return await job_service.list_applications(session, current_user.id, job_id)


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
async def patch_application(
    application_id: int,
    payload: ApplicationStatusUpdate,
    current_user: User = Depends(get_current_active_user),
) -> ApplicationResponse:
    return await job_service.update_application_status(
        current_user.id, application_id, payload.status
    )


@router.get("/{job_id}/saved", response_model=SavedStatus)
async def get_saved_status(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> SavedStatus:
    return await job_service.get_saved_status(session, current_user.id, job_id)


@router.post("/{job_id}/saved", response_model=SavedStatus)
async def post_save(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
) -> SavedStatus:
    return await job_service.save_job(current_user.id, job_id)


@router.delete("/{job_id}/saved", response_model=SavedStatus)
async def delete_save(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
) -> SavedStatus:
    return await job_service.unsave_job(current_user.id, job_id)


@router.get("/{job_id}/likes", response_model=ToggleResponse)
async def get_likes(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> ToggleResponse:
    return await job_service.get_like_info(session, current_user.id, job_id)


@router.post("/{job_id}/likes", response_model=ToggleResponse)
async def post_like(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ToggleResponse:
    return await job_service.like_job(current_user.id, job_id)


@router.delete("/{job_id}/likes", response_model=ToggleResponse)
async def delete_like(
    job_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ToggleResponse:
    return await job_service.unlike_job(current_user.id, job_id)
