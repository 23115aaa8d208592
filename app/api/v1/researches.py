"""Researches API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.common import CursorPage, ToggleResponse
from app.schemas.job import SavedStatus
from app.schemas.research import ResearchCreate, ResearchResponse
from app.services import research_service

router = APIRouter(prefix="/researches", tags=["researches"])


@router.post("", response_model=ResearchResponse, status_code=201)
async def post_research(
    payload: ResearchCreate,
    current_user: User = Depends(get_current_active_user),
) -> ResearchResponse:
    return await research_service.create_research(current_user.id, payload)


@router.get("", response_model=CursorPage[ResearchResponse])
async def get_researches(
    q: str | None = Query(None, max_length=100),
    cursor: int | None = Query(None, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    session: AsyncSession = Depends(get_db),
) -> CursorPage[ResearchResponse]:
    return await research_service.list_researches(session, q, cursor, limit)


@router.get("/mine", response_model=list[ResearchResponse])
async def get_my_researches(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[ResearchResponse]:
    return await research_service.list_my_researches(session, current_user.id)


@router.get("/saved", response_model=list[ResearchResponse])
async def get_saved_researches(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[ResearchResponse]:
    return await research_service.list_saved_researches(session, current_user.id)


@router.get("/{research_id}", response_model=ResearchResponse)
async def get_research(research_id: int, session: AsyncSession = Depends(get_db)) -> ResearchResponse:
    return await research_service.get_research(session, research_id)


@router.delete("/{research_id}", status_code=204)
async def delete_research(
    research_id: int,
    current_user: User = Depends(get_current_active_user),
) -> None:
    await research_service.delete_research(current_user.id, research_id)


@router.get("/{research_id}/likes", response_model=ToggleResponse)
async def get_likes(
    research_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> ToggleResponse:
    return await research_service.get_like_info(session, current_user.id, research_id)


@router.post("/{research_id}/likes", response_model=ToggleResponse)
async def post_like(
    research_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ToggleResponse:
    return await research_service.like_research(current_user.id, research_id)


@router.delete("/{research_id}/likes", response_model=ToggleResponse)
async def delete_like(
    research_id: int,
    current_user: User = Depends(get_current_active_user),
) -> ToggleResponse:
    return await research_service.unlike_research(current_user.id, research_id)


@router.post("/{research_id}/saved", response_model=SavedStatus)
async def post_save(
    research_id: int,
    current_user: User = Depends(get_current_active_user),
) -> SavedStatus:
    return await research_service.save_research(current_user.id, research_id)


@router.delete("/{research_id}/saved", response_model=SavedStatus)
async def delete_save(
    research_id: int,
    current_user: User = Depends(get_current_active_user),
) -> SavedStatus:
    return await research_service.unsave_research(current_user.id, research_id)
