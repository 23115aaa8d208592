"""Research Service. 연구 협업 공고, 좋아요, 저장."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.core.pagination import clamp_limit, split_cursor_page
from app.models.enums import NotificationType
from app.models.research import Research
from app.repositories import research_repository
from app.schemas.common import CursorPage, ToggleResponse
from app.schemas.job import SavedStatus
from app.schemas.research import ResearchCreate, ResearchResponse
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)


async def _get_or_404(session: AsyncSession, research_id: int) -> Research:
    research = await research_repository.get_research(session, research_id)
    if research is None:
        raise NotFoundError("Research not found")
    return research


async def create_research(user_id: int, payload: ResearchCreate) -> ResearchResponse:
    async with transaction() as session:
        research = Research(owner_id=user_id, **payload.model_dump())
        session.add(research)
        await session.flush()
        return ResearchResponse.model_validate(research)


async def list_researches(
    session: AsyncSession, q: str | None = None, cursor: int | None = None, limit: int | None = None
) -> CursorPage[ResearchResponse]:
    size = clamp_limit(limit)
    rows = await research_repository.list_researches(session, q=q, cursor=cursor, limit=size)
    items, next_cursor = split_cursor_page(rows, size)
    return CursorPage[ResearchResponse](
        items=[ResearchResponse.model_validate(r) for r in items], next_cursor=next_cursor
    )


async def list_my_researches(session: AsyncSession, user_id: int) -> list[ResearchResponse]:
    rows = await research_repository.list_by_owner(session, user_id)
    return [ResearchResponse.model_validate(r) for r in rows]


async def get_research(session: AsyncSession, research_id: int) -> ResearchResponse:
    return ResearchResponse.model_validate(await _get_or_404(session, research_id))


async def delete_research(user_id: int, research_id: int) -> None:
    async with transaction() as session:
        research = await _get_or_404(session, research_id)
        if research.owner_id != user_id:
            raise PermissionDeniedError("Only the owner can delete this research")
        await session.delete(research)


async def get_like_info(session: AsyncSession, user_id: int, research_id: int) -> ToggleResponse:
    await _get_or_404(session, research_id)
    return ToggleResponse(
        active=await research_repository.has_liked(session, user_id, research_id),
        count=await research_repository.count_likes(session, research_id),
    )


async def like_research(user_id: int, research_id: int) -> ToggleResponse:
    """멱등. 새 좋아요일 때만 소유자에게 LIKE 알림."""
    async with transaction() as session:
        research = await _get_or_404(session, research_id)
        created = await research_repository.insert_like(session, user_id, research_id)
        if created and research.owner_id != user_id:
            await create_notification(
                session,
                NotificationType.LIKE,
                research.owner_id,
                issuer_id=user_id,
                research_id=research.id,
            )
        count = await research_repository.count_likes(session, research_id)
        return ToggleResponse(active=True, count=count)


async def unlike_research(user_id: int, research_id: int) -> ToggleResponse:
    async with transaction() as session:
        await research_repository.delete_like(session, user_id, research_id)
        count = await research_repository.count_likes(session, research_id)
        return ToggleResponse(active=False, count=count)


async def save_research(user_id: int, research_id: int) -> SavedStatus:
    async with transaction() as session:
        await _get_or_404(session, research_id)
        await research_repository.insert_saved(session, user_id, research_id)
        return SavedStatus(is_saved=True)


async def unsave_research(user_id: int, research_id: int) -> SavedStatus:
    async with transaction() as session:
        await research_repository.delete_saved(session, user_id, research_id)
        return SavedStatus(is_saved=False)


async def list_saved_researches(session: AsyncSession, user_id: int) -> list[ResearchResponse]:
    rows = await research_repository.list_saved(session, user_id)
    return [ResearchResponse.model_validate(r) for r in rows]
