"""Research·ResearchLike·SavedResearch Repository."""

from sqlalchemy import delete, func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import apply_desc_cursor
from app.models.research import Research, ResearchLike, SavedResearch


async def get_research(session: AsyncSession, research_id: int) -> Research | None:
    return await session.get(Research, research_id)


async def list_researches(
    session: AsyncSession, *, q: str | None, cursor: int | None, limit: int
) -> list[Research]:
    stmt = select(Research)
    if q:
        pattern = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(
                Research.title.ilike(pattern),
                Research.description.ilike(pattern),
                Research.field.ilike(pattern),
            )
        )
    result = await session.execute(apply_desc_cursor(stmt, Research.id, cursor, limit))
    return list(result.scalars().all())


async def list_by_owner(session: AsyncSession, owner_id: int) -> list[Research]:
    result = await session.execute(
        select(Research).where(Research.owner_id == owner_id).order_by(Research.id.desc())
    )
    return list(result.scalars().all())


async def insert_like(session: AsyncSession, user_id: int, research_id: int) -> bool:
    result = await session.execute(
        pg_insert(ResearchLike)
        .values(user_id=user_id, research_id=research_id)
        .on_conflict_do_nothing(constraint="uq_research_like")
        .returning(ResearchLike.id)
    )
    return result.first() is not None


async def delete_like(session: AsyncSession, user_id: int, research_id: int) -> int:
    result = await session.execute(
        delete(ResearchLike).where(
            ResearchLike.user_id == user_id, ResearchLike.research_id == research_id
        )
    )
    return result.rowcount or 0


async def has_liked(session: AsyncSession, user_id: int, research_id: int) -> bool:
    result = await session.execute(
        select(ResearchLike.id).where(
            ResearchLike.user_id == user_id, ResearchLike.research_id == research_id
        )
    )
    return result.first() is not None


async def count_likes(session: AsyncSession, research_id: int) -> int:
    result = await session.execute(
        select(func.count(ResearchLike.id)).where(ResearchLike.research_id == research_id)
    )
    return int(result.scalar_one())


async def insert_saved(session: AsyncSession, user_id: int, research_id: int) -> None:
    await session.execute(
        pg_insert(SavedResearch)
        .values(user_id=user_id, research_id=research_id)
        .on_conflict_do_nothing(constraint="uq_saved_research")
    )


async def delete_saved(session: AsyncSession, user_id: int, research_id: int) -> int:
    result = await session.execute(
        delete(SavedResearch).where(
            SavedResearch.user_id == user_id, SavedResearch.research_id == research_id
        )
    )
    return result.rowcount or 0


async def list_saved(session: AsyncSession, user_id: int) -> list[Research]:
    result = await session.execute(
        select(Research)
        .join(SavedResearch, SavedResearch.research_id == Research.id)
        .where(SavedResearch.user_id == user_id)
        .order_by(SavedResearch.created_at.desc())
    )
    return list(result.scalars().all())
