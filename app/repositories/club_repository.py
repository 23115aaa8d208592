"""Club·ClubMember·ClubLike Repository."""

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.club import Club, ClubLike, ClubMember


async def get_club(session: AsyncSession, club_id: int, *, for_update: bool = False) -> Club | None:
    stmt = select(Club).where(Club.id == club_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def list_clubs(
    session: AsyncSession,
    *,
    organization_id: int | None = None,
    faculty_id: int | None = None,
    status: str | None = None,
    club_type: str | None = None,
    is_public: bool | None = None,
    search: str | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Club], int]:
    """활성 클럽만. (rows, total), 이름순."""
    stmt = select(Club).where(Club.is_active.is_(True))
    if organization_id is not None:
        stmt = stmt.where(Club.organization_id == organization_id)
    if faculty_id is not None:
        stmt = stmt.where(Club.faculty_id == faculty_id)
    if status is not None:
        stmt = stmt.where(Club.status == status)
    if club_type is not None:
        stmt = stmt.where(Club.club_type == club_type)
    if is_public is not None:
        stmt = stmt.where(Club.is_public.is_(is_public))
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Club.name.ilike(pattern), Club.description.ilike(pattern)))

    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()
    result = await session.execute(stmt.order_by(Club.name, Club.id).offset(offset).limit(limit))
    return list(result.scalars().all()), int(total)


async def count_active_members(session: AsyncSession, club_id: int) -> int:
    result = await session.execute(
        select(func.count(ClubMember.id)).where(
            ClubMember.club_id == club_id, ClubMember.is_active.is_(True)
        )
    )
    return int(result.scalar_one())


async def count_active_members_for(session: AsyncSession, club_ids: list[int]) -> dict[int, int]:
    if not club_ids:
        return {}
    result = await session.execute(
        select(ClubMember.club_id, func.count(ClubMember.id))
        .where(ClubMember.club_id.in_(club_ids), ClubMember.is_active.is_(True))
        .group_by(ClubMember.club_id)
    )
    return {club_id: int(n) for club_id, n in result.all()}


async def get_membership(session: AsyncSession, club_id: int, user_id: int) -> ClubMember | None:
    """비활성 멤버십 포함."""
    result = await session.execute(
        select(ClubMember).where(ClubMember.club_id == club_id, ClubMember.user_id == user_id)
    )
    return result.scalars().one_or_none()


async def list_members(
    session: AsyncSession, club_id: int, *, roles: list[str] | None = None
) -> list[ClubMember]:
    stmt = select(ClubMember).where(
        ClubMember.club_id == club_id, ClubMember.is_active.is_(True)
    )
    if roles:
        stmt = stmt.where(ClubMember.role.in_(roles))
    result = await session.execute(stmt.order_by(ClubMember.joined_at))
    return list(result.scalars().all())


async def get_like(session: AsyncSession, user_id: int, club_id: int) -> ClubLike | None:
    result = await session.execute(
        select(ClubLike).where(ClubLike.user_id == user_id, ClubLike.club_id == club_id)
    )
    return result.scalars().one_or_none()


async def count_likes(session: AsyncSession, club_id: int) -> int:
    result = await session.execute(
        select(func.count(ClubLike.id)).where(ClubLike.club_id == club_id)
    )
    return int(result.scalar_one())
