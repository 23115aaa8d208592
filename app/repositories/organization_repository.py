"""Organization·School·Faculty·Member Repository."""

from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.course import Course
from app.models.enums import REVIEWER_ROLES, MemberRole, UserStatus
from app.models.organization import Faculty, Member, Organization, School
from app.models.user import User


async def get_organization(session: AsyncSession, org_id: int) -> Organization | None:
    return await session.get(Organization, org_id)


async def get_organization_by_slug(session: AsyncSession, slug: str) -> Organization | None:
    result = await session.execute(select(Organization).where(Organization.slug == slug))
    return result.scalars().one_or_none()


async def list_user_organizations(session: AsyncSession, user_id: int) -> list[Organization]:
    result = await session.execute(
        select(Organization)
        .join(Member, Member.organization_id == Organization.id)
        .where(Member.user_id == user_id, Member.is_active.is_(True))
        .order_by(Organization.name)
    )
    return list(result.scalars().all())


async def get_member(
    session: AsyncSession, user_id: int, org_id: int, *, active_only: bool = True
) -> Member | None:
    stmt = select(Member).where(Member.user_id == user_id, Member.organization_id == org_id)
    if active_only:
        stmt = stmt.where(Member.is_active.is_(True))
    result = await session.execute(stmt)
    return result.scalars().one_or_none()


async def get_member_by_id(session: AsyncSession, member_id: int) -> Member | None:
    return await session.get(Member, member_id)


async def list_members(
    session: AsyncSession, org_id: int, *, include_inactive: bool = False
) -> list[Member]:
    stmt = select(Member).where(Member.organization_id == org_id)
    if not include_inactive:
        stmt = stmt.where(Member.is_active.is_(True))
    result = await session.execute(stmt.order_by(Member.joined_at, Member.id))
    return list(result.scalars().all())


async def find_reviewer(
    session: AsyncSession, org_id: int, *, exclude_user_id: int | None = None
) -> Member | None:
    """
    심사자: 활성 OWNER/ADMIN 멤버 중 유저 상태 ACTIVE. OWNER 우선, 먼저 가입한 순.
    exclude_user_id(제출자)는 제외.
    """
    stmt = (
        select(Member)
        .join(User, User.id == Member.user_id)
        .where(
            Member.organization_id == org_id,
            Member.is_active.is_(True),
            Member.role.in_([str(r) for r in REVIEWER_ROLES]),
            User.status == UserStatus.ACTIVE,
        )
        .order_by(
            case((Member.role == MemberRole.OWNER, 0), else_=1),
            Member.joined_at,
            Member.id,
        )
        .limit(1)
    )
    if exclude_user_id is not None:
        stmt = stmt.where(Member.user_id != exclude_user_id)
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_school(session: AsyncSession, school_id: int) -> School | None:
    return await session.get(School, school_id)


async def school_slug_exists(session: AsyncSession, org_id: int, slug: str) -> bool:
    result = await session.execute(
        select(School.id).where(School.organization_id == org_id, School.slug == slug)
    )
    return result.first() is not None


async def get_faculty(session: AsyncSession, faculty_id: int) -> Faculty | None:
    return await session.get(Faculty, faculty_id)


async def faculty_slug_exists(session: AsyncSession, school_id: int, slug: str) -> bool:
    result = await session.execute(
        select(Faculty.id).where(Faculty.school_id == school_id, Faculty.slug == slug)
    )
    return result.first() is not None


async def list_active_schools(session: AsyncSession, org_id: int) -> list[School]:
    result = await session.execute(
        select(School)
        .where(School.organization_id == org_id, School.is_active.is_(True))
        .order_by(School.name)
    )
    return list(result.scalars().all())


async def list_active_faculties_with_counts(
    session: AsyncSession, org_id: int
) -> list[tuple[Faculty, int, int]]:
    """(faculty, 교수 수, 활성 과목 수). 이름순."""
    professors = (
        select(Member.faculty_id, func.count(Member.id).label("n"))
        .where(
            Member.organization_id == org_id,
            Member.is_active.is_(True),
            Member.role == MemberRole.PROFESSOR,
        )
        .group_by(Member.faculty_id)
        .subquery()
    )
    courses = (
        select(Course.faculty_id, func.count(Course.id).label("n"))
        .where(Course.organization_id == org_id, Course.is_deleted.is_(False))
        .group_by(Course.faculty_id)
        .subquery()
    )
    stmt = (
        select(
            Faculty,
            func.coalesce(professors.c.n, 0),
            func.coalesce(courses.c.n, 0),
        )
        .outerjoin(professors, professors.c.faculty_id == Faculty.id)
        .outerjoin(courses, courses.c.faculty_id == Faculty.id)
        .where(Faculty.organization_id == org_id, Faculty.is_active.is_(True))
        .order_by(Faculty.name)
    )
    result = await session.execute(stmt)
    return [(f, int(p), int(c)) for f, p, c in result.all()]


async def add(session: AsyncSession, obj: Any) -> Any:
    session.add(obj)
    await session.flush()
    return obj
