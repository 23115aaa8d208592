"""User Repository. DB 쿼리만 수행."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import Skill, User, UserSkill
from app.schemas.user import UserBase


async def get_by_id(session: AsyncSession, user_id: int) -> User | None:
    """id로 유저 조회."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalars().one_or_none()


async def get_by_email(session: AsyncSession, email: str) -> User | None:
    """이메일(대소문자 무시)로 유저 조회."""
    result = await session.execute(
        select(User).where(func.lower(User.email) == email.strip().lower()).limit(1)
    )
    return result.scalars().first()


async def get_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalars().one_or_none()


async def increment_refresh_token_version(
    session: AsyncSession, user_id: int
) -> int:
    """로그아웃/탈취/회전 시 해당 유저의 기존 Refresh 토큰 전부 무효화. 새 버전 반환."""
    result = await session.execute(
        update(User)
        .where(User.id == user_id)
        .values(refresh_token_version=User.refresh_token_version + 1)
        .returning(User.refresh_token_version)
    )
    return int(result.scalar_one())


async def upsert_by_provider_uid(
    session: AsyncSession, provider: str, provider_user_id: str, data: UserBase
) -> User:
    """
    INSERT ... ON CONFLICT (provider, provider_user_id) DO UPDATE.
    동시 로그인 시 레이스 컨디션 없이 단일 쿼리로 처리. 프로필 필드는 갱신하지 않는다.
    """
    now = datetime.now(UTC)
    base = pg_insert(User).values(
        provider=provider,
        provider_user_id=provider_user_id,
        email=data.email,
        name=data.name,
        refresh_token_version=0,
        created_at=now,
        updated_at=now,
    )
    stmt = base.on_conflict_do_update(
        constraint="uq_user_provider_uid",
        set_={
            User.email: func.coalesce(base.excluded.email, User.email),
            User.name: func.coalesce(User.name, base.excluded.name),
            User.updated_at: now,
        },
    ).returning(User.id)
    result = await session.execute(stmt)
    user_id = result.scalars().one()
    await session.flush()
    user = await session.get(User, user_id)
    if user is None:
        raise RuntimeError("User not found after upsert")
    return user


async def update_fields(session: AsyncSession, user: User, values: dict[str, Any]) -> User:
    for key, value in values.items():
        setattr(user, key, value)
    await session.flush()
    return user


async def get_skill_names(session: AsyncSession, user_id: int) -> list[str]:
    result = await session.execute(
        select(Skill.name)
        .join(UserSkill, UserSkill.skill_id == Skill.id)
        .where(UserSkill.user_id == user_id)
        .order_by(Skill.name)
    )
    return list(result.scalars().all())


async def get_or_create_skills(session: AsyncSession, names: list[str]) -> list[Skill]:
    """이름 목록에 해당하는 Skill 행. 없는 이름은 ON CONFLICT DO NOTHING으로 생성."""
    if not names:
        return []
    await session.execute(
        pg_insert(Skill)
        .values([{"name": n} for n in names])
        .on_conflict_do_nothing(index_elements=["name"])
    )
    result = await session.execute(select(Skill).where(Skill.name.in_(names)))
    return list(result.scalars().all())


async def replace_user_skills(session: AsyncSession, user_id: int, skill_ids: list[int]) -> None:
    await session.execute(delete(UserSkill).where(UserSkill.user_id == user_id))
    if skill_ids:
        session.add_all([UserSkill(user_id=user_id, skill_id=sid) for sid in skill_ids])
    await session.flush()
