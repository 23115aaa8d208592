"""AuditLog Repository. 생성은 audit_service에서, 여기서는 정리·통계 조회."""

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog


def delete_before_sync(session: Session, cutoff: datetime, keep_actions: Iterable[str]) -> int:
    """cutoff 이전 로그 삭제. keep_actions는 보존."""
    result = session.execute(
        delete(AuditLog).where(
            AuditLog.created_at < cutoff,
            AuditLog.action.not_in(list(keep_actions)),
        )
    )
    return result.rowcount or 0


async def count_all(session: AsyncSession) -> int:
    return int((await session.execute(select(func.count(AuditLog.id)))).scalar_one())


async def count_before(session: AsyncSession, cutoff: datetime) -> int:
    result = await session.execute(
        select(func.count(AuditLog.id)).where(AuditLog.created_at < cutoff)
    )
    return int(result.scalar_one())


async def get_latest_by_actions(session: AsyncSession, actions: Iterable[str]) -> AuditLog | None:
    result = await session.execute(
        select(AuditLog)
        .where(AuditLog.action.in_(list(actions)))
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(1)
    )
    return result.scalars().first()
