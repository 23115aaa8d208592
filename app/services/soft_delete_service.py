"""
Soft delete 공통 로직. SoftDeleteMixin 모델(Course, Invitation)에 적용.
삭제/복구/일괄 삭제는 API 트랜잭션(async), 보존 기간 경과 행의 영구 삭제는 워커(sync)에서 수행.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError
from app.models.enums import AuditAction
from app.services.audit_service import create_audit_log, create_audit_log_sync, snapshot

logger = logging.getLogger(__name__)

M = TypeVar("M")


def _entity_type(model: Any) -> str:
    return model.__tablename__


async def soft_delete(
    session: AsyncSession,
    model: type[M],
    entity_id: int,
    *,
    actor_id: int | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    previous_data: dict[str, Any] | None = None,
) -> M:
    """
    없으면 404, 이미 삭제됐으면 409. 변경 전/후 스냅샷으로 SOFT_DELETE 감사.
    previous_data: 호출 측이 삭제 직전 상태를 함께 바꾼 경우(예: 초대 CANCELLED) 그 이전 스냅샷.
    """
    obj = await session.get(model, entity_id)
    if obj is None:
        raise NotFoundError(f"{model.__name__} not found")
    if obj.is_deleted:
        raise ConflictError(f"{model.__name__} already deleted")
    before = previous_data if previous_data is not None else snapshot(obj)
    obj.is_deleted = True
    obj.deleted_at = datetime.now(UTC)
    await session.flush()
    await create_audit_log(
        session,
        _entity_type(model),
        entity_id,
        AuditAction.SOFT_DELETE,
        actor_id=actor_id,
        previous_data=before,
        new_data=snapshot(obj),
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    return obj


async def restore(
    session: AsyncSession,
    model: type[M],
    entity_id: int,
    *,
    actor_id: int | None = None,
    reason: str | None = None,
) -> M:
    """삭제 상태가 아니면 409."""
    obj = await session.get(model, entity_id)
    if obj is None:
        raise NotFoundError(f"{model.__name__} not found")
    if not obj.is_deleted:
        raise ConflictError(f"{model.__name__} is not deleted")
    before = snapshot(obj)
    obj.is_deleted = False
    obj.deleted_at = None
    await session.flush()
    await create_audit_log(
        session,
        _entity_type(model),
        entity_id,
        AuditAction.RESTORE,
        actor_id=actor_id,
        previous_data=before,
        new_data=snapshot(obj),
        reason=reason,
    )
    return obj


async def bulk_soft_delete(
    session: AsyncSession,
    model: type[M],
    entity_ids: list[int],
    *,
    actor_id: int | None = None,
    reason: str | None = None,
) -> list[int]:
    """없는 행·이미 삭제된 행은 건너뛴다. 실제 삭제된 id 목록 반환."""
    if not entity_ids:
        return []
    result = await session.execute(
        select(model).where(model.id.in_(entity_ids), model.is_deleted.is_(False))
    )
    now = datetime.now(UTC)
    deleted: list[int] = []
    for obj in result.scalars().all():
        before = snapshot(obj)
        obj.is_deleted = True
        obj.deleted_at = now
        deleted.append(obj.id)
        await create_audit_log(
            session,
            _entity_type(model),
            obj.id,
            AuditAction.BULK_SOFT_DELETE,
            actor_id=actor_id,
            previous_data=before,
            new_data={"is_deleted": True, "deleted_at": now.isoformat()},
            reason=reason,
        )
    await session.flush()
    return deleted


def purge_expired(
    session: Session,
    model: Any,
    retention_days: int,
    now: datetime | None = None,
) -> int:
    """보존 기간 이전에 soft delete된 행을 영구 삭제(워커 전용, sync). 행마다 HARD_DELETE 감사."""
    cutoff = (now or datetime.now(UTC)) - timedelta(days=retention_days)
    rows = session.execute(
        select(model).where(
            model.is_deleted.is_(True),
            model.deleted_at.is_not(None),
            model.deleted_at < cutoff,
        )
    ).scalars().all()
    if not rows:
        return 0
    for obj in rows:
        create_audit_log_sync(
            session,
            _entity_type(model),
            obj.id,
            AuditAction.HARD_DELETE,
            previous_data=snapshot(obj),
            reason=f"retention {retention_days}d expired",
        )
    ids = [obj.id for obj in rows]
    session.execute(delete(model).where(model.id.in_(ids)))
    session.flush()
    logger.info("Purged %d soft-deleted %s rows", len(ids), _entity_type(model))
    return len(ids)
