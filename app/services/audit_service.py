"""
Audit Service. 변경 이력을 audit_logs에 남긴다.
감사 로그 실패가 본 작업을 깨뜨리지 않도록 SAVEPOINT 안에서 기록하고, 실패는 경고 로그만 남긴다.
"""

import enum
import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from app.models.audit_log import AuditLog
from app.models.enums import AuditAction, AuditSource

logger = logging.getLogger(__name__)

# 스냅샷에서 제외할 컬럼. 초대 토큰 등 비밀 값.
_SECRET_COLUMNS = frozenset({"token", "refresh_token_version"})


def _json_safe(value: Any) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, enum.Enum):
        return value.value
    return value


def snapshot(obj: Any) -> dict[str, Any]:
    """ORM 객체의 컬럼 값을 JSON 직렬화 가능한 dict로. 비밀 컬럼 제외."""
    if obj is None:
        return {}
    mapper = inspect(obj).mapper
    return {
        attr.key: _json_safe(getattr(obj, attr.key))
        for attr in mapper.column_attrs
        if attr.key not in _SECRET_COLUMNS
    }


def _build(
    entity_type: str,
    entity_id: int | None,
    action: AuditAction,
    *,
    actor_id: int | None,
    previous_data: dict[str, Any] | None,
    new_data: dict[str, Any] | None,
    reason: str | None,
    source: AuditSource,
    ip_address: str | None,
    user_agent: str | None,
) -> AuditLog:
    return AuditLog(
        entity_type=entity_type,
        entity_id=entity_id,
        action=str(action),
        actor_id=actor_id,
        source=str(source),
        previous_data=previous_data,
        new_data=new_data,
        reason=reason,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:512] or None,
    )


async def create_audit_log(
    session: AsyncSession,
    entity_type: str,
    entity_id: int | None,
    action: AuditAction,
    *,
    actor_id: int | None = None,
    previous_data: dict[str, Any] | None = None,
    new_data: dict[str, Any] | None = None,
    reason: str | None = None,
    source: AuditSource = AuditSource.API,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> AuditLog | None:
    """감사 로그 1건. 실패 시 None(호출자 트랜잭션은 유지)."""
    row = _build(
        entity_type,
        entity_id,
        action,
        actor_id=actor_id,
        previous_data=previous_data,
        new_data=new_data,
        reason=reason,
        source=source,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    try:
        async with session.begin_nested():
            session.add(row)
        return row
    except Exception as e:
        logger.warning(
            "Audit log failed (entity=%s id=%s action=%s): %s",
            entity_type,
            entity_id,
            action,
            e,
            exc_info=True,
        )
        return None


def create_audit_log_sync(
    session: Session,
    entity_type: str,
    entity_id: int | None,
    action: AuditAction,
    *,
    actor_id: int | None = None,
    previous_data: dict[str, Any] | None = None,
    new_data: dict[str, Any] | None = None,
    reason: str | None = None,
) -> AuditLog | None:
    """워커용. source=WORKER."""
    row = _build(
        entity_type,
        entity_id,
        action,
        actor_id=actor_id,
        previous_data=previous_data,
        new_data=new_data,
        reason=reason,
        source=AuditSource.WORKER,
        ip_address=None,
        user_agent=None,
    )
    try:
        with session.begin_nested():
            session.add(row)
        return row
    except Exception as e:
        logger.warning(
            "Audit log failed (entity=%s id=%s action=%s): %s",
            entity_type,
            entity_id,
            action,
            e,
            exc_info=True,
        )
        return None
