"""Soft delete 조회 필터. SoftDeleteMixin 모델(Course, Invitation)의 select에 붙인다."""

from typing import Any

from sqlalchemy import Select


def exclude_deleted(stmt: Select, model: Any) -> Select:
    """삭제되지 않은 행만."""
    return stmt.where(model.is_deleted.is_(False))


def only_deleted(stmt: Select, model: Any) -> Select:
    return stmt.where(model.is_deleted.is_(True))
