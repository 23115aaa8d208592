"""페이지네이션 헬퍼. 피드는 id 커서(최신순), 관리 목록은 page/limit 오프셋."""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from sqlalchemy import Select

from app.core.config import settings

T = TypeVar("T")


def clamp_limit(limit: int | None, default: int | None = None) -> int:
    """1 ~ max_page_size로 보정. None이면 default(없으면 설정값)."""
    if limit is None:
        limit = default if default is not None else settings.default_page_size
    return max(1, min(int(limit), settings.max_page_size))


def offset_for(page: int, limit: int) -> int:
    return (max(1, page) - 1) * limit


def total_pages(total: int, limit: int) -> int:
    if total <= 0:
        return 0
    return (total + limit - 1) // limit


def apply_desc_cursor(stmt: Select, id_column: Any, cursor: int | None, limit: int) -> Select:
    """id < cursor, id 내림차순, limit+1건 조회(다음 페이지 존재 판정용)."""
    if cursor is not None:
        stmt = stmt.where(id_column < cursor)
    return stmt.order_by(id_column.desc()).limit(limit + 1)


def split_cursor_page(
    rows: Sequence[T],
    limit: int,
    key: Callable[[T], int] = lambda r: r.id,  # type: ignore[attr-defined]
) -> tuple[list[T], int | None]:
    """limit+1건 조회 결과를 (items, next_cursor)로 분리. 마지막 페이지면 next_cursor=None."""
    items = list(rows[:limit])
    if len(rows) > limit and items:
        return items, key(items[-1])
    return items, None
