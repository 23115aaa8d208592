"""페이지네이션 헬퍼 테스트."""

from types import SimpleNamespace

from app.core.config import settings
from app.core.pagination import clamp_limit, offset_for, split_cursor_page, total_pages


def test_clamp_limit_bounds() -> None:
    assert clamp_limit(None) == settings.default_page_size
    assert clamp_limit(None, default=5) == 5
    assert clamp_limit(0) == 1
    assert clamp_limit(10_000) == settings.max_page_size


def test_offset_for_treats_page_below_one_as_first() -> None:
    assert offset_for(1, 20) == 0
    assert offset_for(3, 20) == 40
    assert offset_for(0, 20) == 0


def test_total_pages() -> None:
    assert total_pages(0, 10) == 0
    assert total_pages(10, 10) == 1
    assert total_pages(11, 10) == 2


def test_split_cursor_page_has_next() -> None:
    rows = [SimpleNamespace(id=i) for i in (9, 8, 7)]
    items, next_cursor = split_cursor_page(rows, 2)
    assert [r.id for r in items] == [9, 8]
    assert next_cursor == 8


def test_split_cursor_page_last_page() -> None:
    rows = [SimpleNamespace(id=i) for i in (3, 2)]
    items, next_cursor = split_cursor_page(rows, 2)
    assert len(items) == 2
    assert next_cursor is None
    assert split_cursor_page([], 5) == ([], None)
