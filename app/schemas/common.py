"""공통 응답 스키마 (페이지네이션, 단순 상태)."""

from typing import ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

T = TypeVar("T")


class CursorPage(BaseModel, Generic[T]):
    """id 커서 페이지. next_cursor가 None이면 마지막 페이지."""

    items: list[T]
    next_cursor: int | None = None


class OffsetPage(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int


class ToggleResponse(BaseModel):
    """좋아요/저장 토글 결과."""

    active: bool
    count: int | None = None


class PartialUpdate(BaseModel):
    """
    PATCH 본문 베이스. 보낸 필드만 반영(model_dump(exclude_unset=True)).
    non_nullable에 속한 필드에 명시적 null이 오면 422. NOT NULL 컬럼에 None이 들어가지 않게 한다.
    """

    model_config = ConfigDict(extra="forbid")

    non_nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def reject_explicit_null(self) -> "PartialUpdate":
        nulls = sorted(
            name
            for name in self.model_fields_set & self.non_nullable
            if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self
