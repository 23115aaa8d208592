"""User 관련 Pydantic 스키마."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import UserRole, UserStatus
from app.schemas.common import PartialUpdate


class UserBase(BaseModel):
    """User 공통 필드 (OAuth upsert 입력)."""

    email: str | None = None
    name: str | None = None


class UserSummary(BaseModel):
    """목록·알림 등에 포함되는 최소 정보."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str | None = None
    username: str | None = None
    avatar_url: str | None = None


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str | None = None
    name: str | None = None
    username: str | None = None
    bio: str | None = None
    website: str | None = None
    location: str | None = None
    avatar_url: str | None = None
    cover_url: str | None = None
    is_private: bool = False
    role: UserRole
    status: UserStatus
    created_at: datetime


class ProfileResponse(UserResponse):
    """프로필 조회. 팔로워 수와 뷰어 기준 관계 포함."""

    follower_count: int = 0
    following_count: int = 0
    is_followed_by_viewer: bool = False
    skills: list[str] = Field(default_factory=list)


class ProfileUpdate(PartialUpdate):
    non_nullable = frozenset({"is_private"})

    name: str | None = Field(None, min_length=1, max_length=256)
    username: str | None = Field(None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.]+$")
    bio: str | None = Field(None, max_length=255)
    website: str | None = Field(None, max_length=512)
    location: str | None = Field(None, max_length=128)
    avatar_url: str | None = Field(None, max_length=2048)
    cover_url: str | None = Field(None, max_length=2048)
    is_private: bool | None = None


class UserStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: UserStatus
    reason: str | None = Field(None, max_length=500)


class UserRoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: UserRole
    reason: str | None = Field(None, max_length=500)


class SkillsUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    skills: list[str] = Field(default_factory=list, max_length=50)
