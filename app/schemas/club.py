"""Club 스키마."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ClubMemberRole, ClubStatus, ClubType
from app.schemas.common import PartialUpdate


class ClubCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, max_length=5000)
    club_type: ClubType = ClubType.OTHER
    organization_id: int
    faculty_id: int | None = None
    is_public: bool = True
    max_members: int | None = Field(None, ge=1, le=100000)
    logo_url: str | None = Field(None, max_length=2048)


class ClubUpdate(PartialUpdate):
    non_nullable = frozenset({"name", "club_type", "status", "is_public"})

    name: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = Field(None, max_length=5000)
    club_type: ClubType | None = None
    status: ClubStatus | None = None
    is_public: bool | None = None
    max_members: int | None = Field(None, ge=1, le=100000)
    logo_url: str | None = Field(None, max_length=2048)


class ClubResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    club_type: ClubType
    status: ClubStatus
    organization_id: int
    faculty_id: int | None = None
    created_by_id: int
    is_public: bool
    is_active: bool
    max_members: int | None = None
    logo_url: str | None = None
    created_at: datetime
    member_count: int = 0


class ClubFilters(BaseModel):
    organization_id: int | None = None
    faculty_id: int | None = None
    status: str | None = None
    club_type: str | None = None
    is_public: bool | None = None
    search: str | None = Field(None, max_length=100)
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class ClubMemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    club_id: int
    user_id: int
    role: ClubMemberRole
    is_active: bool
    joined_at: datetime


class ClubMemberRoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: ClubMemberRole
