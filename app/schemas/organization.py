"""Organization·School·Faculty·Member 스키마."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import MemberRole
from app.schemas.common import PartialUpdate

SLUG_PATTERN = r"^[a-z0-9-]+$"


class OrganizationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=256)
    slug: str = Field(..., min_length=2, max_length=128, pattern=SLUG_PATTERN)
    description: str | None = Field(None, max_length=5000)
    website: str | None = Field(None, max_length=512)
    logo_url: str | None = Field(None, max_length=2048)


class OrganizationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: str | None = None
    website: str | None = None
    logo_url: str | None = None
    is_active: bool
    created_at: datetime


class SchoolCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=256)
    slug: str = Field(..., min_length=2, max_length=128, pattern=SLUG_PATTERN)
    description: str | None = Field(None, max_length=5000)


class SchoolUpdate(PartialUpdate):
    non_nullable = frozenset({"name", "slug"})

    name: str | None = Field(None, min_length=1, max_length=256)
    slug: str | None = Field(None, min_length=2, max_length=128, pattern=SLUG_PATTERN)
    description: str | None = Field(None, max_length=5000)


class SchoolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    name: str
    slug: str
    description: str | None = None
    is_active: bool


# Faculty 입력 형식은 School과 같다.
FacultyCreate = SchoolCreate
FacultyUpdate = SchoolUpdate


class FacultyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    school_id: int
    organization_id: int
    name: str
    slug: str
    description: str | None = None
    is_active: bool


class FacultyNode(FacultyResponse):
    professor_count: int = 0
    course_count: int = 0


class SchoolNode(SchoolResponse):
    faculties: list[FacultyNode] = Field(default_factory=list)


class HierarchyResponse(BaseModel):
    organization: OrganizationResponse
    schools: list[SchoolNode]


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    organization_id: int
    faculty_id: int | None = None
    role: MemberRole
    is_active: bool
    academic_title: str | None = None
    department: str | None = None
    employment_type: str | None = None
    contract_start_date: date | None = None
    assigned_at: datetime | None = None
    joined_at: datetime


class MemberFacultyAssign(BaseModel):
    model_config = ConfigDict(extra="forbid")

    faculty_id: int


class MemberRoleUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: MemberRole
