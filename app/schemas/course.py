"""Course·CourseApproval·Enrollment 스키마."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import CourseStatus, EnrollmentStatus
from app.schemas.common import PartialUpdate


class CourseCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(..., pattern=r"^[A-Z0-9-]{2,20}$")
    title: str = Field(..., min_length=1, max_length=256)
    description: str | None = Field(None, max_length=10000)
    credits: int = Field(3, ge=1, le=20)
    difficulty: str | None = Field(None, max_length=32)
    estimated_hours: int | None = Field(None, ge=0, le=10000)
    objectives: list[str] | None = Field(None, max_length=50)
    faculty_id: int


class CourseUpdate(PartialUpdate):
    non_nullable = frozenset({"code", "title", "credits"})

    code: str | None = Field(None, pattern=r"^[A-Z0-9-]{2,20}$")
    title: str | None = Field(None, min_length=1, max_length=256)
    description: str | None = Field(None, max_length=10000)
    credits: int | None = Field(None, ge=1, le=20)
    difficulty: str | None = Field(None, max_length=32)
    estimated_hours: int | None = Field(None, ge=0, le=10000)
    objectives: list[str] | None = Field(None, max_length=50)


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    title: str
    description: str | None = None
    credits: int
    difficulty: str | None = None
    estimated_hours: int | None = None
    objectives: list[str] | None = None
    status: CourseStatus
    instructor_id: int
    organization_id: int
    faculty_id: int | None = None
    is_deleted: bool = False
    created_at: datetime
    updated_at: datetime


class MyCoursesResponse(BaseModel):
    teaching: list[CourseResponse]
    enrolled: list[CourseResponse]


class SoftDeleteRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: str | None = Field(None, max_length=500)


class ApprovalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    submitted_by_id: int
    reviewer_id: int
    status: CourseStatus
    submitted_at: datetime
    reviewed_at: datetime | None = None
    comments: str | None = None
    required_changes: list[str] | None = None
    content_score: int | None = None
    structure_score: int | None = None
    overall_score: int | None = None


class ApprovalReview(BaseModel):
    """
    심사 결정. REJECTED는 comments 필수, NEEDS_REVISION은 comments 또는 required_changes 필수.
    decision 허용값·필수 조건 위반은 서비스에서 400(BadRequestError).
    """

    model_config = ConfigDict(extra="forbid")

    decision: CourseStatus
    comments: str | None = Field(None, max_length=5000)
    required_changes: list[str] | None = Field(None, max_length=50)
    content_score: int | None = Field(None, ge=0, le=100)
    structure_score: int | None = Field(None, ge=0, le=100)
    overall_score: int | None = Field(None, ge=0, le=100)


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    student_id: int
    status: EnrollmentStatus
    enrolled_at: datetime
    completed_at: datetime | None = None


class EnrollmentStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: EnrollmentStatus
