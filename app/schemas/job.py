"""Job·JobApplication·매칭 스키마."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.enums import ApplicationStatus, JobType


class JobCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1, max_length=1000)
    weekly_hours: int | None = Field(None, ge=0, le=100)
    location: str | None = Field(None, max_length=256)
    job_type: JobType = JobType.FULL_TIME
    experience_level: str | None = Field(None, max_length=64)
    duration: str | None = Field(None, max_length=64)
    salary: str | None = Field(None, max_length=128)
    requirements: list[str] | None = Field(None, max_length=50)
    required_skills: list[str] | None = Field(None, max_length=50)
    required_course_ids: list[int] | None = Field(None, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    application_deadline: date | None = None


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    title: str
    description: str
    weekly_hours: int | None = None
    location: str | None = None
    job_type: JobType
    experience_level: str | None = None
    duration: str | None = None
    salary: str | None = None
    requirements: list[str] | None = None
    required_skills: list[str] | None = None
    start_date: date | None = None
    end_date: date | None = None
    application_deadline: date | None = None
    is_open: bool
    created_at: datetime


class ApplicationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    cover_letter: str | None = Field(None, max_length=5000)


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    job_id: int
    applicant_id: int
    status: ApplicationStatus
    cover_letter: str | None = None
    created_at: datetime
    updated_at: datetime


class ApplicationStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: ApplicationStatus


class SavedStatus(BaseModel):
    is_saved: bool


class JobMatch(BaseModel):
    job_id: int
    skill_match_percentage: float
    course_match_percentage: float
    overall_match_percentage: float
    missing_skills: list[str] = Field(default_factory=list)
    missing_courses: list[str] = Field(default_factory=list)


class JobMatchResult(JobMatch):
    job: JobResponse
