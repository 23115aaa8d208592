"""Research 스키마."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ResearchCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, max_length=256)
    description: str = Field(..., min_length=1, max_length=10000)
    field: str | None = Field(None, max_length=128)
    collaborators_needed: bool = False
    tags: list[str] | None = Field(None, max_length=30)


class ResearchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    title: str
    description: str
    field: str | None = None
    collaborators_needed: bool
    tags: list[str] | None = None
    created_at: datetime
