"""Invitation 스키마. token은 어떤 응답에도 포함하지 않는다."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.enums import InvitationStatus, InvitationType, MemberRole


class InvitationCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    organization_id: int
    role: MemberRole = MemberRole.MEMBER
    type: InvitationType = InvitationType.ORGANIZATION_MEMBER
    first_name: str | None = Field(None, max_length=128)
    last_name: str | None = Field(None, max_length=128)
    message: str | None = Field(None, max_length=2000)
    proposed_title: str | None = Field(None, max_length=128)
    department: str | None = Field(None, max_length=256)
    contract_type: str | None = Field(None, max_length=64)
    start_date: date | None = None
    faculty_id: int | None = None
    school_id: int | None = None
    expires_at: datetime | None = Field(
        None, description="미지정 시 기본 만료일. (now, now+최대일] 범위여야 함."
    )


class InvitationResponse(BaseModel):
    """초대자용 상세. token 미포함."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    type: InvitationType
    role: MemberRole
    status: InvitationStatus
    organization_id: int
    inviter_id: int
    school_id: int | None = None
    faculty_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    message: str | None = None
    proposed_title: str | None = None
    department: str | None = None
    contract_type: str | None = None
    start_date: date | None = None
    expires_at: datetime
    sent_at: datetime | None = None
    responded_at: datetime | None = None
    accepted_at: datetime | None = None
    declined_at: datetime | None = None
    cancelled_at: datetime | None = None
    decline_reason: str | None = None
    created_at: datetime


class PublicInvitationResponse(BaseModel):
    """토큰 링크로 조회하는 공개 정보. 초대자 IP/UA, 사유 등 민감 필드 제거."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    type: InvitationType
    role: MemberRole
    organization_id: int
    first_name: str | None = None
    last_name: str | None = None
    message: str | None = None
    proposed_title: str | None = None
    department: str | None = None
    expires_at: datetime


class InvitationDecline(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: str | None = Field(None, max_length=500)


class InvitationFilters(BaseModel):
    """목록 필터. 잘못된 enum 값은 무시(서비스에서 parse_enum)."""

    status: str | None = None
    type: str | None = None
    organization_id: int | None = None
    include_expired: bool = False
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
