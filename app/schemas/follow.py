"""Follow·FollowRequest 스키마."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from app.models.enums import FollowRequestStatus
from app.schemas.user import UserSummary


class FollowState(StrEnum):
    """follow() 결과 관계 상태."""

    FOLLOWING = "FOLLOWING"
    REQUESTED = "REQUESTED"
    NONE = "NONE"


class FollowResult(BaseModel):
    state: FollowState
    request_id: int | None = None


class FollowerInfo(BaseModel):
    follower_count: int
    is_followed_by_user: bool
    has_pending_request: bool


class FollowRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    requester_id: int
    target_id: int
    status: FollowRequestStatus
    created_at: datetime
    responded_at: datetime | None = None


class SuggestedUser(UserSummary):
    follower_count: int = 0
