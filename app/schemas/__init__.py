# Pydantic schemas
from app.schemas.auth import RefreshTokenPayload, TokenPayload, TokenResponse
from app.schemas.common import CursorPage, OffsetPage, ToggleResponse
from app.schemas.user import UserBase, UserResponse, UserSummary

__all__ = [
    "CursorPage",
    "OffsetPage",
    "RefreshTokenPayload",
    "ToggleResponse",
    "TokenPayload",
    "TokenResponse",
    "UserBase",
    "UserResponse",
    "UserSummary",
]
