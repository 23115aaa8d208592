"""서비스 예외. 라우터는 잡지 않고 main.py의 핸들러가 JSON 응답으로 변환한다.

응답 형식: {"detail": <메시지>, "code": <식별자>}.
"""

from typing import Any


class ServiceError(Exception):
    """서비스 레이어 예외 베이스. status_code는 HTTP 상태로 그대로 사용."""

    status_code: int = 500
    code: str = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            body["details"] = self.details
        return body


class BadRequestError(ServiceError):
    """입력은 스키마상 유효하지만 현재 상태에서 허용되지 않음."""

    status_code = 400
    code = "BAD_REQUEST"


class PermissionDeniedError(ServiceError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(ServiceError):
    """중복 상태(이미 팔로우, 이미 심사 중 등) 또는 허용되지 않는 상태 전이."""

    status_code = 409
    code = "CONFLICT"


class UnavailableError(ServiceError):
    status_code = 503
    code = "UNAVAILABLE"
