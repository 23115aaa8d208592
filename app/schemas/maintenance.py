"""정리 잡 결과·통계 스키마 (내부 API)."""

from datetime import datetime

from pydantic import BaseModel


class CleanupResult(BaseModel):
    expired_invitations: int = 0
    purged_courses: int = 0
    purged_invitations: int = 0
    deleted_audit_logs: int = 0
    deleted_notifications: int = 0
    reminded_invitations: int = 0


class CleanupStats(BaseModel):
    pending_invitations: int
    expired_invitations: int
    soft_deleted_courses: int
    soft_deleted_invitations: int
    total_audit_logs: int
    old_audit_logs: int
    unread_notifications: int
    last_cleanup_at: datetime | None = None
    last_cleanup_status: str | None = None
