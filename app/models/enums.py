"""상태·역할 열거형. DB에는 String 컬럼으로 저장하고 서비스/스키마에서 StrEnum으로 검증."""

from enum import StrEnum


class UserRole(StrEnum):
    STUDENT = "STUDENT"
    PROFESSOR = "PROFESSOR"
    INSTITUTION = "INSTITUTION"
    ORGANIZATION = "ORGANIZATION"
    ADMIN = "ADMIN"


class UserStatus(StrEnum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"
    REJECTED = "REJECTED"


class MemberRole(StrEnum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"
    ORGANIZATION_ADMIN = "ORGANIZATION_ADMIN"
    SCHOOL_ADMIN = "SCHOOL_ADMIN"
    FACULTY_ADMIN = "FACULTY_ADMIN"
    PROFESSOR = "PROFESSOR"
    STUDENT = "STUDENT"
    MEMBER = "MEMBER"


# 초대 발송 가능 역할
INVITER_ROLES = frozenset(
    {
        MemberRole.OWNER,
        MemberRole.ADMIN,
        MemberRole.SUPER_ADMIN,
        MemberRole.ORGANIZATION_ADMIN,
        MemberRole.SCHOOL_ADMIN,
        MemberRole.FACULTY_ADMIN,
    }
)
# 과목 심사·조직 운영
REVIEWER_ROLES = frozenset({MemberRole.OWNER, MemberRole.ADMIN})
SCHOOL_MANAGER_ROLES = frozenset(
    {
        MemberRole.OWNER,
        MemberRole.ADMIN,
        MemberRole.SUPER_ADMIN,
        MemberRole.ORGANIZATION_ADMIN,
        MemberRole.SCHOOL_ADMIN,
    }
)


class FollowRequestStatus(StrEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class InvitationStatus(StrEnum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class InvitationType(StrEnum):
    ORGANIZATION_MEMBER = "ORGANIZATION_MEMBER"
    PROFESSOR_APPOINTMENT = "PROFESSOR_APPOINTMENT"
    FACULTY_ASSIGNMENT = "FACULTY_ASSIGNMENT"


class CourseStatus(StrEnum):
    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    PUBLISHED = "PUBLISHED"
    REJECTED = "REJECTED"
    NEEDS_REVISION = "NEEDS_REVISION"


class EnrollmentStatus(StrEnum):
    ENROLLED = "ENROLLED"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"
    WAITLISTED = "WAITLISTED"


class NotificationType(StrEnum):
    FOLLOW = "FOLLOW"
    FOLLOW_REQUEST = "FOLLOW_REQUEST"
    FOLLOW_REQUEST_ACCEPTED = "FOLLOW_REQUEST_ACCEPTED"
    LIKE = "LIKE"
    COMMENT = "COMMENT"
    COURSE_APPROVAL_REQUEST = "COURSE_APPROVAL_REQUEST"
    COURSE_APPROVAL_RESULT = "COURSE_APPROVAL_RESULT"
    COURSE_ENROLLMENT = "COURSE_ENROLLMENT"
    INVITATION = "INVITATION"
    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"
    JOB_APPLICATION = "JOB_APPLICATION"
    SYSTEM_ANNOUNCEMENT = "SYSTEM_ANNOUNCEMENT"
    EVENT_REMINDER = "EVENT_REMINDER"
    EVENT_CAPACITY_WARNING = "EVENT_CAPACITY_WARNING"
    CLUB_JOIN = "CLUB_JOIN"


class JobType(StrEnum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    INTERNSHIP = "INTERNSHIP"
    CONTRACT = "CONTRACT"
    RESEARCH_ASSISTANT = "RESEARCH_ASSISTANT"
    TEACHING_ASSISTANT = "TEACHING_ASSISTANT"


class ApplicationStatus(StrEnum):
    PENDING = "PENDING"
    REVIEWING = "REVIEWING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class ClubStatus(StrEnum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


class ClubType(StrEnum):
    ACADEMIC = "ACADEMIC"
    SPORTS = "SPORTS"
    CULTURAL = "CULTURAL"
    SOCIAL = "SOCIAL"
    VOLUNTEER = "VOLUNTEER"
    OTHER = "OTHER"


class ClubMemberRole(StrEnum):
    PRESIDENT = "PRESIDENT"
    VICE_PRESIDENT = "VICE_PRESIDENT"
    ADVISOR = "ADVISOR"
    MEMBER = "MEMBER"


class EventStatus(StrEnum):
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class AttendanceStatus(StrEnum):
    REGISTERED = "REGISTERED"
    ATTENDED = "ATTENDED"
    CANCELLED = "CANCELLED"


class AuditAction(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    SOFT_DELETE = "SOFT_DELETE"
    RESTORE = "RESTORE"
    BULK_SOFT_DELETE = "BULK_SOFT_DELETE"
    HARD_DELETE = "HARD_DELETE"
    ACCEPT = "ACCEPT"
    DECLINE = "DECLINE"
    SUBMIT_APPROVAL = "SUBMIT_APPROVAL"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    REQUEST_REVISION = "REQUEST_REVISION"
    ROLE_CHANGE = "ROLE_CHANGE"
    ASSIGN = "ASSIGN"
    REMOVE = "REMOVE"
    CLEANUP_JOB = "CLEANUP_JOB"
    CLEANUP_JOB_FAILED = "CLEANUP_JOB_FAILED"


class AuditSource(StrEnum):
    API = "API"
    WORKER = "WORKER"


def parse_enum(enum_cls: type[StrEnum], value: str | None) -> StrEnum | None:
    """대소문자 무시 파싱. 알 수 없는 값은 None(필터 무시용)."""
    if value is None:
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        return None
