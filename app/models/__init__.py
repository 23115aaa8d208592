# ORM models. Alembic autogenerate가 전체 메타데이터를 보도록 여기서 모두 import.
from app.models.audit_log import AuditLog
from app.models.base import Base
from app.models.club import Club, ClubLike, ClubMember
from app.models.course import Course, CourseApproval, Enrollment
from app.models.event import Event, EventAttendee, EventLike
from app.models.follow import Follow, FollowRequest
from app.models.invitation import Invitation
from app.models.job import Job, JobApplication, JobCourse, JobLike, SavedJob
from app.models.notification import Notification
from app.models.organization import Faculty, Member, Organization, School
from app.models.post import Bookmark, Comment, Like, Post
from app.models.research import Research, ResearchLike, SavedResearch
from app.models.user import Skill, User, UserSkill

__all__ = [
    "AuditLog",
    "Base",
    "Bookmark",
    "Club",
    "ClubLike",
    "ClubMember",
    "Comment",
    "Course",
    "CourseApproval",
    "Enrollment",
    "Event",
    "EventAttendee",
    "EventLike",
    "Faculty",
    "Follow",
    "FollowRequest",
    "Invitation",
    "Job",
    "JobApplication",
    "JobCourse",
    "JobLike",
    "Like",
    "Member",
    "Notification",
    "Organization",
    "Post",
    "Research",
    "ResearchLike",
    "SavedJob",
    "SavedResearch",
    "School",
    "Skill",
    "User",
    "UserSkill",
]
