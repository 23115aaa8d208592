"""initial campusnet schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False
    )


def _soft_delete() -> list[sa.Column]:
    return [
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def _fk(column: str, target: str, *, nullable: bool = False, ondelete: str = "CASCADE") -> sa.Column:
    return sa.Column(column, sa.Integer(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def _flag(name: str, default: bool) -> sa.Column:
    return sa.Column(name, sa.Boolean(), server_default=sa.true() if default else sa.false(), nullable=False)


def upgrade() -> None:
    # --- users / skills
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("provider", sa.String(32), nullable=False),
        sa.Column("provider_user_id", sa.String(256), nullable=False),
        sa.Column("email", sa.String(256), nullable=True),
        sa.Column("name", sa.String(256), nullable=True),
        sa.Column("username", sa.String(64), nullable=True),
        sa.Column("bio", sa.String(255), nullable=True),
        sa.Column("website", sa.String(512), nullable=True),
        sa.Column("location", sa.String(128), nullable=True),
        sa.Column("avatar_url", sa.String(2048), nullable=True),
        sa.Column("cover_url", sa.String(2048), nullable=True),
        _flag("is_private", False),
        sa.Column("role", sa.String(32), server_default="STUDENT", nullable=False),
        sa.Column("status", sa.String(32), server_default="ACTIVE", nullable=False),
        sa.Column("refresh_token_version", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("provider", "provider_user_id", name="uq_user_provider_uid"),
        sa.UniqueConstraint("username", name="users_username_key"),
    )
    op.create_index("ix_users_provider", "users", ["provider"])
    op.create_index("ix_users_provider_user_id", "users", ["provider_user_id"])
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_status", "users", ["status"])

    op.create_table(
        "skills",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="skills_name_key"),
    )
    op.create_table(
        "user_skills",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("skill_id", "skills.id"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "skill_id", name="uq_user_skill"),
    )
    op.create_index("ix_user_skills_user_id", "user_skills", ["user_id"])

    # --- follows
    op.create_table(
        "follows",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("follower_id", "users.id"),
        _fk("following_id", "users.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("follower_id", "following_id", name="uq_follow_pair"),
        sa.CheckConstraint("follower_id <> following_id", name="ck_follow_not_self"),
    )
    op.create_index("ix_follows_follower_id", "follows", ["follower_id"])
    op.create_index("ix_follows_following_id", "follows", ["following_id"])

    op.create_table(
        "follow_requests",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("requester_id", "users.id"),
        _fk("target_id", "users.id"),
        sa.Column("status", sa.String(16), server_default="PENDING", nullable=False),
        _created_at(),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("requester_id", "target_id", name="uq_follow_request_pair"),
    )
    op.create_index("ix_follow_requests_requester_id", "follow_requests", ["requester_id"])
    op.create_index("ix_follow_requests_target_id", "follow_requests", ["target_id"])
    op.create_index("ix_follow_requests_status", "follow_requests", ["status"])

    # --- organization hierarchy
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("website", sa.String(512), nullable=True),
        sa.Column("logo_url", sa.String(2048), nullable=True),
        _flag("is_active", True),
        _fk("created_by_id", "users.id", nullable=True, ondelete="SET NULL"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="organizations_slug_key"),
    )
    op.create_table(
        "schools",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("organization_id", "organizations.id"),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _flag("is_active", True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "slug", name="uq_school_org_slug"),
    )
    op.create_index("ix_schools_organization_id", "schools", ["organization_id"])

    op.create_table(
        "faculties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("school_id", "schools.id"),
        _fk("organization_id", "organizations.id"),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("slug", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        _flag("is_active", True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("school_id", "slug", name="uq_faculty_school_slug"),
    )
    op.create_index("ix_faculties_school_id", "faculties", ["school_id"])
    op.create_index("ix_faculties_organization_id", "faculties", ["organization_id"])

    op.create_table(
        "members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("organization_id", "organizations.id"),
        _fk("faculty_id", "faculties.id", nullable=True, ondelete="SET NULL"),
        sa.Column("role", sa.String(32), server_default="MEMBER", nullable=False),
        _flag("is_active", True),
        sa.Column("academic_title", sa.String(128), nullable=True),
        sa.Column("department", sa.String(256), nullable=True),
        sa.Column("employment_type", sa.String(64), nullable=True),
        sa.Column("contract_start_date", sa.Date(), nullable=True),
        sa.Column("assigned_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "organization_id", name="uq_member_user_org"),
    )
    op.create_index("ix_members_user_id", "members", ["user_id"])
    op.create_index("ix_members_organization_id", "members", ["organization_id"])
    op.create_index("ix_members_faculty_id", "members", ["faculty_id"])

    # --- invitations
    op.create_table(
        "invitations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(256), nullable=False),
        sa.Column("token", sa.String(64), nullable=False),
        sa.Column("type", sa.String(32), server_default="ORGANIZATION_MEMBER", nullable=False),
        sa.Column("role", sa.String(32), server_default="MEMBER", nullable=False),
        sa.Column("status", sa.String(16), server_default="PENDING", nullable=False),
        _fk("organization_id", "organizations.id"),
        _fk("inviter_id", "users.id"),
        _fk("school_id", "schools.id", nullable=True, ondelete="SET NULL"),
        _fk("faculty_id", "faculties.id", nullable=True, ondelete="SET NULL"),
        sa.Column("first_name", sa.String(128), nullable=True),
        sa.Column("last_name", sa.String(128), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("proposed_title", sa.String(128), nullable=True),
        sa.Column("department", sa.String(256), nullable=True),
        sa.Column("contract_type", sa.String(64), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("responded_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("accepted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("declined_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("decline_reason", sa.String(500), nullable=True),
        sa.Column("reminder_count", sa.Integer(), server_default="0", nullable=False),
        sa.Column("last_reminder_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inviter_ip", sa.String(64), nullable=True),
        sa.Column("inviter_user_agent", sa.String(512), nullable=True),
        *_soft_delete(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token", name="invitations_token_key"),
    )
    op.create_index("ix_invitations_email", "invitations", ["email"])
    op.create_index("ix_invitations_organization_id", "invitations", ["organization_id"])
    op.create_index("ix_invitations_inviter_id", "invitations", ["inviter_id"])
    op.create_index("ix_invitations_is_deleted", "invitations", ["is_deleted"])
    op.create_index(
        "ix_invitations_email_org_status", "invitations", ["email", "organization_id", "status"]
    )
    op.create_index("ix_invitations_status_expires", "invitations", ["status", "expires_at"])

    # --- courses
    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("credits", sa.Integer(), server_default="3", nullable=False),
        sa.Column("difficulty", sa.String(32), nullable=True),
        sa.Column("estimated_hours", sa.Integer(), nullable=True),
        sa.Column("objectives", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("status", sa.String(32), server_default="DRAFT", nullable=False),
        _fk("instructor_id", "users.id"),
        _fk("organization_id", "organizations.id"),
        _fk("faculty_id", "faculties.id", nullable=True, ondelete="SET NULL"),
        *_soft_delete(),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_courses_code", "courses", ["code"])
    op.create_index("ix_courses_instructor_id", "courses", ["instructor_id"])
    op.create_index("ix_courses_organization_id", "courses", ["organization_id"])
    op.create_index("ix_courses_faculty_id", "courses", ["faculty_id"])
    op.create_index("ix_courses_is_deleted", "courses", ["is_deleted"])
    op.create_index("ix_courses_status_deleted", "courses", ["status", "is_deleted"])

    op.create_table(
        "course_approvals",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("course_id", "courses.id"),
        _fk("submitted_by_id", "users.id"),
        _fk("reviewer_id", "users.id"),
        sa.Column("status", sa.String(32), server_default="UNDER_REVIEW", nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("required_changes", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("content_score", sa.Integer(), nullable=True),
        sa.Column("structure_score", sa.Integer(), nullable=True),
        sa.Column("overall_score", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_course_approvals_course_id", "course_approvals", ["course_id"])
    op.create_index("ix_course_approvals_reviewer_id", "course_approvals", ["reviewer_id"])
    op.create_index("ix_course_approvals_status", "course_approvals", ["status"])

    op.create_table(
        "enrollments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("course_id", "courses.id"),
        _fk("student_id", "users.id"),
        sa.Column("status", sa.String(32), server_default="ENROLLED", nullable=False),
        sa.Column("enrolled_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("course_id", "student_id", name="uq_enrollment_course_student"),
    )
    op.create_index("ix_enrollments_course_id", "enrollments", ["course_id"])
    op.create_index("ix_enrollments_student_id", "enrollments", ["student_id"])

    # --- posts
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("author_id", "users.id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(2048), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_posts_author_id", "posts", ["author_id"])

    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("post_id", "posts.id"),
        _fk("author_id", "users.id"),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_comments_post_id", "comments", ["post_id"])

    op.create_table(
        "likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("post_id", "posts.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_like_user_post"),
    )
    op.create_index("ix_likes_post_id", "likes", ["post_id"])

    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("post_id", "posts.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "post_id", name="uq_bookmark_user_post"),
    )
    op.create_index("ix_bookmarks_user_id", "bookmarks", ["user_id"])

    # --- jobs
    op.create_table(
        "jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("owner_id", "users.id"),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.String(1000), nullable=False),
        sa.Column("weekly_hours", sa.Integer(), nullable=True),
        sa.Column("location", sa.String(256), nullable=True),
        sa.Column("job_type", sa.String(32), server_default="FULL_TIME", nullable=False),
        sa.Column("experience_level", sa.String(64), nullable=True),
        sa.Column("duration", sa.String(64), nullable=True),
        sa.Column("salary", sa.String(128), nullable=True),
        sa.Column("requirements", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("required_skills", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("application_deadline", sa.Date(), nullable=True),
        _flag("is_open", True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_jobs_owner_id", "jobs", ["owner_id"])
    op.create_index("ix_jobs_is_open", "jobs", ["is_open"])

    op.create_table(
        "job_courses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("job_id", "jobs.id"),
        _fk("course_id", "courses.id"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_id", "course_id", name="uq_job_course"),
    )
    op.create_index("ix_job_courses_job_id", "job_courses", ["job_id"])

    op.create_table(
        "job_applications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("job_id", "jobs.id"),
        _fk("applicant_id", "users.id"),
        sa.Column("status", sa.String(16), server_default="PENDING", nullable=False),
        sa.Column("cover_letter", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("job_id", "applicant_id", name="uq_job_application"),
    )
    op.create_index("ix_job_applications_job_id", "job_applications", ["job_id"])
    op.create_index("ix_job_applications_applicant_id", "job_applications", ["applicant_id"])

    op.create_table(
        "saved_jobs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("job_id", "jobs.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "job_id", name="uq_saved_job"),
    )
    op.create_index("ix_saved_jobs_user_id", "saved_jobs", ["user_id"])

    op.create_table(
        "job_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("job_id", "jobs.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "job_id", name="uq_job_like"),
    )
    op.create_index("ix_job_likes_job_id", "job_likes", ["job_id"])

    # --- researches
    op.create_table(
        "researches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("owner_id", "users.id"),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("field", sa.String(128), nullable=True),
        _flag("collaborators_needed", False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_researches_owner_id", "researches", ["owner_id"])

    op.create_table(
        "research_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("research_id", "researches.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "research_id", name="uq_research_like"),
    )
    op.create_index("ix_research_likes_research_id", "research_likes", ["research_id"])

    op.create_table(
        "saved_researches",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("research_id", "researches.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "research_id", name="uq_saved_research"),
    )
    op.create_index("ix_saved_researches_user_id", "saved_researches", ["user_id"])

    # --- clubs
    op.create_table(
        "clubs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("club_type", sa.String(32), server_default="OTHER", nullable=False),
        sa.Column("status", sa.String(16), server_default="ACTIVE", nullable=False),
        _fk("organization_id", "organizations.id"),
        _fk("faculty_id", "faculties.id", nullable=True, ondelete="SET NULL"),
        _fk("created_by_id", "users.id"),
        _flag("is_public", True),
        _flag("is_active", True),
        sa.Column("max_members", sa.Integer(), nullable=True),
        sa.Column("logo_url", sa.String(2048), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clubs_organization_id", "clubs", ["organization_id"])
    op.create_index("ix_clubs_faculty_id", "clubs", ["faculty_id"])

    op.create_table(
        "club_members",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("club_id", "clubs.id"),
        _fk("user_id", "users.id"),
        sa.Column("role", sa.String(16), server_default="MEMBER", nullable=False),
        _flag("is_active", True),
        sa.Column("joined_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "club_id", name="uq_club_member"),
    )
    op.create_index("ix_club_members_club_id", "club_members", ["club_id"])
    op.create_index("ix_club_members_user_id", "club_members", ["user_id"])

    op.create_table(
        "club_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("club_id", "clubs.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "club_id", name="uq_club_like"),
    )
    op.create_index("ix_club_likes_club_id", "club_likes", ["club_id"])

    # --- events
    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(256), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("location", sa.String(256), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("registration_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_attendees", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(16), server_default="DRAFT", nullable=False),
        _fk("club_id", "clubs.id", nullable=True, ondelete="SET NULL"),
        _fk("created_by_id", "users.id"),
        _flag("is_active", True),
        _flag("reminder_sent", False),
        _flag("capacity_warning_sent", False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_events_club_id", "events", ["club_id"])
    op.create_index("ix_events_created_by_id", "events", ["created_by_id"])
    op.create_index("ix_events_status_start", "events", ["status", "start_at"])

    op.create_table(
        "event_attendees",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("event_id", "events.id"),
        _fk("user_id", "users.id"),
        sa.Column("status", sa.String(16), server_default="REGISTERED", nullable=False),
        sa.Column("registered_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "event_id", name="uq_event_attendee"),
    )
    op.create_index("ix_event_attendees_event_id", "event_attendees", ["event_id"])
    op.create_index("ix_event_attendees_user_id", "event_attendees", ["user_id"])

    op.create_table(
        "event_likes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _fk("user_id", "users.id"),
        _fk("event_id", "events.id"),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "event_id", name="uq_event_like"),
    )
    op.create_index("ix_event_likes_event_id", "event_likes", ["event_id"])

    # --- notifications / audit
    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("type", sa.String(40), nullable=False),
        _fk("recipient_id", "users.id"),
        _fk("issuer_id", "users.id", nullable=True),
        _fk("post_id", "posts.id", nullable=True),
        _fk("comment_id", "comments.id", nullable=True),
        _fk("course_id", "courses.id", nullable=True),
        _fk("job_id", "jobs.id", nullable=True),
        _fk("research_id", "researches.id", nullable=True),
        _fk("invitation_id", "invitations.id", nullable=True),
        _fk("club_id", "clubs.id", nullable=True),
        _fk("event_id", "events.id", nullable=True),
        sa.Column("title", sa.String(256), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        _flag("is_read", False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_recipient_id", "notifications", ["recipient_id"])
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"])
    op.create_index("ix_notifications_recipient_read", "notifications", ["recipient_id", "is_read"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("entity_type", sa.String(64), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(32), nullable=False),
        _fk("actor_id", "users.id", nullable=True, ondelete="SET NULL"),
        sa.Column("source", sa.String(16), server_default="API", nullable=False),
        sa.Column("previous_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("new_data", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_logs_entity", "audit_logs", ["entity_type", "entity_id"])
    op.create_index("ix_audit_logs_action_created", "audit_logs", ["action", "created_at"])


def downgrade() -> None:
    for table in (
        "audit_logs",
        "notifications",
        "event_likes",
        "event_attendees",
        "events",
        "club_likes",
        "club_members",
        "clubs",
        "saved_researches",
        "research_likes",
        "researches",
        "job_likes",
        "saved_jobs",
        "job_applications",
        "job_courses",
        "jobs",
        "bookmarks",
        "likes",
        "comments",
        "posts",
        "enrollments",
        "course_approvals",
        "courses",
        "invitations",
        "members",
        "faculties",
        "schools",
        "organizations",
        "follow_requests",
        "follows",
        "user_skills",
        "skills",
        "users",
    ):
        op.drop_table(table)
