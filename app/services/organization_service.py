"""Organization Service. 조직 계층(조직 → 스쿨 → 학부)과 멤버 관리, 멤버 권한 검사 헬퍼."""

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import transaction
from app.core.exceptions import BadRequestError, ConflictError, NotFoundError, PermissionDeniedError
from app.models.enums import SCHOOL_MANAGER_ROLES, AuditAction, MemberRole
from app.models.organization import Faculty, Member, Organization, School
from app.repositories import organization_repository as repo
from app.schemas.organization import (
    FacultyCreate,
    FacultyNode,
    FacultyResponse,
    FacultyUpdate,
    HierarchyResponse,
    MemberResponse,
    OrganizationCreate,
    OrganizationResponse,
    SchoolCreate,
    SchoolNode,
    SchoolResponse,
    SchoolUpdate,
)
from app.services.audit_service import create_audit_log, snapshot

logger = logging.getLogger(__name__)


async def require_member(
    session: AsyncSession,
    user_id: int,
    org_id: int,
    roles: Iterable[MemberRole] | None = None,
    *,
    message: str = "You do not have permission for this organization",
) -> Member:
    """활성 멤버이고 (roles 지정 시) 역할이 포함되어야 한다. 아니면 403."""
    member = await repo.get_member(session, user_id, org_id)
    if member is None:
        raise PermissionDeniedError(message)
    if roles is not None and member.role not in {str(r) for r in roles}:
        raise PermissionDeniedError(message)
    return member


async def can_manage_faculty(session: AsyncSession, user_id: int, faculty: Faculty) -> bool:
    """스쿨 관리자 역할이거나, 해당 학부에 배정된 FACULTY_ADMIN."""
    member = await repo.get_member(session, user_id, faculty.organization_id)
    if member is None:
        return False
    if member.role in {str(r) for r in SCHOOL_MANAGER_ROLES}:
        return True
    return member.role == MemberRole.FACULTY_ADMIN and member.faculty_id == faculty.id


async def create_organization(user_id: int, payload: OrganizationCreate) -> OrganizationResponse:
    """slug 중복 409. 생성자는 OWNER 멤버."""
    async with transaction() as session:
        if await repo.get_organization_by_slug(session, payload.slug) is not None:
            raise ConflictError("Organization slug already exists", code="SLUG_TAKEN")
        org = await repo.add(
            session, Organization(**payload.model_dump(), created_by_id=user_id)
        )
        await repo.add(
            session,
            Member(user_id=user_id, organization_id=org.id, role=MemberRole.OWNER),
        )
        await create_audit_log(
            session, "organizations", org.id, AuditAction.CREATE,
            actor_id=user_id, new_data=snapshot(org),
        )
        return OrganizationResponse.model_validate(org)


async def list_my_organizations(session: AsyncSession, user_id: int) -> list[OrganizationResponse]:
    rows = await repo.list_user_organizations(session, user_id)
    return [OrganizationResponse.model_validate(o) for o in rows]


async def get_organization_by_slug(session: AsyncSession, slug: str) -> OrganizationResponse:
    org = await repo.get_organization_by_slug(session, slug)
    if org is None or not org.is_active:
        raise NotFoundError("Organization not found")
    return OrganizationResponse.model_validate(org)


async def create_school(user_id: int, org_id: int, payload: SchoolCreate) -> SchoolResponse:
    async with transaction() as session:
        if await repo.get_organization(session, org_id) is None:
            raise NotFoundError("Organization not found")
        await require_member(session, user_id, org_id, SCHOOL_MANAGER_ROLES)
        if await repo.school_slug_exists(session, org_id, payload.slug):
            raise ConflictError("School slug already exists", code="SLUG_TAKEN")
        school = await repo.add(session, School(organization_id=org_id, **payload.model_dump()))
        await create_audit_log(
            session, "schools", school.id, AuditAction.CREATE,
            actor_id=user_id, new_data=snapshot(school),
        )
        return SchoolResponse.model_validate(school)


async def _load_school_for_manager(session: AsyncSession, user_id: int, school_id: int) -> School:
    school = await repo.get_school(session, school_id)
    if school is None:
        raise NotFoundError("School not found")
    await require_member(session, user_id, school.organization_id, SCHOOL_MANAGER_ROLES)
    return school


async def update_school(user_id: int, school_id: int, payload: SchoolUpdate) -> SchoolResponse:
    async with transaction() as session:
        school = await _load_school_for_manager(session, user_id, school_id)
        changes = payload.model_dump(exclude_unset=True)
        if "slug" in changes and changes["slug"] != school.slug:
            if await repo.school_slug_exists(session, school.organization_id, changes["slug"]):
                raise ConflictError("School slug already exists", code="SLUG_TAKEN")
        before = snapshot(school)
        for key, value in changes.items():
            setattr(school, key, value)
        await session.flush()
        await create_audit_log(
            session, "schools", school.id, AuditAction.UPDATE,
            actor_id=user_id, previous_data=before, new_data=snapshot(school),
        )
        return SchoolResponse.model_validate(school)


async def deactivate_school(user_id: int, school_id: int) -> SchoolResponse:
    async with transaction() as session:
        school = await _load_school_for_manager(session, user_id, school_id)
        if not school.is_active:
            raise ConflictError("School already inactive")
        school.is_active = False
        await session.flush()
        await create_audit_log(
            session, "schools", school.id, AuditAction.DELETE, actor_id=user_id,
        )
        return SchoolResponse.model_validate(school)


async def create_faculty(user_id: int, school_id: int, payload: FacultyCreate) -> FacultyResponse:
    """학부 신설은 스쿨 관리자 역할만(FACULTY_ADMIN 불가)."""
    async with transaction() as session:
        school = await _load_school_for_manager(session, user_id, school_id)
        if not school.is_active:
            raise BadRequestError("School is inactive")
        if await repo.faculty_slug_exists(session, school_id, payload.slug):
            raise ConflictError("Faculty slug already exists", code="SLUG_TAKEN")
        faculty = await repo.add(
            session,
            Faculty(
                school_id=school_id,
                organization_id=school.organization_id,
                **payload.model_dump(),
            ),
        )
        await create_audit_log(
            session, "faculties", faculty.id, AuditAction.CREATE,
            actor_id=user_id, new_data=snapshot(faculty),
        )
        return FacultyResponse.model_validate(faculty)


async def _load_faculty_for_manager(session: AsyncSession, user_id: int, faculty_id: int) -> Faculty:
    faculty = await repo.get_faculty(session, faculty_id)
    if faculty is None:
        raise NotFoundError("Faculty not found")
    if not await can_manage_faculty(session, user_id, faculty):
        raise PermissionDeniedError("You cannot manage this faculty")
    return faculty


async def update_faculty(user_id: int, faculty_id: int, payload: FacultyUpdate) -> FacultyResponse:
    async with transaction() as session:
        faculty = await _load_faculty_for_manager(session, user_id, faculty_id)
        changes = payload.model_dump(exclude_unset=True)
        if "slug" in changes and changes["slug"] != faculty.slug:
            if await repo.faculty_slug_exists(session, faculty.school_id, changes["slug"]):
                raise ConflictError("Faculty slug already exists", code="SLUG_TAKEN")
        before = snapshot(faculty)
        for key, value in changes.items():
            setattr(faculty, key, value)
        await session.flush()
        await create_audit_log(
            session, "faculties", faculty.id, AuditAction.UPDATE,
            actor_id=user_id, previous_data=before, new_data=snapshot(faculty),
        )
        return FacultyResponse.model_validate(faculty)


async def deactivate_faculty(user_id: int, faculty_id: int) -> FacultyResponse:
    async with transaction() as session:
        faculty = await _load_faculty_for_manager(session, user_id, faculty_id)
        if not faculty.is_active:
            raise ConflictError("Faculty already inactive")
        faculty.is_active = False
        await session.flush()
        await create_audit_log(
            session, "faculties", faculty.id, AuditAction.DELETE, actor_id=user_id,
        )
        return FacultyResponse.model_validate(faculty)


async def get_hierarchy(session: AsyncSession, org_id: int) -> HierarchyResponse:
    """활성 스쿨 → 활성 학부(교수 수, 과목 수). 모두 이름순."""
    org = await repo.get_organization(session, org_id)
    if org is None or not org.is_active:
        raise NotFoundError("Organization not found")
    schools = await repo.list_active_schools(session, org_id)
    faculties = await repo.list_active_faculties_with_counts(session, org_id)
    by_school: dict[int, list[FacultyNode]] = {}
    for faculty, professors, courses in faculties:
        node = FacultyNode.model_validate(faculty).model_copy(
            update={"professor_count": professors, "course_count": courses}
        )
        by_school.setdefault(faculty.school_id, []).append(node)
    return HierarchyResponse(
        organization=OrganizationResponse.model_validate(org),
        schools=[
            SchoolNode.model_validate(s).model_copy(update={"faculties": by_school.get(s.id, [])})
            for s in schools
        ],
    )


async def list_members(session: AsyncSession, user_id: int, org_id: int) -> list[MemberResponse]:
    """조직 멤버만 조회 가능."""
    await require_member(session, user_id, org_id)
    rows = await repo.list_members(session, org_id)
    return [MemberResponse.model_validate(m) for m in rows]


async def _load_member_for_manager(session: AsyncSession, actor_id: int, member_id: int) -> tuple[Member, Member]:
    member = await repo.get_member_by_id(session, member_id)
    if member is None:
        raise NotFoundError("Member not found")
    actor = await require_member(session, actor_id, member.organization_id, SCHOOL_MANAGER_ROLES)
    return member, actor


async def assign_member_faculty(actor_id: int, member_id: int, faculty_id: int) -> MemberResponse:
    """학부는 멤버와 같은 조직 소속이어야 한다(아니면 400)."""
    async with transaction() as session:
        member, _ = await _load_member_for_manager(session, actor_id, member_id)
        faculty = await repo.get_faculty(session, faculty_id)
        if faculty is None:
            raise NotFoundError("Faculty not found")
        if faculty.organization_id != member.organization_id:
            raise BadRequestError("Faculty belongs to a different organization")
        before = snapshot(member)
        member.faculty_id = faculty_id
        await session.flush()
        await create_audit_log(
            session, "members", member.id, AuditAction.ASSIGN,
            actor_id=actor_id, previous_data=before, new_data=snapshot(member),
        )
        return MemberResponse.model_validate(member)


async def update_member_role(actor_id: int, member_id: int, role: MemberRole) -> MemberResponse:
    """OWNER 부여는 OWNER만."""
    async with transaction() as session:
        member, actor = await _load_member_for_manager(session, actor_id, member_id)
        if role == MemberRole.OWNER and actor.role != MemberRole.OWNER:
            raise PermissionDeniedError("Only an owner can grant the OWNER role")
        before = snapshot(member)
        member.role = role
        await session.flush()
        await create_audit_log(
            session, "members", member.id, AuditAction.UPDATE,
            actor_id=actor_id, previous_data=before, new_data=snapshot(member),
        )
        return MemberResponse.model_validate(member)


async def deactivate_member(actor_id: int, member_id: int) -> MemberResponse:
    async with transaction() as session:
        member, _ = await _load_member_for_manager(session, actor_id, member_id)
        if not member.is_active:
            raise ConflictError("Member already inactive")
        before = snapshot(member)
        member.is_active = False
        await session.flush()
        await create_audit_log(
            session, "members", member.id, AuditAction.REMOVE,
            actor_id=actor_id, previous_data=before, new_data=snapshot(member),
        )
        return MemberResponse.model_validate(member)
