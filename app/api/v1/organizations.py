"""Organizations API. 조직·스쿨·학부 계층과 멤버 관리."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.auth import get_current_active_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.organization import (
    FacultyCreate,
    FacultyResponse,
    FacultyUpdate,
    HierarchyResponse,
    MemberFacultyAssign,
    MemberResponse,
    MemberRoleUpdate,
    OrganizationCreate,
    OrganizationResponse,
    SchoolCreate,
    SchoolResponse,
    SchoolUpdate,
)
from app.services import organization_service

router = APIRouter(prefix="/organizations", tags=["organizations"])


@router.post("", response_model=OrganizationResponse, status_code=201)
async def post_organization(
    payload: OrganizationCreate,
    current_user: User = Depends(get_current_active_user),
) -> OrganizationResponse:
    return await organization_service.create_organization(current_user.id, payload)


@router.get("/mine", response_model=list[OrganizationResponse])
async def get_my_organizations(
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[OrganizationResponse]:
    return await organization_service.list_my_organizations(session, current_user.id)


@router.get("/by-slug/{slug}", response_model=OrganizationResponse)
async def get_organization_by_slug(
    slug: str, session: AsyncSession = Depends(get_db)
) -> OrganizationResponse:
    return await organization_service.get_organization_by_slug(session, slug)


@router.get("/{org_id}/hierarchy", response_model=HierarchyResponse)
async def get_hierarchy(org_id: int, session: AsyncSession = Depends(get_db)) -> HierarchyResponse:
    """활성 스쿨 → 활성 학부(교수 수, 과목 수), 이름순."""
    return await organization_service.get_hierarchy(session, org_id)


@router.post("/{org_id}/schools", response_model=SchoolResponse, status_code=201)
async def post_school(
    org_id: int,
    payload: SchoolCreate,
    current_user: User = Depends(get_current_active_user),
) -> SchoolResponse:
    return await organization_service.create_school(current_user.id, org_id, payload)


@router.patch("/schools/{school_id}", response_model=SchoolResponse)
async def patch_school(
    school_id: int,
    payload: SchoolUpdate,
    current_user: User = Depends(get_current_active_user),
) -> SchoolResponse:
    return await organization_service.update_school(current_user.id, school_id, payload)


@router.delete("/schools/{school_id}", response_model=SchoolResponse)
async def delete_school(
    school_id: int,
    current_user: User = Depends(get_current_active_user),
) -> SchoolResponse:
    return await organization_service.deactivate_school(current_user.id, school_id)


@router.post("/schools/{school_id}/faculties", response_model=FacultyResponse, status_code=201)
async def post_faculty(
    school_id: int,
    payload: FacultyCreate,
    current_user: User = Depends(get_current_active_user),
) -> FacultyResponse:
    return await organization_service.create_faculty(current_user.id, school_id, payload)


@router.patch("/faculties/{faculty_id}", response_model=FacultyResponse)
async def patch_faculty(
    faculty_id: int,
    payload: FacultyUpdate,
    current_user: User = Depends(get_current_active_user),
) -> FacultyResponse:
    return await organization_service.update_faculty(current_user.id, faculty_id, payload)


@router.delete("/faculties/{faculty_id}", response_model=FacultyResponse)
async def delete_faculty(
    faculty_id: int,
    current_user: User = Depends(get_current_active_user),
) -> FacultyResponse:
    return await organization_service.deactivate_faculty(current_user.id, faculty_id)


@router.get("/{org_id}/members", response_model=list[MemberResponse])
async def get_members(
    org_id: int,
    current_user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_db),
) -> list[MemberResponse]:
    return await organization_service.list_members(session, current_user.id, org_id)


@router.put("/members/{member_id}/faculty", response_model=MemberResponse)
async def put_member_faculty(
    member_id: int,
    payload: MemberFacultyAssign,
    current_user: User = Depends(get_current_active_user),
) -> MemberResponse:
    return await organization_service.assign_member_faculty(
        current_user.id, member_id, payload.faculty_id
    )


@router.patch("/members/{member_id}/role", response_model=MemberResponse)
async def patch_member_role(
    member_id: int,
    payload: MemberRoleUpdate,
    current_user: User = Depends(get_current_active_user),
) -> MemberResponse:
    return await organization_service.update_member_role(current_user.id, member_id, payload.role)


@router.delete("/members/{member_id}", response_model=MemberResponse)
async def delete_member(
    member_id: int,
    current_user: User = Depends(get_current_active_user),
) -> MemberResponse:
    return await organization_service.deactivate_member(current_user.id, member_id)
