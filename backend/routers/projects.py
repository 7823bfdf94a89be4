# routers/projects.py — Projects and project membership
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from access import require_project_role
from assignments import remove_member_assignments
from auth import get_current_user, CurrentUser
from board_registry import create_default_boards
from database import get_db_session, transaction
from errors import NotFoundError, ValidationFailed
from models import Priority, Project, ProjectMember, ProjectRole, ProjectStatus, User
from schemas import CamelModel, MemberOut, MessageOut, ProjectOut, member_out, project_out

logger = logging.getLogger("opsdesk.projects")

router = APIRouter(prefix="/api/v1/projects", tags=["Projects"])


# ============================================================
# SCHEMAS
# ============================================================

class ProjectCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.ACTIVE
    priority: Priority = Priority.MEDIUM
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    color_code: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    member_ids: List[int] = Field(default_factory=list)


class MemberAdd(CamelModel):
    user_id: int = Field(..., gt=0)
    role: ProjectRole = ProjectRole.MEMBER


class MemberRoleUpdate(CamelModel):
    member_id: int = Field(..., gt=0)
    role: ProjectRole


# ============================================================
# HELPERS
# ============================================================

async def _company_users(db: AsyncSession, company_id: int, user_ids: List[int]) -> List[int]:
    if not user_ids:
        return []
    stmt = select(User.id).where(
        User.id.in_(user_ids),
        User.company_id == company_id,
        User.soft_delete.is_(False),
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _admin_count(db: AsyncSession, project_id: int) -> int:
    stmt = select(func.count(ProjectMember.id)).where(
        ProjectMember.project_id == project_id,
        ProjectMember.role == ProjectRole.ADMIN,
    )
    result = await db.execute(stmt)
    return result.scalar() or 0


async def _get_member(db: AsyncSession, project_id: int, member_id: int) -> ProjectMember:
    stmt = select(ProjectMember).where(
        ProjectMember.id == member_id,
        ProjectMember.project_id == project_id,
    )
    result = await db.execute(stmt)
    member = result.scalar_one_or_none()
    if not member:
        raise NotFoundError("Member not found")
    return member


async def _member_with_user(db: AsyncSession, member: ProjectMember) -> MemberOut:
    user = await db.get(User, member.user_id)
    return member_out(member, user.name if user else None, user.email if user else None)


# ============================================================
# PROJECT ENDPOINTS
# ============================================================

@router.get("", response_model=List[ProjectOut])
async def list_projects(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Projects of the caller's company the caller belongs to (company admins see all)"""
    stmt = select(Project).where(
        Project.company_id == user.company_id,
        Project.soft_delete.is_(False),
    )
    if not user.is_company_admin:
        member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == user.id)
        stmt = stmt.where(Project.id.in_(member_of))
    result = await db.execute(stmt.order_by(Project.created_at.desc(), Project.id.desc()))
    return [project_out(p) for p in result.scalars().all()]


@router.post("", response_model=ProjectOut, status_code=201)
async def create_project(
    data: ProjectCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a project with the caller as admin and the default boards"""
    if user.company_id is None:
        raise ValidationFailed("User is not attached to a company")

    async with transaction(db):
        project = Project(
            company_id=user.company_id,
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            start_date=data.start_date,
            end_date=data.end_date,
            color_code=data.color_code,
            soft_delete=False,
        )
        db.add(project)
        await db.flush()

        db.add(ProjectMember(project_id=project.id, user_id=user.id, role=ProjectRole.ADMIN))
        extra = [uid for uid in dict.fromkeys(data.member_ids) if uid != user.id]
        for member_id in await _company_users(db, user.company_id, extra):
            db.add(ProjectMember(project_id=project.id, user_id=member_id, role=ProjectRole.MEMBER))

        create_default_boards(db, project)

    logger.info(f"Project {project.id} created by user {user.id}")
    return project_out(project)


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project_detail(
    project_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.VIEWER)
    return project_out(project)


# ============================================================
# MEMBER ENDPOINTS
# ============================================================

@router.get("/{project_id}/members", response_model=List[MemberOut])
async def list_members(
    project_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.VIEWER)
    stmt = (
        select(ProjectMember, User.name, User.email)
        .outerjoin(User, User.id == ProjectMember.user_id)
        .where(ProjectMember.project_id == project.id)
        .order_by(ProjectMember.id.asc())
    )
    result = await db.execute(stmt)
    return [member_out(member, name, email) for member, name, email in result.all()]


@router.post("/{project_id}/members", response_model=MemberOut, status_code=201)
async def add_member(
    project_id: int,
    data: MemberAdd,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(
        db, user, project_id, ProjectRole.ADMIN,
        message="Only admins can add members",
    )
    if not await _company_users(db, project.company_id, [data.user_id]):
        raise NotFoundError("User not found")

    existing = await db.execute(select(ProjectMember.id).where(
        ProjectMember.project_id == project.id,
        ProjectMember.user_id == data.user_id,
    ))
    if existing.scalar_one_or_none() is not None:
        raise ValidationFailed("User is already a member")

    async with transaction(db):
        member = ProjectMember(project_id=project.id, user_id=data.user_id, role=data.role)
        db.add(member)

    logger.info(f"User {data.user_id} added to project {project.id} as {data.role.value}")
    return await _member_with_user(db, member)


@router.put("/{project_id}/members", response_model=MemberOut)
async def update_member_role(
    project_id: int,
    data: MemberRoleUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(
        db, user, project_id, ProjectRole.ADMIN,
        message="Only admins can update member roles",
    )
    member = await _get_member(db, project.id, data.member_id)
    if member.role == ProjectRole.ADMIN and data.role != ProjectRole.ADMIN:
        if await _admin_count(db, project.id) <= 1:
            raise ValidationFailed("Cannot demote the last admin")

    async with transaction(db):
        member.role = data.role

    return await _member_with_user(db, member)


@router.delete("/{project_id}/members/{member_id}", response_model=MessageOut)
async def remove_member(
    project_id: int,
    member_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Remove a member and drop them from every card of the project"""
    project = await require_project_role(
        db, user, project_id, ProjectRole.ADMIN,
        message="Only admins can remove members",
    )
    member = await _get_member(db, project.id, member_id)
    if member.role == ProjectRole.ADMIN and await _admin_count(db, project.id) <= 1:
        raise ValidationFailed("Cannot remove the last admin")

    async with transaction(db):
        await remove_member_assignments(db, project.id, member.user_id)
        await db.delete(member)

    logger.info(f"User {member.user_id} removed from project {project.id}")
    return MessageOut(message="Member removed successfully")
