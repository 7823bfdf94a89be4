# access.py — Project access policy
"""
Authorisation gate consulted before every read or mutation.

A caller passes when they are a company admin, or when their membership role
in the project ranks at least the required role (viewer < member < admin).
Projects are always looked up inside the caller's company, so a project of
another tenant is indistinguishable from a missing one.
"""
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth import CurrentUser
from errors import ForbiddenError, NotFoundError
from models import Project, ProjectMember, ProjectRole

ROLE_RANK = {
    ProjectRole.VIEWER: 1,
    ProjectRole.MEMBER: 2,
    ProjectRole.ADMIN: 3,
}


async def get_membership(db: AsyncSession, project_id: int, user_id: int) -> Optional[ProjectMember]:
    stmt = select(ProjectMember).where(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def authorize(
    db: AsyncSession,
    actor: CurrentUser,
    project_id: int,
    required_role: ProjectRole,
) -> bool:
    if actor.is_company_admin:
        return True
    membership = await get_membership(db, project_id, actor.id)
    if membership is None:
        return False
    return ROLE_RANK[ProjectRole(membership.role)] >= ROLE_RANK[required_role]


async def get_project(db: AsyncSession, actor: CurrentUser, project_id: int) -> Project:
    stmt = select(Project).where(
        Project.id == project_id,
        Project.company_id == actor.company_id,
        Project.soft_delete.is_(False),
    )
    result = await db.execute(stmt)
    project = result.scalar_one_or_none()
    if not project:
        raise NotFoundError("Project not found")
    return project


async def require_project_role(
    db: AsyncSession,
    actor: CurrentUser,
    project_id: int,
    required_role: ProjectRole,
    message: str = "Insufficient permissions",
) -> Project:
    """Resolve the project and check the caller's role, or raise"""
    project = await get_project(db, actor, project_id)
    if not await authorize(db, actor, project.id, required_role):
        raise ForbiddenError(message)
    return project
