# schemas.py — Shared response schemas (camelCase on the wire)
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from models import Board, Card, Priority, Project, ProjectMember, ProjectRole, ProjectStatus


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serialises camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageOut(CamelModel):
    message: str


class BoardOut(CamelModel):
    id: int
    project_id: int
    title: str
    position: int
    is_done_column: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CardOut(CamelModel):
    id: int
    board_id: int
    title: str
    description: Optional[str] = None
    position: int
    priority: Priority
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BoardWithCardsOut(BoardOut):
    cards: List[CardOut] = []


class AssigneeUserOut(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None


class AssigneeOut(CamelModel):
    id: int
    user_id: int
    user: AssigneeUserOut


class CardDetailOut(CardOut):
    assignees: List[AssigneeOut] = []
    board: BoardOut


class ProjectOut(CamelModel):
    id: int
    company_id: int
    title: str
    description: Optional[str] = None
    status: ProjectStatus
    priority: Priority
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    color_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class MemberOut(CamelModel):
    id: int
    user_id: int
    role: ProjectRole
    created_at: Optional[datetime] = None
    user: AssigneeUserOut


# ============================================================
# ORM -> schema
# ============================================================

def board_out(board: Board) -> BoardOut:
    return BoardOut(
        id=board.id,
        project_id=board.project_id,
        title=board.title,
        position=board.position,
        is_done_column=bool(board.is_done_column),
        created_at=board.created_at,
        updated_at=board.updated_at,
    )


def card_out(card: Card) -> CardOut:
    return CardOut(
        id=card.id,
        board_id=card.board_id,
        title=card.title,
        description=card.description,
        position=card.position,
        priority=card.priority,
        start_date=card.start_date,
        due_date=card.due_date,
        completed_at=card.completed_at,
        created_at=card.created_at,
        updated_at=card.updated_at,
    )


def project_out(project: Project) -> ProjectOut:
    return ProjectOut(
        id=project.id,
        company_id=project.company_id,
        title=project.title,
        description=project.description,
        status=project.status,
        priority=project.priority,
        start_date=project.start_date,
        end_date=project.end_date,
        color_code=project.color_code,
        created_at=project.created_at,
        updated_at=project.updated_at,
    )


def member_out(member: ProjectMember, name: Optional[str], email: Optional[str]) -> MemberOut:
    return MemberOut(
        id=member.id,
        user_id=member.user_id,
        role=member.role,
        created_at=member.created_at,
        user=AssigneeUserOut(name=name, email=email),
    )
