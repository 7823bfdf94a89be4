# routers/cards.py — Cards of a project: create, move, edit, delete
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession

from access import require_project_role
from assignments import list_assignees
from auth import get_current_user, CurrentUser
from board_registry import get_board
from card_store import create_card, delete_card, edit_card, get_card, list_cards, move_card
from database import get_db_session
from models import Priority, ProjectRole
from schemas import (
    AssigneeOut, CamelModel, CardDetailOut, CardOut, MessageOut, board_out, card_out,
)

router = APIRouter(prefix="/api/v1/projects/{project_id}/cards", tags=["Cards"])


# ============================================================
# SCHEMAS
# ============================================================

class CardCreate(CamelModel):
    board_id: int = Field(..., gt=0)
    title: str = Field(..., min_length=1, max_length=500)
    description: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)
    priority: Optional[Priority] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    assignee_ids: Optional[List[int]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v


class CardMove(CamelModel):
    card_id: int = Field(..., gt=0)
    target_board_id: int = Field(..., gt=0)
    new_position: int = Field(..., ge=0)


class CardUpdate(CamelModel):
    """Every field is optional; only the fields present in the body are applied"""
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    assignee_ids: Optional[List[int]] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Title is required")
        return v


# ============================================================
# ENDPOINTS
# ============================================================

@router.get("", response_model=List[CardOut])
async def get_cards(
    project_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.VIEWER)
    return [card_out(c) for c in await list_cards(db, project)]


@router.post("", response_model=CardOut, status_code=201)
async def add_card(
    project_id: int,
    data: CardCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Create a card; it is appended unless a position is given"""
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    card = await create_card(
        db, project, data.board_id, data.title,
        description=data.description,
        position=data.position,
        priority=data.priority,
        start_date=data.start_date,
        due_date=data.due_date,
        assignee_ids=data.assignee_ids,
    )
    return card_out(card)


@router.put("", response_model=MessageOut)
async def move(
    project_id: int,
    data: CardMove,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Move a card within its board or onto another board of the project"""
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    await move_card(db, project, data.card_id, data.target_board_id, data.new_position)
    return MessageOut(message="Card moved successfully")


@router.get("/{card_id}", response_model=CardDetailOut)
async def get_card_detail(
    project_id: int,
    card_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.VIEWER)
    card = await get_card(db, project, card_id)
    board = await get_board(db, project.id, card.board_id)
    assignees = await list_assignees(db, card.id)
    return CardDetailOut(
        **card_out(card).model_dump(),
        assignees=[AssigneeOut(**a) for a in assignees],
        board=board_out(board),
    )


@router.put("/{card_id}", response_model=CardOut)
async def update_card(
    project_id: int,
    card_id: int,
    data: CardUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    card = await edit_card(db, project, card_id, data.model_dump(exclude_unset=True))
    return card_out(card)


@router.delete("/{card_id}", response_model=MessageOut)
async def remove_card(
    project_id: int,
    card_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    await delete_card(db, project, card_id)
    return MessageOut(message="Card deleted successfully")
