# routers/boards.py — Ordered boards (columns) of a project
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import Field
from sqlalchemy.ext.asyncio import AsyncSession

from access import require_project_role
from auth import get_current_user, CurrentUser
from board_registry import (
    create_board, delete_board, list_boards_with_cards, reorder_boards, update_board,
)
from database import get_db_session
from models import ProjectRole
from schemas import (
    BoardOut, BoardWithCardsOut, CamelModel, MessageOut, board_out, card_out,
)

router = APIRouter(prefix="/api/v1/projects/{project_id}/boards", tags=["Boards"])


# ============================================================
# SCHEMAS
# ============================================================

class BoardCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=100)
    position: Optional[int] = Field(None, ge=0)
    is_done_column: Optional[bool] = None


class BoardUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    position: Optional[int] = Field(None, ge=0)
    is_done_column: Optional[bool] = None


class BoardPosition(CamelModel):
    id: int = Field(..., gt=0)
    position: int = Field(..., ge=0)


class BoardReorder(CamelModel):
    boards: List[BoardPosition] = Field(..., min_length=1)


class BoardListOut(CamelModel):
    data: List[BoardWithCardsOut]


# ============================================================
# ENDPOINTS
# ============================================================

@router.get("", response_model=BoardListOut)
async def list_boards(
    project_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Boards by position, each with its non-deleted cards by position"""
    project = await require_project_role(db, user, project_id, ProjectRole.VIEWER)
    rows = await list_boards_with_cards(db, project)
    return BoardListOut(data=[
        BoardWithCardsOut(**board_out(board).model_dump(), cards=[card_out(c) for c in cards])
        for board, cards in rows
    ])


@router.post("", response_model=BoardOut, status_code=201)
async def add_board(
    project_id: int,
    data: BoardCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    board = await create_board(
        db, project, data.title,
        position=data.position,
        is_done_column=data.is_done_column,
    )
    return board_out(board)


@router.put("", response_model=MessageOut)
async def reorder(
    project_id: int,
    data: BoardReorder,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Apply a full board permutation in one transaction"""
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    await reorder_boards(db, project, [(b.id, b.position) for b in data.boards])
    return MessageOut(message="Boards reordered successfully")


@router.put("/{board_id}", response_model=BoardOut)
async def edit_board(
    project_id: int,
    board_id: int,
    data: BoardUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    project = await require_project_role(db, user, project_id, ProjectRole.MEMBER)
    board = await update_board(
        db, project, board_id,
        title=data.title,
        position=data.position,
        is_done_column=data.is_done_column,
    )
    return board_out(board)


@router.delete("/{board_id}", response_model=MessageOut)
async def remove_board(
    project_id: int,
    board_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    """Delete a board together with its cards (project admins only)"""
    project = await require_project_role(
        db, user, project_id, ProjectRole.ADMIN,
        message="Only admins can delete boards",
    )
    await delete_board(db, project, board_id)
    return MessageOut(message="Board deleted successfully")
