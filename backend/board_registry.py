# board_registry.py — Ordered boards (columns) of a project
"""
Boards of a project keep dense positions ``0..n-1``. Every operation that
changes board positions runs under the project's lock and inside one
transaction, so the sequence is never observed half-written.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from completion import is_completed_title
from database import transaction
from errors import NotFoundError, ValidationFailed
from locks import board_locks, project_locks
from models import Board, Card, CardAssignee, Project, utcnow
from ordering import (
    apply_shifts, changed, compact_on_delete, densify, insert_shifts, move_shifts,
)

logger = logging.getLogger("opsdesk.boards")

DEFAULT_BOARDS = ["To Do", "In Progress", "Done"]


async def project_boards(db: AsyncSession, project_id: int) -> List[Board]:
    """All boards of a project by position, re-read from the database"""
    stmt = (
        select(Board)
        .where(Board.project_id == project_id)
        .order_by(Board.position.asc(), Board.id.asc())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_board(db: AsyncSession, project_id: int, board_id: int, message: str = "Board not found") -> Board:
    stmt = (
        select(Board)
        .where(Board.id == board_id, Board.project_id == project_id)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    board = result.scalar_one_or_none()
    if not board:
        raise NotFoundError(message)
    return board


def _apply(boards: Iterable[Board], positions: Dict[int, int]) -> None:
    for board in boards:
        if board.id in positions:
            board.position = positions[board.id]


def create_default_boards(db: AsyncSession, project: Project) -> List[Board]:
    """Stage the default columns of a new project in the caller's transaction"""
    boards = [
        Board(
            project_id=project.id,
            title=title,
            position=index,
            is_done_column=is_completed_title(title),
        )
        for index, title in enumerate(DEFAULT_BOARDS)
    ]
    db.add_all(boards)
    return boards


async def create_board(
    db: AsyncSession,
    project: Project,
    title: str,
    position: Optional[int] = None,
    is_done_column: Optional[bool] = None,
) -> Board:
    """Append a board, or insert it before ``position`` shifting the rest"""
    async with project_locks.hold([project.id]):
        async with transaction(db):
            siblings = await project_boards(db, project.id)
            current = {b.id: b.position for b in siblings}
            if position is None:
                index = max(current.values()) + 1 if current else 0
            else:
                index, shifts = insert_shifts(current, position)
                _apply(siblings, shifts)

            board = Board(
                project_id=project.id,
                title=title,
                position=index,
                is_done_column=is_completed_title(title) if is_done_column is None else is_done_column,
            )
            db.add(board)
            await db.flush()

    logger.info(f"Board {board.id} '{title}' created in project {project.id} at position {index}")
    return board


async def update_board(
    db: AsyncSession,
    project: Project,
    board_id: int,
    title: Optional[str] = None,
    position: Optional[int] = None,
    is_done_column: Optional[bool] = None,
) -> Board:
    """Partial update. A new position moves the board and shifts the ones in between."""
    async with project_locks.hold([project.id]):
        async with transaction(db):
            siblings = await project_boards(db, project.id)
            board = next((b for b in siblings if b.id == board_id), None)
            if board is None:
                raise NotFoundError("Board not found")

            if position is not None:
                current = {b.id: b.position for b in siblings}
                dense = densify(current)
                _apply(siblings, changed(current, apply_shifts(dense, move_shifts(dense, board.id, position))))
            if title is not None:
                board.title = title
            if is_done_column is not None:
                board.is_done_column = is_done_column
            board.updated_at = utcnow()

    return board


def validate_permutation(current_ids: Iterable[int], items: List[Tuple[int, int]]) -> Dict[str, List[str]]:
    """Field errors for a submitted board order, empty when it is a full permutation"""
    errors: List[str] = []
    current = set(current_ids)
    ids = [board_id for board_id, _ in items]
    positions = [pos for _, pos in items]

    if len(set(ids)) != len(ids):
        errors.append("Board ids must be unique")
    unknown = sorted(set(ids) - current)
    if unknown:
        errors.append(f"Unknown board ids: {unknown}")
    missing = sorted(current - set(ids))
    if missing:
        errors.append(f"Missing board ids: {missing}")
    if sorted(positions) != list(range(len(positions))):
        errors.append(f"Positions must be 0..{len(positions) - 1} with no gaps or duplicates")

    return {"boards": errors} if errors else {}


async def reorder_boards(db: AsyncSession, project: Project, items: List[Tuple[int, int]]) -> int:
    """Apply a full board permutation ``[(board_id, position), ...]`` atomically.

    Returns the number of boards whose position changed.
    """
    async with project_locks.hold([project.id]):
        async with transaction(db):
            boards = await project_boards(db, project.id)
            errors = validate_permutation([b.id for b in boards], items)
            if errors:
                raise ValidationFailed(errors=errors)

            current = {b.id: b.position for b in boards}
            updates = changed(current, dict(items))
            now = utcnow()
            for board in boards:
                if board.id in updates:
                    board.position = updates[board.id]
                    board.updated_at = now

    logger.info(f"Project {project.id}: reordered {len(updates)} board(s)")
    return len(updates)


async def delete_board(
    db: AsyncSession,
    project: Project,
    board_id: int,
    compact: Optional[bool] = None,
) -> None:
    """Hard-delete a board with its cards and their assignee links.

    Remaining boards are renumbered unless legacy gap mode is configured.
    """
    if compact is None:
        compact = compact_on_delete()

    async with project_locks.hold([project.id]):
        async with board_locks.hold([board_id]):
            async with transaction(db):
                siblings = await project_boards(db, project.id)
                board = next((b for b in siblings if b.id == board_id), None)
                if board is None:
                    raise NotFoundError("Board not found")

                card_ids = select(Card.id).where(Card.board_id == board.id)
                await db.execute(
                    delete(CardAssignee)
                    .where(CardAssignee.card_id.in_(card_ids))
                    .execution_options(synchronize_session=False)
                )
                await db.execute(delete(Card).where(Card.board_id == board.id))
                await db.delete(board)

                remaining = [b for b in siblings if b.id != board.id]
                if compact:
                    current = {b.id: b.position for b in remaining}
                    _apply(remaining, changed(current, densify(current)))

    logger.info(f"Board {board_id} deleted from project {project.id} (compact={compact})")


async def list_boards_with_cards(db: AsyncSession, project: Project) -> List[Tuple[Board, List[Card]]]:
    boards = await project_boards(db, project.id)
    if not boards:
        return []

    stmt = (
        select(Card)
        .where(Card.board_id.in_([b.id for b in boards]), Card.soft_delete.is_(False))
        .order_by(Card.position.asc(), Card.id.asc())
    )
    result = await db.execute(stmt)
    by_board: Dict[int, List[Card]] = {b.id: [] for b in boards}
    for card in result.scalars().all():
        by_board[card.board_id].append(card)
    return [(b, by_board[b.id]) for b in boards]
