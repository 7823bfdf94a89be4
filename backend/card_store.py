# card_store.py — Cards of a board and the cross-board Move coordinator
"""
Cards keep dense positions ``0..n-1`` among the non-deleted cards of their
board. Every write that touches positions:

1. resolves and validates its inputs (no writes yet),
2. takes the per-board locks of every board whose sequence changes,
3. re-reads the affected rows inside one transaction,
4. computes the new positions with ``ordering``,
5. bumps the version of each touched board and commits, or rolls back on
   any failure.

A concurrent writer in another process trips the board version check and the
caller receives ConflictError.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from assignments import replace_assignees
from board_registry import get_board, project_boards
from completion import infer_completed_at
from database import transaction
from errors import ConflictError, NotFoundError, ValidationFailed
from locks import board_locks
from models import Board, Card, Priority, Project, utcnow
from ordering import (
    apply_shifts, changed, clamp_index, compact_on_delete, densify,
    insert_shifts, move_shifts, remove_shifts,
)

logger = logging.getLogger("opsdesk.cards")

EDITABLE_FIELDS = ("title", "description", "priority", "start_date", "due_date", "completed_at")


@dataclass
class MoveResult:
    card: Card
    moved: bool
    reindexed: int = 0


# ============================================================
# READS
# ============================================================

async def board_cards(db: AsyncSession, board_id: int) -> List[Card]:
    """Non-deleted cards of a board by position, re-read from the database"""
    stmt = (
        select(Card)
        .where(Card.board_id == board_id, Card.soft_delete.is_(False))
        .order_by(Card.position.asc(), Card.id.asc())
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _load_card(db: AsyncSession, card_id: int) -> Optional[Card]:
    stmt = (
        select(Card)
        .where(Card.id == card_id, Card.soft_delete.is_(False))
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def get_card(db: AsyncSession, project: Project, card_id: int) -> Card:
    card = await _load_card(db, card_id)
    if not card:
        raise NotFoundError("Card not found")

    board = await db.get(Board, card.board_id)
    if not board or board.project_id != project.id:
        raise ValidationFailed("Card does not belong to this project")
    return card


async def list_cards(db: AsyncSession, project: Project) -> List[Card]:
    boards = await project_boards(db, project.id)
    if not boards:
        return []
    stmt = (
        select(Card)
        .where(Card.board_id.in_([b.id for b in boards]), Card.soft_delete.is_(False))
        .order_by(Card.position.asc(), Card.id.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ============================================================
# HELPERS
# ============================================================

def _positions(cards: Iterable[Card]) -> Dict[int, int]:
    return {c.id: c.position for c in cards}


def _apply(cards: Iterable[Card], positions: Dict[int, int], now: datetime) -> int:
    count = 0
    for card in cards:
        if card.id in positions and card.position != positions[card.id]:
            card.position = positions[card.id]
            card.updated_at = now
            count += 1
    return count


def _clean_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationFailed(errors={"title": ["Title is required"]})
    return title


def _touch(*boards: Board) -> None:
    # Any UPDATE of the board row bumps its version counter
    now = utcnow()
    for board in boards:
        board.updated_at = now


# ============================================================
# CREATE
# ============================================================

async def create_card(
    db: AsyncSession,
    project: Project,
    board_id: int,
    title: str,
    description: Optional[str] = None,
    position: Optional[int] = None,
    priority: Optional[Priority] = None,
    start_date: Optional[datetime] = None,
    due_date: Optional[datetime] = None,
    assignee_ids: Optional[List[int]] = None,
) -> Card:
    """Create a card at ``position`` (default: end of the board).

    Cards at or after the requested position move down by one; ``position``
    counts the live cards of the board, so any gap is closed first.
    """
    title = _clean_title(title)
    await get_board(db, project.id, board_id)

    async with board_locks.hold([board_id]):
        async with transaction(db):
            board = await get_board(db, project.id, board_id)
            siblings = await board_cards(db, board.id)
            current = _positions(siblings)
            dense = densify(current)
            index, shifts = insert_shifts(dense, position)
            now = utcnow()
            _apply(siblings, changed(current, apply_shifts(dense, shifts)), now)

            card = Card(
                board_id=board.id,
                title=title,
                description=description or None,
                position=index,
                priority=priority or Priority.MEDIUM,
                start_date=start_date,
                due_date=due_date,
                soft_delete=False,
            )
            db.add(card)
            await db.flush()

            if assignee_ids:
                await replace_assignees(db, card, assignee_ids, project.id)
            _touch(board)

    logger.info(f"Card {card.id} created on board {board_id} at position {index}")
    return card


# ============================================================
# MOVE
# ============================================================

async def move_card(
    db: AsyncSession,
    project: Project,
    card_id: int,
    target_board_id: int,
    new_position: int,
    now: Optional[datetime] = None,
) -> MoveResult:
    """Move a card to ``new_position`` of ``target_board_id``.

    Moving a card onto its own position is a no-op: nothing is written and
    completedAt is left alone. Otherwise both boards end up dense and the
    card's completedAt is re-derived from the target board.
    """
    card = await get_card(db, project, card_id)
    await get_board(db, project.id, target_board_id, message="Target board not found")
    source_id = card.board_id

    async with board_locks.hold([source_id, target_board_id]):
        async with transaction(db):
            card = await _load_card(db, card_id)
            if card is None:
                raise NotFoundError("Card not found")
            if card.board_id != source_id:
                raise ConflictError("Card was moved concurrently, please retry")

            source = await get_board(db, project.id, source_id)
            target = await get_board(db, project.id, target_board_id, message="Target board not found")
            same_board = source.id == target.id

            source_cards = await board_cards(db, source.id)
            target_cards = source_cards if same_board else await board_cards(db, target.id)

            if same_board:
                # newPosition is an index among the live cards, not a raw position
                current = _positions(source_cards)
                dense = densify(current)
                index = clamp_index(new_position, len(source_cards) - 1)
                if dense[card.id] == index:
                    logger.debug(f"Card {card.id} already at board {source.id} position {index}")
                    return MoveResult(card=card, moved=False)

            now = now or utcnow()

            if same_board:
                final = apply_shifts(dense, move_shifts(dense, card.id, new_position))
                reindexed = _apply([c for c in source_cards if c.id != card.id], changed(current, final), now)
                new_index = final[card.id]
            else:
                others = [c for c in source_cards if c.id != card.id]
                current = _positions(others)
                final = densify(apply_shifts(current, remove_shifts(current, card.position)))
                reindexed = _apply(others, changed(current, final), now)

                current = _positions(target_cards)
                dense = densify(current)
                index, shifts = insert_shifts(dense, new_position)
                final = {**apply_shifts(dense, shifts), card.id: index}
                reindexed += _apply(target_cards, changed(current, final), now)
                new_index = final[card.id]

            card.board_id = target.id
            card.position = new_index
            card.completed_at = infer_completed_at(target, card.completed_at, now)
            card.updated_at = now
            _touch(source, target)

    logger.info(
        f"Card {card.id} moved board {source_id} -> {target_board_id} "
        f"at position {card.position} ({reindexed} sibling(s) reindexed)"
    )
    return MoveResult(card=card, moved=True, reindexed=reindexed)


# ============================================================
# EDIT / DELETE
# ============================================================

async def edit_card(db: AsyncSession, project: Project, card_id: int, changes: Dict[str, Any]) -> Card:
    """Partial update of card fields. Board and position never change here.

    ``changes`` holds only the fields the caller sent; an explicit None clears
    a nullable field. ``assignee_ids`` replaces the whole assignee set, and an
    explicit ``completed_at`` stands until the next move re-derives it.
    """
    changes = dict(changes)
    errors: Dict[str, List[str]] = {}
    if "title" in changes:
        title = (changes["title"] or "").strip()
        if title:
            changes["title"] = title
        else:
            errors["title"] = ["Title is required"]
    if "priority" in changes and changes["priority"] is None:
        errors["priority"] = ["Priority cannot be null"]
    if errors:
        raise ValidationFailed(errors=errors)

    card = await get_card(db, project, card_id)
    async with transaction(db):
        for field in EDITABLE_FIELDS:
            if field in changes:
                setattr(card, field, changes[field])
        if changes.get("assignee_ids") is not None:
            await replace_assignees(db, card, changes["assignee_ids"], project.id)
        card.updated_at = utcnow()

    return card


async def delete_card(
    db: AsyncSession,
    project: Project,
    card_id: int,
    compact: Optional[bool] = None,
) -> Card:
    """Soft-delete a card.

    The row keeps its position value. The remaining cards of the board close
    the gap unless legacy gap mode is configured.
    """
    if compact is None:
        compact = compact_on_delete()

    card = await get_card(db, project, card_id)
    board_id = card.board_id

    async with board_locks.hold([board_id]):
        async with transaction(db):
            card = await _load_card(db, card_id)
            if card is None:
                raise NotFoundError("Card not found")
            if card.board_id != board_id:
                raise ConflictError("Card was moved concurrently, please retry")
            board = await get_board(db, project.id, board_id)
            siblings = [c for c in await board_cards(db, board.id) if c.id != card.id]

            now = utcnow()
            card.soft_delete = True
            card.updated_at = now
            if compact:
                current = _positions(siblings)
                final = densify(apply_shifts(current, remove_shifts(current, card.position)))
                _apply(siblings, changed(current, final), now)
            _touch(board)

    logger.info(f"Card {card_id} deleted from board {board_id} (compact={compact})")
    return card
