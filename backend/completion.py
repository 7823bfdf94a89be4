# completion.py — Completion state derived from the board a card sits in
from datetime import datetime
from typing import Optional

from models import Board, utcnow

COMPLETED_TITLES = frozenset({"done", "completed"})


def is_completed_title(title: Optional[str]) -> bool:
    """Exact, case-insensitive match against the terminal column titles"""
    if not title:
        return False
    return title.strip().lower() in COMPLETED_TITLES


def is_completed_board(board: Board) -> bool:
    # The explicit flag wins; boards created without one take it from the title
    if board.is_done_column is None:
        return is_completed_title(board.title)
    return bool(board.is_done_column)


def infer_completed_at(
    board: Board,
    previous: Optional[datetime],
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """completedAt for a card that has just been moved into ``board``.

    Re-entering a completed board keeps the original timestamp; any other
    board clears it.
    """
    if is_completed_board(board):
        return previous or now or utcnow()
    return None
