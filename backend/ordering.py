# ordering.py — Position arithmetic for dense, zero-based sibling sequences
"""
Pure functions over a collection's current ``{id: position}`` assignment.

Every function returns the *minimal* set of changes as ``{id: new_position}``:
elements whose position is unchanged are left out, so callers only write the
rows that actually move. None of these functions touch the database.
"""
import os
from typing import Dict, Hashable, Mapping, Optional, Tuple

Positions = Mapping[Hashable, int]

# "eager": deleting a card or board renumbers its siblings straight away.
# "lazy": legacy behaviour, deletes leave a gap until the next move touches the board.
POSITION_COMPACTION = os.getenv("POSITION_COMPACTION", "eager").lower()


def compact_on_delete() -> bool:
    return POSITION_COMPACTION != "lazy"


def clamp_index(index: Optional[int], size: int) -> int:
    """Clamp a requested insertion index to ``[0, size]``; None means append"""
    if index is None or index > size:
        return size
    return max(index, 0)


def insert_shifts(positions: Positions, index: Optional[int] = None) -> Tuple[int, Dict[Hashable, int]]:
    """Make room for one new element before ``index``.

    Returns the (clamped) index the new element should take and the shifts
    for the existing elements: everything at ``position >= index`` moves up
    by one.
    """
    index = clamp_index(index, len(positions))
    shifts = {item: pos + 1 for item, pos in positions.items() if pos >= index}
    return index, shifts


def remove_shifts(positions: Positions, removed_position: int) -> Dict[Hashable, int]:
    """Close the gap left at ``removed_position``.

    ``positions`` must not contain the removed element.
    """
    return {item: pos - 1 for item, pos in positions.items() if pos > removed_position}


def move_shifts(positions: Positions, item_id: Hashable, new_index: int) -> Dict[Hashable, int]:
    """Move ``item_id`` to ``new_index`` inside the same collection.

    Equivalent to a remove at the old position followed by an insert before
    ``new_index`` (both computed against the collection without the moved
    element), done in one pass so the moved element is never shifted twice.
    The result includes the moved element's own new position when it changes.
    """
    old_index = positions[item_id]
    new_index = clamp_index(new_index, len(positions) - 1)
    if new_index == old_index:
        return {}

    shifts: Dict[Hashable, int] = {}
    for item, pos in positions.items():
        if item == item_id:
            continue
        if old_index < new_index and old_index < pos <= new_index:
            shifts[item] = pos - 1
        elif new_index < old_index and new_index <= pos < old_index:
            shifts[item] = pos + 1
    shifts[item_id] = new_index
    return shifts


def compact(positions: Positions) -> Dict[Hashable, int]:
    """Renumber an arbitrary sequence (gaps, duplicates) to ``0..n-1``.

    Relative order is kept; ties are broken by id so the result is stable.
    """
    ordered = sorted(positions.items(), key=lambda kv: (kv[1], kv[0]))
    return {item: index for index, (item, pos) in enumerate(ordered) if pos != index}


def densify(positions: Positions) -> Dict[Hashable, int]:
    """Full assignment after closing any gaps, as ``{id: position}``"""
    return apply_shifts(positions, compact(positions))


def changed(before: Positions, after: Positions) -> Dict[Hashable, int]:
    """Entries of ``after`` that differ from ``before``"""
    return {item: pos for item, pos in after.items() if before.get(item) != pos}


def is_dense(positions: Positions) -> bool:
    """True when the positions are exactly ``{0, ..., n-1}`` with no duplicates"""
    return sorted(positions.values()) == list(range(len(positions)))


def apply_shifts(positions: Positions, shifts: Mapping[Hashable, int]) -> Dict[Hashable, int]:
    """Return a new assignment with ``shifts`` applied"""
    merged = dict(positions)
    merged.update(shifts)
    return merged
