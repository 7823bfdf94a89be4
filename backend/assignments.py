# assignments.py — Card <-> project member links
import logging
from typing import Iterable, List, Set

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from models import Board, Card, CardAssignee, ProjectMember, User

logger = logging.getLogger("opsdesk.assignments")


async def project_member_ids(db: AsyncSession, project_id: int) -> Set[int]:
    stmt = select(ProjectMember.user_id).where(ProjectMember.project_id == project_id)
    result = await db.execute(stmt)
    return set(result.scalars().all())


async def replace_assignees(
    db: AsyncSession,
    card: Card,
    user_ids: Iterable[int],
    project_id: int,
) -> List[int]:
    """Replace the card's whole assignee set.

    Ids that are not members of the project are dropped silently, duplicates
    are collapsed. Returns the ids that were kept, in request order. Runs in
    the caller's transaction.
    """
    user_ids = list(user_ids)
    members = await project_member_ids(db, project_id)
    kept: List[int] = []
    for user_id in user_ids:
        if user_id in members and user_id not in kept:
            kept.append(user_id)

    dropped = [u for u in user_ids if u not in members]
    if dropped:
        logger.info(f"Card {card.id}: ignoring non-member assignees {dropped}")

    await db.execute(delete(CardAssignee).where(CardAssignee.card_id == card.id))
    for user_id in kept:
        db.add(CardAssignee(card_id=card.id, user_id=user_id))
    return kept


async def assignee_ids(db: AsyncSession, card_id: int) -> List[int]:
    stmt = (
        select(CardAssignee.user_id)
        .where(CardAssignee.card_id == card_id)
        .order_by(CardAssignee.id.asc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_assignees(db: AsyncSession, card_id: int) -> list:
    """Assignee rows joined with the user's name and email"""
    stmt = (
        select(CardAssignee.id, CardAssignee.user_id, User.name, User.email)
        .outerjoin(User, User.id == CardAssignee.user_id)
        .where(CardAssignee.card_id == card_id)
        .order_by(CardAssignee.id.asc())
    )
    result = await db.execute(stmt)
    return [
        {"id": row.id, "userId": row.user_id, "user": {"name": row.name, "email": row.email}}
        for row in result.all()
    ]


async def remove_member_assignments(db: AsyncSession, project_id: int, user_id: int) -> None:
    """Drop a departing member from every card of the project"""
    card_ids = (
        select(Card.id)
        .join(Board, Board.id == Card.board_id)
        .where(Board.project_id == project_id)
    )
    await db.execute(
        delete(CardAssignee).where(
            CardAssignee.user_id == user_id,
            CardAssignee.card_id.in_(card_ids),
        ).execution_options(synchronize_session=False)
    )
