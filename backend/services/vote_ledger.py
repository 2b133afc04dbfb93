# backend/services/vote_ledger.py
"""One-vote-per-(user, material) ledger.

The ``uq_vote_user_material`` constraint on ``votes`` is what guarantees the
invariant; every write here is a single conditional statement so two racing
requests for the same pair can never leave two rows behind.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Set

from sqlalchemy import delete, func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.vote import Vote

logger = logging.getLogger(__name__)


@dataclass
class VoteResult:
    voted: bool
    votes_count: int


def _delete_vote(db: Session, user_id: int, material_id: int) -> int:
    result = db.execute(
        delete(Vote).where(Vote.user_id == user_id, Vote.material_id == material_id)
    )
    return result.rowcount or 0


def _insert_vote(db: Session, user_id: int, material_id: int) -> bool:
    """Insert the vote unless the pair already exists. Returns True if a row was written."""
    values = {"user_id": user_id, "material_id": material_id}
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = postgresql.insert(Vote).values(**values).on_conflict_do_nothing(
            index_elements=["user_id", "material_id"]
        )
    elif dialect == "sqlite":
        stmt = sqlite.insert(Vote).values(**values).on_conflict_do_nothing(
            index_elements=["user_id", "material_id"]
        )
    else:
        # No native upsert: let the unique constraint reject the duplicate
        try:
            with db.begin_nested():
                db.execute(insert(Vote).values(**values))
            return True
        except IntegrityError:
            logger.info("Concurrent vote already recorded user=%s material=%s", user_id, material_id)
            return False

    result = db.execute(stmt)
    return (result.rowcount or 0) > 0


def toggle_vote(db: Session, user_id: int, material_id: int) -> VoteResult:
    """Remove the caller's vote if it exists, otherwise cast it.

    A concurrent duplicate that loses the insert race ends up with
    ``voted=True`` as well, since the pair is voted either way.
    """
    removed = _delete_vote(db, user_id, material_id)
    if removed:
        voted = False
    else:
        _insert_vote(db, user_id, material_id)
        voted = True
    db.commit()

    return VoteResult(voted=voted, votes_count=count_votes(db, material_id))


def remove_vote(db: Session, user_id: int, material_id: int) -> None:
    _delete_vote(db, user_id, material_id)
    db.commit()


def count_votes(db: Session, material_id: int) -> int:
    return db.scalar(
        select(func.count(Vote.id)).where(Vote.material_id == material_id)
    ) or 0


def has_voted(db: Session, user_id: int, material_id: int) -> bool:
    found = db.scalar(
        select(Vote.id).where(Vote.user_id == user_id, Vote.material_id == material_id).limit(1)
    )
    return found is not None


def voted_material_ids(
    db: Session, user_id: int, material_ids: Optional[Iterable[int]] = None
) -> Set[int]:
    """Ids of the materials this user has voted on, optionally limited to ``material_ids``."""
    stmt = select(Vote.material_id).where(Vote.user_id == user_id)
    if material_ids is not None:
        material_ids = list(material_ids)
        if not material_ids:
            return set()
        stmt = stmt.where(Vote.material_id.in_(material_ids))
    return set(db.scalars(stmt).all())


def vote_counts(db: Session, material_ids: Iterable[int]) -> Dict[int, int]:
    material_ids = list(material_ids)
    if not material_ids:
        return {}
    rows = db.execute(
        select(Vote.material_id, func.count(Vote.id))
        .where(Vote.material_id.in_(material_ids))
        .group_by(Vote.material_id)
    ).all()
    counts = {material_id: 0 for material_id in material_ids}
    counts.update({material_id: count for material_id, count in rows})
    return counts
