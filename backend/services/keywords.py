# backend/services/keywords.py
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from models.material import MaterialKeyword, ReadingMaterial
from models.users import User
from services.catalog import visible_to
from services.errors import InvalidInputError

MAX_KEYWORD_LENGTH = 100


@dataclass
class KeywordCount:
    word: str
    count: int


def normalize_keywords(raw: Iterable[str]) -> List[str]:
    """Trim, lower-case and de-duplicate keywords, keeping first-seen order.

    Raises InvalidInputError for a keyword longer than ``MAX_KEYWORD_LENGTH``.
    """
    seen = []
    for value in raw or []:
        word = (value or "").strip().lower()
        if not word or word in seen:
            continue
        if len(word) > MAX_KEYWORD_LENGTH:
            raise InvalidInputError(
                f"Keyword '{word[:20]}...' is too long (max {MAX_KEYWORD_LENGTH} characters)"
            )
        seen.append(word)
    return seen


def split_keywords(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return normalize_keywords(value.split(","))


def keyword_frequencies(db: Session, viewer: Optional[User] = None) -> List[KeywordCount]:
    """Frequency of every keyword across the materials ``viewer`` can see.

    Without a viewer every material counts. Most used first; keywords with
    equal counts keep the order in which they were first attached to a
    material.
    """
    count = func.count(MaterialKeyword.id)
    first_seen = func.min(MaterialKeyword.id)
    stmt = select(MaterialKeyword.word, count)

    visibility = visible_to(viewer) if viewer is not None else None
    if visibility is not None:
        stmt = stmt.join(ReadingMaterial, ReadingMaterial.id == MaterialKeyword.material_id).where(visibility)

    rows = db.execute(
        stmt.group_by(MaterialKeyword.word).order_by(count.desc(), first_seen.asc())
    ).all()
    return [KeywordCount(word=word, count=total) for word, total in rows]
