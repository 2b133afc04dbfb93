# backend/services/materials.py
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy.orm import Session

from config import settings
from models.material import MaterialKeyword, ReadingMaterial
from models.users import User
from services.catalog import get_material
from services.errors import ForbiddenError, InvalidInputError
from services.keywords import normalize_keywords
from utils import storage

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "type", "caption", "author")


@dataclass
class MaterialDraft:
    title: str
    type: str
    caption: str
    author: str
    college: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    subject_titles: List[str] = field(default_factory=list)
    version: Optional[int] = None
    edition: Optional[int] = None
    image_url: Optional[str] = None


def clean_subject_titles(values) -> List[str]:
    titles = []
    for value in values or []:
        title = (value or "").strip()
        if title and title not in titles:
            titles.append(title)
    return titles


def validate_draft(draft: MaterialDraft) -> MaterialDraft:
    for name in REQUIRED_FIELDS:
        value = (getattr(draft, name) or "").strip()
        if not value:
            raise InvalidInputError(f"Field '{name}' is required")
        setattr(draft, name, value)

    for name in ("version", "edition"):
        value = getattr(draft, name)
        if value is not None and value < 1:
            raise InvalidInputError(f"Field '{name}' must be a positive number")

    draft.keywords = normalize_keywords(draft.keywords)
    draft.subject_titles = clean_subject_titles(draft.subject_titles)
    return draft


def create_material(db: Session, owner: User, draft: MaterialDraft) -> ReadingMaterial:
    draft = validate_draft(draft)

    material = ReadingMaterial(
        title=draft.title,
        type=draft.type,
        caption=draft.caption,
        author=draft.author,
        college=(draft.college or "").strip() or settings.DEFAULT_COLLEGE,
        subject_titles=draft.subject_titles,
        version=draft.version,
        edition=draft.edition,
        image_url=draft.image_url,
        is_approved=False,
        user_id=owner.id,
    )
    material.keywords = [MaterialKeyword(word=word) for word in draft.keywords]

    db.add(material)
    db.commit()
    db.refresh(material)
    return material


def delete_material(db: Session, material_id: int, requester: User) -> str:
    """Delete a material owned by ``requester`` along with its votes, keywords and image."""
    material = get_material(db, material_id)
    if material.user_id != requester.id:
        raise ForbiddenError("You are not authorized to delete this reading material")

    image_url, title = material.image_url, material.title
    db.delete(material)
    db.commit()

    # The row is gone either way; a leftover file is only logged
    if image_url and not storage.delete_image(image_url):
        logger.warning("Stored image for material %s was not removed: %s", material_id, image_url)
    return title


def update_subject_titles(db: Session, material_id: int, subject_titles: List[str]) -> ReadingMaterial:
    material = get_material(db, material_id)
    material.subject_titles = clean_subject_titles(subject_titles)
    db.commit()
    db.refresh(material)
    return material
