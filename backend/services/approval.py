# backend/services/approval.py
import logging

from sqlalchemy.orm import Session

from models.material import ReadingMaterial
from models.users import User
from services.errors import NotFoundError

logger = logging.getLogger(__name__)


def set_user_active(db: Session, user_id: int, active: bool = True) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    if user.is_active != active:
        user.is_active = active
        db.commit()
        db.refresh(user)
        logger.info("User %s is_active=%s", user.id, active)
    return user


def set_material_approved(db: Session, material_id: int, approved: bool = True) -> ReadingMaterial:
    material = db.get(ReadingMaterial, material_id)
    if material is None:
        raise NotFoundError("Reading material not found")

    if material.is_approved != approved:
        material.is_approved = approved
        db.commit()
        db.refresh(material)
        logger.info("Material %s is_approved=%s", material.id, approved)
    return material
