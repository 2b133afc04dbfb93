"""Create (or re-activate) the bootstrap admin account.

Usage:
    python create_admin.py

Credentials come from ADMIN_EMAIL / ADMIN_USERNAME / ADMIN_PASSWORD.
"""
import logging

from config import settings
from database import SessionLocal, init_db
from models.users import User
from utils.hashing import get_password_hash

logger = logging.getLogger(__name__)


def ensure_admin(db) -> User:
    email = settings.ADMIN_EMAIL.strip().lower()
    admin = db.query(User).filter(User.email == email).first()
    if admin is None:
        admin = User(
            username=settings.ADMIN_USERNAME,
            email=email,
            password_hash=get_password_hash(settings.ADMIN_PASSWORD),
            role="admin",
            is_active=True,
            profile_image=settings.AVATAR_URL_TEMPLATE.format(username=settings.ADMIN_USERNAME),
        )
        db.add(admin)
        logger.info("Creating admin account %s", email)
    else:
        admin.role = "admin"
        admin.is_active = True
        logger.info("Admin account %s already exists, making sure it is active", email)
    db.commit()
    db.refresh(admin)
    return admin


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_db()
    db = SessionLocal()
    try:
        ensure_admin(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
