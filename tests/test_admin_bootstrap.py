from config import settings
from create_admin import ensure_admin
from models.users import User


def test_ensure_admin_creates_active_admin(db):
    admin = ensure_admin(db)

    assert admin.role == 'admin'
    assert admin.is_active is True
    assert admin.email == settings.ADMIN_EMAIL.strip().lower()


def test_ensure_admin_is_repeatable(db):
    first = ensure_admin(db)
    first.is_active = False
    db.commit()

    second = ensure_admin(db)

    assert second.id == first.id
    assert second.is_active is True
    assert db.query(User).filter(User.role == 'admin').count() == 1
