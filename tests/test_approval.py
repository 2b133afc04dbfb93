import pytest

from services import approval
from services.errors import NotFoundError
from helpers import make_material, make_user


def test_activate_user(db):
    pending = make_user(db, 'newcomer', active=False)

    user = approval.set_user_active(db, pending.id)

    assert user.is_active is True


def test_activation_is_idempotent(db, reader):
    assert approval.set_user_active(db, reader.id).is_active is True
    assert approval.set_user_active(db, reader.id).is_active is True


def test_deactivate_user(db, reader):
    assert approval.set_user_active(db, reader.id, active=False).is_active is False


def test_approve_material(db, reader):
    material = make_material(db, reader, 'Pending', approved=False)

    assert approval.set_material_approved(db, material.id).is_approved is True
    assert approval.set_material_approved(db, material.id, approved=False).is_approved is False


def test_unknown_ids_raise_not_found(db):
    with pytest.raises(NotFoundError):
        approval.set_user_active(db, 404)
    with pytest.raises(NotFoundError):
        approval.set_material_approved(db, 404)
