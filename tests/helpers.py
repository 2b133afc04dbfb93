import itertools
from datetime import datetime, timedelta

from models.material import MaterialKeyword, ReadingMaterial
from models.users import User
from models.vote import Vote
from utils.hashing import get_password_hash
from utils.tokenJWT import create_access_token

BASE_TIME = datetime(2026, 1, 5, 9, 0)
_clock = itertools.count(1)


def make_user(db, username='reader', *, role='user', active=True, password='secret123') -> User:
    user = User(
        username=username,
        email=f'{username}@college.edu',
        password_hash=get_password_hash(password),
        role=role,
        is_active=active,
        profile_image=f'https://avatars.example/{username}.svg',
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_material(
    db,
    owner: User,
    title='Material',
    *,
    keywords=(),
    approved=True,
    created_at=None,
    image_url=None,
) -> ReadingMaterial:
    material = ReadingMaterial(
        title=title,
        type='book',
        caption=f'About {title}',
        author='Someone',
        college='College of Industrial Technology',
        subject_titles=[],
        is_approved=approved,
        image_url=image_url,
        user_id=owner.id,
        # Distinct, increasing timestamps so "newest" order is well defined
        created_at=created_at or BASE_TIME + timedelta(minutes=next(_clock)),
    )
    material.keywords = [MaterialKeyword(word=word) for word in keywords]
    db.add(material)
    db.commit()
    db.refresh(material)
    return material


def add_votes(db, material: ReadingMaterial, voters) -> None:
    for voter in voters:
        db.add(Vote(user_id=voter.id, material_id=material.id))
    db.commit()


def auth_headers(user: User) -> dict:
    token = create_access_token({'sub': user.email, 'role': user.role})
    return {'Authorization': f'Bearer {token}'}
