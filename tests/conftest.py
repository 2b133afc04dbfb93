import os
import tempfile

# Settings are read on import, so the environment has to be ready first
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('UPLOAD_DIR', tempfile.mkdtemp(prefix='reading-materials-uploads-'))
os.environ.setdefault('SECRET_KEY', 'test-secret-key')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models.log  # noqa: E402, F401
import models.material  # noqa: E402, F401
import models.users  # noqa: E402, F401
import models.vote  # noqa: E402, F401
from database import Base, get_db  # noqa: E402
from main import app  # noqa: E402
from helpers import make_user  # noqa: E402


@pytest.fixture
def engine():
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def reader(db):
    return make_user(db, 'reader')


@pytest.fixture
def admin(db):
    return make_user(db, 'librarian', role='admin')
