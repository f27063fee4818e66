import os

# Must be set before hestia.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "INFO"
os.environ["SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from hestia.core.auth import create_access_token
from hestia.core.db import Base, SessionLocal, engine, get_db
from hestia.main import app
from hestia.modules.users.models import User


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make(username: str, profile_pic: bytes | None = None) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            profile_pic=profile_pic,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def auth():
    def _headers(username: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(username)}"}

    return _headers
