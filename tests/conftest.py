# tests/conftest.py

import os
import tempfile

# Point the import-time engine at a scratch file before taskflow is imported.
os.environ.setdefault("DATABASE_URL", f"sqlite:///{tempfile.gettempdir()}/taskflow-tests.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from taskflow.auth import create_token, hash_password
from taskflow.client.api import TaskflowClient
from taskflow.database import get_db, init_db
from taskflow.main import app
from taskflow.models.user import User


@pytest.fixture()
def engine(tmp_path):
    """Fresh SQLite database per test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'taskflow.db'}",
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    """TestClient whose requests use the per-test database."""

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db, username: str) -> User:
    user = User(username=username, name=username.title(), hashed_password=hash_password("secret123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def user(db) -> User:
    return _make_user(db, "alice")


@pytest.fixture()
def other_user(db) -> User:
    return _make_user(db, "bob")


@pytest.fixture()
def token(user) -> str:
    return create_token({"user_id": user.id, "username": user.username})


@pytest.fixture()
def auth_headers(token) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def other_headers(other_user) -> dict:
    return {"Authorization": f"Bearer {create_token({'user_id': other_user.id, 'username': other_user.username})}"}


@pytest.fixture()
def api(client, token) -> TaskflowClient:
    """TaskflowClient talking to the app in-process through the TestClient."""
    return TaskflowClient(http=client, token=token)
