import os
import tempfile

# Settings are read once at import time, so point them at a throwaway database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-with-at-least-32-bytes"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="formclone-logs-")

import pytest
from fastapi.testclient import TestClient

from formclone.db.base import Base
from formclone.db.session import SessionLocal, engine
from formclone.main import app
from formclone.models.user import User


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def owner(db):
    user = User(name="Owner", email="owner@example.com", hashed_password="not-used")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user

@pytest.fixture
def login(client):
    """Register a user through the API and return bearer headers for it"""
    def _login(email="ada@example.com", password="correct horse", name="Ada"):
        response = client.post("/api/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        response = client.post("/api/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _login

@pytest.fixture
def auth_headers(login):
    return login()

@pytest.fixture
def other_headers(login):
    return login(email="grace@example.com", name="Grace")
