"""
Test configuration and fixtures for the link page API.
This centralizes all test setup, making individual tests clean.
"""

import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("RATE_LIMIT_BACKEND", "null")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from linkpage_app.database.connection import Base, get_db
from linkpage_app.models import Plan, User

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "s3cret-password"


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def make_client(db_session):
    """
    Factory for test clients sharing the test database.

    Each client has its own cookie jar, so two clients act as two users.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    clients = []

    def factory() -> TestClient:
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield factory

    for test_client in clients:
        test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(make_client):
    """Anonymous test client."""
    return make_client()


def register(client: TestClient, email: str, username: str = None, name: str = None) -> dict:
    """Register through the API; the client keeps the auth cookies."""
    payload = {"email": email, "password": PASSWORD}
    if username:
        payload["username"] = username
    if name:
        payload["name"] = name
    response = client.post("/auth/register", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["user"]


def upgrade_to_pro(db_session, user_id: str, advanced_analytics: bool = True) -> User:
    user = db_session.get(User, user_id)
    user.plan = Plan.PRO
    user.features = {**user.features, "advancedAnalytics": advanced_analytics}
    db_session.commit()
    return user


@pytest.fixture
def owner_client(make_client):
    """Client signed in as a FREE user who already has the profile `alice`."""
    test_client = make_client()
    test_client.user = register(test_client, "alice@example.com", username="alice", name="Alice")
    return test_client


@pytest.fixture
def other_client(make_client):
    """A second signed-in user with profile `bob`."""
    test_client = make_client()
    test_client.user = register(test_client, "bob@example.com", username="bob")
    return test_client


def add_links(client: TestClient, *titles: str) -> list:
    links = []
    for title in titles:
        response = client.post(
            "/links", json={"title": title, "url": f"https://example.com/{title.lower()}"}
        )
        assert response.status_code == 201, response.text
        links.append(response.json())
    return links
