import os

# Must be set before app modules read settings
os.environ["ENV"] = "test"
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("OPENAI_ASSISTANT_ID", "asst_test")
os.environ["ASSISTANT_POLL_INTERVAL_SECONDS"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.db import Base, get_db
from app.main import create_app

pytest_plugins = [
    "tests.fixtures.assistant_fixtures",
    "tests.fixtures.chat_fixtures",
]


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine):
    """Fresh schema per test on an in-memory SQLite database."""
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def user_id(faker):
    return faker.uuid4()


@pytest.fixture
def test_app(db, assistant_client):
    app = create_app(testing=True)
    app.state.assistant_client = assistant_client

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app, user_id):
    """TestClient authenticated as ``user_id`` through the X-User-Id header."""
    with TestClient(test_app, headers={"X-User-Id": user_id}) as c:
        yield c
