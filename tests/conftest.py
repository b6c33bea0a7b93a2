"""Pytest fixtures."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFIER_BACKEND"] = "log"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from rescuenet.db.base import Base  # noqa: E402
from rescuenet.db.session import get_db  # noqa: E402
from rescuenet.main import app  # noqa: E402
from rescuenet.models import SosAlert, SosVolunteerResponse, User, UserRole  # noqa: E402,F401 - register for create_all
from rescuenet.services.notifier import get_notifier  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeNotifier:
    """Records every push; tokens in ``fail_tokens`` fail, tokens in ``raise_tokens`` raise."""

    def __init__(self):
        self.sent = []
        self.fail_tokens = set()
        self.raise_tokens = set()

    def send(self, push_token, message):
        self.sent.append((push_token, message))
        if push_token in self.raise_tokens:
            raise ConnectionError("push service unreachable")
        return push_token not in self.fail_tokens


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def setup_db():
    """Fresh schema per test: volunteer selection looks at every volunteer in the table."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_db):
    """Session for service-level tests."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def client(setup_db, notifier):
    """Test client with overridden DB and notifier."""
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Insert a user directly, skipping password hashing."""
    counter = iter(range(1, 10_000))

    def _make(role=UserRole.VOLUNTEER, name=None, latitude=None, longitude=None, push_token=None, is_active=True):
        n = next(counter)
        user = User(
            email=f"user{n}@test.com",
            hashed_password="x",
            full_name=name or f"User {n}",
            role=role,
            latitude=latitude,
            longitude=longitude,
            push_token=push_token,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make
