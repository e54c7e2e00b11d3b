import datetime as dt
import itertools
import os
import tempfile

# Settings are read at import time, so point them at throwaway resources first
_TEST_DIR = tempfile.mkdtemp(prefix="eventhub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'app.db')}"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from eventhub.core.security import create_access_token
from eventhub.crud.users import create_user, update_user_jti
from eventhub.database.db import Base, get_db
from eventhub.main import app
from eventhub.models.events import Event
from eventhub.models.registrations import Registration
from eventhub.models.users import User

# File-backed SQLite so that every thread gets its own connection
SQLALCHEMY_DATABASE_URL = f"sqlite:///{os.path.join(_TEST_DIR, 'test.db')}"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

_counter = itertools.count(1)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Set up and tear down the database for the test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def fake_redis():
    return fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)


@pytest.fixture(autouse=True)
def redis_client(fake_redis, monkeypatch: pytest.MonkeyPatch):
    """Route the per-event lock to an in-process Redis."""
    monkeypatch.setattr("eventhub.core.locks.get_redis_client", lambda: fake_redis)
    return fake_redis


@pytest.fixture(autouse=True)
def task_sessions(monkeypatch: pytest.MonkeyPatch):
    # Eager Celery tasks open their own session; keep them on the test database
    monkeypatch.setattr("eventhub.tasks.SessionLocal", TestingSessionLocal)


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def user_factory():
    def make_user(name: str | None = None, password: str = "secret123") -> User:
        n = next(_counter)
        db = TestingSessionLocal()
        try:
            user = create_user(db, name or f"user{n}", f"user{n}@example.com", password)
            db.expunge(user)
        finally:
            db.close()
        return user

    return make_user


@pytest.fixture
def event_factory(user_factory):
    def make_event(organizer: User | None = None, capacity: int = 10, **fields) -> Event:
        organizer = organizer or user_factory()
        values = {
            "title": f"Event {next(_counter)}",
            "description": "An event for testing",
            "category": "workshop",
            "date": dt.date(2030, 3, 15),
            "time": "09:00 AM",
            "location": "San Francisco, CA",
            "status": "published",
        }
        values.update(fields)
        db = TestingSessionLocal()
        try:
            event = Event(capacity=capacity, organizer_id=organizer.id, **values)
            db.add(event)
            db.commit()
            db.refresh(event)
            db.expunge(event)
        finally:
            db.close()
        return event

    return make_event


@pytest.fixture
def auth_headers():
    """Build a bearer header for a user, the way login does."""

    def make_headers(user: User) -> dict[str, str]:
        db = TestingSessionLocal()
        try:
            stored = db.get(User, user.id)
            jti = update_user_jti(db, stored)
        finally:
            db.close()
        token = create_access_token(data={"sub": str(user.id)}, jti=jti)
        return {"Authorization": f"Bearer {token}"}

    return make_headers


@pytest.fixture
def register_payload():
    def make_payload(event_id: int, name: str = "Ada Lovelace") -> dict:
        return {
            "event_id": event_id,
            "name": name,
            "email": "ada@example.com",
            "phone": "+1 555 0100",
        }

    return make_payload


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def counts():
    """(registration_count, live registration rows) for an event, read through a fresh session."""

    def read(event_id: int) -> tuple[int, int]:
        db = TestingSessionLocal()
        try:
            count = db.scalar(select(Event.registration_count).where(Event.id == event_id))
            rows = db.scalar(select(func.count(Registration.id)).where(Registration.event_id == event_id))
            return count, rows
        finally:
            db.close()

    return read
