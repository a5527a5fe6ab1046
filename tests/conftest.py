"""
Pytest configuration and shared fixtures for Team Meeting Scheduler tests.
"""
import copy
import os
import tempfile
import time
import uuid
from datetime import datetime, timezone

os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.application.scheduling_service import SchedulingService
from app.domain.entities import User
from app.domain.errors import UnknownUserError
from app.infrastructure.repositories import (
    MeetingRepository,
    SqlAlchemyMeetingRepository,
    SqlAlchemyUserDirectory,
    UserDirectory,
    normalize_email,
)
from database.models import Base, User as UserRow
from database.connection import get_db
from main import app


@pytest.fixture(scope="session")
def test_db_engine():
    """Create a test database engine backed by a temporary SQLite file."""
    # File-based SQLite so TestClient worker threads and direct sessions share data
    tmp_path = os.path.join(tempfile.gettempdir(), f"scheduler_test_{os.getpid()}.sqlite")
    engine = create_engine(
        f"sqlite:///{tmp_path}",
        connect_args={"check_same_thread": False}
    )
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    if os.path.exists(tmp_path):
        os.remove(tmp_path)


@pytest.fixture(scope="function")
def test_db_session(test_db_engine):
    """Create a fresh database session for each test."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Clean up tables between tests
        with test_db_engine.connect() as connection:
            with connection.begin():
                for table in reversed(Base.metadata.sorted_tables):
                    connection.execute(table.delete())


@pytest.fixture(scope="function")
def test_client(test_db_session):
    """Create a test client with overridden database dependency."""

    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    # Clean up
    app.dependency_overrides.clear()


def _add_user(session, name: str, email: str) -> UserRow:
    user = UserRow(name=name, email=email)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def alice(test_db_session):
    return _add_user(test_db_session, "Alice", "alice@example.com")


@pytest.fixture
def bob(test_db_session):
    return _add_user(test_db_session, "Bob", "bob@example.com")


@pytest.fixture
def carol(test_db_session):
    return _add_user(test_db_session, "Carol", "carol@example.com")


@pytest.fixture
def dave(test_db_session):
    return _add_user(test_db_session, "Dave", "dave@example.com")


@pytest.fixture
def service(test_db_session):
    """SchedulingService over the SQLAlchemy repositories."""
    return SchedulingService(
        meetings=SqlAlchemyMeetingRepository(test_db_session),
        directory=SqlAlchemyUserDirectory(test_db_session),
    )


@pytest.fixture
def at():
    """Build an aware UTC datetime on a fixed day: at(10, 30) -> 10:30."""
    def _at(hour: int, minute: int = 0, day: int = 15) -> datetime:
        return datetime(2030, 1, day, hour, minute, tzinfo=timezone.utc)
    return _at


@pytest.fixture
def headers():
    """Build actor identity headers as set by the auth gateway."""
    def _headers(user) -> dict:
        return {"X-User-Id": str(user.id)}
    return _headers


# ---------------------------------------------------------------------------
# In-memory collaborators for tests that must not touch SQLite (threads)
# ---------------------------------------------------------------------------

class InMemoryMeetingRepository(MeetingRepository):
    """Dict-backed repository; ``find_delay`` widens the check-then-write window."""

    def __init__(self, find_delay: float = 0.0):
        self.find_delay = find_delay
        self._store = {}

    def find_committed(self, participant_id, exclude_meeting_id=None):
        committed = [
            copy.deepcopy(m) for m in list(self._store.values())
            if m.id != exclude_meeting_id and (
                m.organizer_id == participant_id
                or any(a.user_id == participant_id and a.status.value == "accepted" for a in m.attendees)
            )
        ]
        if self.find_delay:
            time.sleep(self.find_delay)
        return committed

    def find_for_participant(self, participant_id):
        found = [copy.deepcopy(m) for m in list(self._store.values()) if m.involves(participant_id)]
        return sorted(found, key=lambda m: m.start)

    def find_by_id(self, meeting_id):
        meeting = self._store.get(meeting_id)
        return copy.deepcopy(meeting) if meeting else None

    def save(self, meeting):
        stored = copy.deepcopy(meeting)
        if stored.id is None:
            stored.id = str(uuid.uuid4())
        self._store[stored.id] = stored
        return copy.deepcopy(stored)

    def delete_by_id(self, meeting_id):
        self._store.pop(meeting_id, None)


class InMemoryUserDirectory(UserDirectory):

    def __init__(self, users=()):
        self._users = {u.id: u for u in users}

    def add(self, name: str, email: str) -> User:
        user = User(id=str(uuid.uuid4()), email=email, name=name)
        self._users[user.id] = user
        return user

    def resolve_by_emails(self, emails):
        by_email = {normalize_email(u.email): u for u in self._users.values()}
        wanted = list(dict.fromkeys(normalize_email(e) for e in emails))
        missing = [e for e in wanted if e not in by_email]
        if missing:
            raise UnknownUserError(missing)
        return [by_email[e] for e in wanted]

    def find_by_ids(self, user_ids):
        return {uid: self._users[uid] for uid in user_ids if uid in self._users}

    def search(self, query, exclude_user_id=None):
        q = query.strip().lower()
        return [
            u for u in self._users.values()
            if u.id != exclude_user_id and (q in u.email.lower() or q in u.name.lower())
        ]


@pytest.fixture
def memory_repo():
    return InMemoryMeetingRepository()


@pytest.fixture
def memory_directory():
    return InMemoryUserDirectory()


@pytest.fixture
def slow_memory_repo():
    """In-memory repository whose committed-schedule reads stall, to expose races."""
    return InMemoryMeetingRepository(find_delay=0.05)
