import datetime
import os
import tempfile

# The app engine is never used by the tests; keep it off disk.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from app.core.config import Config
from app.database.db import Base, get_db
from app.main import app
from app.models.events import Event

# A file-backed SQLite database, so every session gets its own connection
# and concurrent tests exercise real transaction isolation.
_DB_DIR = tempfile.mkdtemp(prefix="church-events-tests-")
SQLALCHEMY_DATABASE_URL = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
engine: Engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False, "timeout": 30},
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh tables for every test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


# Override the database dependency
def override_get_db():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def redis_client(monkeypatch: pytest.MonkeyPatch):
    """Route the per-event lock through an in-process fake Redis."""
    fake = fakeredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr("app.services.locks.get_redis_client", lambda: fake)
    yield fake
    fake.flushall()


@pytest.fixture
def db_session():
    db: Session = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Key": Config.ADMIN_API_KEY}


@pytest.fixture
def make_event(db_session: Session):
    """Factory inserting an active event directly in the database."""
    counter = {"n": 0}

    def _make_event(capacity: int = 10, **kwargs) -> Event:
        counter["n"] += 1
        n = counter["n"]
        fields = {
            "slug": f"event-{n}",
            "title": f"Event {n}",
            "description": "Sunday gathering",
            "date": datetime.date(2026, 12, 6),
            "time": "19:30",
            "location": "Main hall",
            "capacity": capacity,
            "current_registrations": 0,
            "is_active": True,
        }
        fields.update(kwargs)
        event = Event(**fields)
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make_event


@pytest.fixture
def session_factory():
    return TestingSessionLocal
