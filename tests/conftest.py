"""Pytest fixtures for LabTrack API tests."""

from __future__ import annotations

import base64
import os
import uuid
from datetime import datetime, timezone

# Settings are read at import time; point them at an in-memory database first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_SECRET_KEY"] = "test-secret"
os.environ["AUTH_ALGORITHM"] = "HS256"
os.environ["AUTH_AUDIENCE"] = ""
os.environ["AUTH_ISSUER"] = ""
os.environ["WEBHOOK_SIGNING_SECRET"] = "whsec_" + base64.b64encode(b"test-webhook-secret").decode()
os.environ["LOG_LEVEL"] = "info"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.session import Base, get_db
from app.main import create_app
from app.models.asset import Asset  # noqa: F401
from app.models.attendance import Attendance  # noqa: F401
from app.models.building import Building, Floor, Room
from app.models.schedule import Schedule
from app.models.storage import DeploymentRecord, StorageItem  # noqa: F401
from app.models.ticket import Ticket, TicketComment  # noqa: F401
from app.models.user import Permission, User, UserPermission  # noqa: F401
from app.services.log_service import LogStore


def make_token(sub: str) -> str:
    return jwt.encode({"sub": sub}, "test-secret", algorithm="HS256")


def auth_headers(sub: str) -> dict:
    return {"Authorization": f"Bearer {make_token(sub)}"}


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture
def foreign_keys(engine):
    """Enforce foreign keys on the shared in-memory connection, as Postgres does."""
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")
    return engine


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def log_store() -> LogStore:
    return LogStore(max_entries=1000, level="info")


@pytest.fixture
def app(session_factory, log_store):
    application = create_app(log_store=log_store)

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application.dependency_overrides[get_db] = _get_db
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    def _make(external_id: str | None = None, role: str = "member", **kw) -> User:
        u = User(
            id=str(uuid.uuid4()),
            external_id=external_id or f"idp_{uuid.uuid4().hex[:8]}",
            role=role,
            **kw,
        )
        db.add(u)
        db.commit()
        return u
    return _make


@pytest.fixture
def room(db) -> Room:
    b = Building(id=str(uuid.uuid4()), name="Main Building", code="MB")
    f = Floor(id=str(uuid.uuid4()), number=3, building_id=b.id)
    r = Room(id=str(uuid.uuid4()), number="302", name="Computer Lab", type="LAB", floor_id=f.id)
    db.add_all([b, f, r])
    db.commit()
    return r


@pytest.fixture
def schedule(db, room, make_user) -> Schedule:
    instructor = make_user("idp_instructor", role="member", first_name="Ada", last_name="Reyes")
    s = Schedule(
        id="s1",
        title="Math 101",
        start_time=datetime(2026, 1, 5, 8, 0, tzinfo=timezone.utc),
        end_time=datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc),
        day_of_week="monday",
        user_id=instructor.id,
        room_id=room.id,
    )
    db.add(s)
    db.commit()
    return s
