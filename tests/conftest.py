"""
Pytest fixtures for HelpRadar tests. Uses an in-memory SQLite database per test.
"""

from __future__ import annotations

import os
from datetime import datetime

os.environ.setdefault("HELPRADAR_DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from helpradar.database import Base, get_db
from helpradar.models.post import Coordinates, PostRecord
from helpradar.services.rate_limiter import rate_limiter


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    rate_limiter.reset()
    yield
    rate_limiter.reset()


@pytest.fixture
def client(session_factory):
    """FastAPI TestClient bound to the per-test database."""
    from fastapi.testclient import TestClient

    from helpradar.main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def make_post():
    """Build plain PostRecords for engine tests."""
    counter = {"id": 0}

    def _make(
        title="Need help",
        description="",
        category="Help Needed",
        urgency="Medium",
        created_at=None,
        priority=0,
        coords=None,
        **fields,
    ):
        counter["id"] += 1
        return PostRecord(
            id=counter["id"],
            title=title,
            description=description,
            category=category,
            urgency=urgency,
            created_at=created_at or datetime(2024, 1, 1, 12, 0, 0),
            priority=priority,
            coordinates=Coordinates(longitude=coords[1], latitude=coords[0]) if coords else None,
            **fields,
        )

    return _make
