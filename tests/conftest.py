import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ATLAS_APP_CODE", "WORKFORCE_SECURITY")

from datetime import datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from atams.db import Base
from atams.exceptions import setup_exception_handlers

import app.models  # noqa: F401  registers the tables on Base.metadata
from app.api.deps import require_auth
from app.api.v1.api import api_router
from app.db.session import get_db

ORG_ID = "org-1"
GUARD_ID = 101
SUPERVISOR_ID = 900


class FakeClock:
    """Deterministic clock; every call advances by `step`"""

    def __init__(self, start: datetime, step: timedelta = timedelta(0)):
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        execution_options={"schema_translate_map": {"workforce": None}},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def current_user():
    return {"user_id": SUPERVISOR_ID, "username": "supervisor", "role_level": 50}


@pytest.fixture
def client(session_factory, current_user):
    app = FastAPI()
    setup_exception_handlers(app)
    app.include_router(api_router, prefix="/api/v1")

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[require_auth] = lambda: current_user
    with TestClient(app) as test_client:
        yield test_client
