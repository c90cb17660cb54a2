"""
Pytest fixtures for the test suite.

Data-layer tests use an in-memory SQLite engine and a session that rolls back
after each test, so tests do not affect each other.

HTTP tests run the real app (lifespan included) against a throwaway SQLite
file seeded with the demo company. The env var must be set before
hrauthz.db.session is imported, hence the module-level setup below.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

_TEST_DIR = tempfile.mkdtemp(prefix="hrauthz-tests-")
os.environ.setdefault("APP_DB_URL", f"sqlite:///{Path(_TEST_DIR) / 'api.db'}")

TEST_DB_URL = "sqlite:///:memory:"


@pytest.fixture
def engine():
    """Create a fresh in-memory SQLite engine for each test."""
    return create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        echo=False,
    )


@pytest.fixture
def tables(engine):
    """Create all ORM tables on the test engine."""
    from hrauthz.db import filters as _filters  # noqa: F401  (register scope filters)
    from hrauthz.db.base import Base
    from hrauthz.models import hr as _models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(tables):
    """
    Provide a Session bound to the test DB; roll back after each test.

    The transaction is rolled back so the next test gets a clean state.
    """
    connection = tables.connect()
    transaction = connection.begin()
    TestSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        class_=Session,
    )
    session = TestSession()
    yield session
    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="session")
def client():
    """TestClient over the full app; startup loads config, builds the policy and seeds the DB."""
    from fastapi.testclient import TestClient

    from hrauthz.main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client


@pytest.fixture
def as_user():
    """Headers authenticating as a seeded employee: 1 Owner, 2 Admin (IT), 3-4 Employees (IT), 5 Employee (FIN)."""

    def _headers(employee_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {employee_id}"}

    return _headers
