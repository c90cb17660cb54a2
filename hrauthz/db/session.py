from __future__ import annotations

from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from hrauthz.security.context import AuthzContext
from hrauthz.settings import get_settings


_settings = get_settings()

engine = create_engine(
    _settings.db_url,
    connect_args={"check_same_thread": False} if _settings.is_sqlite else {},
)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def bind_authz(db: Session, authz: AuthzContext | None) -> Session:
    """Attach (or clear) the caller's authorization context; filters read it on every select."""
    if authz is None:
        db.info.pop("authz", None)
    else:
        db.info["authz"] = authz
    return db


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Main DB dependency.

    One session per request: `enforce_security` opens it, binds the caller's
    AuthzContext once authenticated, and endpoints get the same instance from
    the dependency cache. `select(Employee)` / `select(Task)` then come back
    already narrowed to the caller's scope (see hrauthz/db/filters.py).
    """

    db = SessionLocal()
    try:
        bind_authz(db, getattr(getattr(request, "state", None), "authz", None))
        yield db
    finally:
        db.close()
