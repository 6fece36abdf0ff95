"""
Engine and session factories for the SQL storage adapter.

Engines are cached per database URL, so several stores pointing at different
SQLite files (tests, separate data sets) each get their own connection pool.
"""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


@lru_cache
def get_engine(url: str):
    url = (url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    return create_engine(url, future=True, pool_pre_ping=True)


@lru_cache
def _get_sessionmaker(url: str):
    return sessionmaker(bind=get_engine(url), autoflush=False, autocommit=False, future=True)


@contextmanager
def get_session(url: str) -> Session:
    """Open a short-lived session on the storage_entries database at ``url``."""
    session: Session = _get_sessionmaker(url)()
    try:
        yield session
    finally:
        session.close()
