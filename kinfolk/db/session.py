"""Opinionated SQLAlchemy session helpers."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy.orm import Session, sessionmaker

from .engine import create_sync_engine


def get_sessionmaker(url: str | None = None, **kwargs) -> sessionmaker:
    """Return a ``sessionmaker`` bound to a freshly created engine."""

    engine = create_sync_engine(url, **kwargs)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@lru_cache(maxsize=1)
def get_default_sessionmaker() -> sessionmaker:
    """Return the process-wide ``sessionmaker`` for the configured database."""

    return get_sessionmaker()


@contextmanager
def session_scope(url: str | None = None, **kwargs) -> Iterator[Session]:
    """Provide a transactional scope for imperative scripts."""

    Session = get_sessionmaker(url, **kwargs)
    session = Session()
    try:
        yield session
        session.commit()
    except Exception:  # pragma: no cover - re-raise for callers
        session.rollback()
        raise
    finally:
        session.close()
