"""Shared helpers for repositories."""
from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kinfolk.core.logger import get_logger

LOGGER = get_logger(__name__)


class BaseRepository:
    """Base repository holding the session all statements run on."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def _add(self, instance: Any) -> Any:
        """Add ``instance`` and flush so generated keys are populated."""

        self._session.add(instance)
        self._session.flush()
        return instance

    def _insert_if_absent(self, instance: Any) -> bool:
        """Insert ``instance`` inside a SAVEPOINT.

        Returns ``False`` when a unique constraint rejected the row, which
        callers treat as "already granted". Other errors propagate.
        """

        try:
            with self._session.begin_nested():
                self._session.add(instance)
        except IntegrityError as exc:
            LOGGER.debug(
                "Duplicate insert ignored",
                extra={"table": getattr(instance, "__tablename__", None), "error": str(exc.orig)},
            )
            return False
        return True

    @staticmethod
    def _normalize_email(value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None
