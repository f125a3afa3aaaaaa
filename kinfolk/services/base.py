"""Transaction handling shared by the write-side services."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


class TransactionalService:
    """Service bound to a request-scoped session.

    Each public write operation runs inside :meth:`_unit_of_work`, which
    commits on success and rolls back on any error.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def _unit_of_work(self) -> Iterator[Session]:
        try:
            yield self._session
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise
