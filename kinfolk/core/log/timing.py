"""Timing helpers to log the duration of read-path operations."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Iterator, Optional

from sqlalchemy import event
from sqlalchemy.orm import Session


class StatementCounter:
    """Counts SQL statements emitted on a session's bind while attached."""

    def __init__(self) -> None:
        self.count = 0
        self._engine: Any = None

    def _on_execute(self, *args: Any, **kwargs: Any) -> None:
        self.count += 1

    def attach(self, session: Session) -> None:
        bind = session.get_bind()
        self._engine = getattr(bind, "engine", bind)
        event.listen(self._engine, "before_cursor_execute", self._on_execute)

    def detach(self) -> None:
        if self._engine is not None:
            event.remove(self._engine, "before_cursor_execute", self._on_execute)
            self._engine = None


@dataclass
class _Timer:
    label: str
    logger: logging.Logger
    level: int
    unit: str
    expected_total: Optional[int]
    count: int = 0
    start: float = field(default_factory=perf_counter)
    counter: Optional[StatementCounter] = None

    def add(self, amount: int = 1) -> None:
        self.count += amount

    def set_total(self, total: int) -> None:
        self.expected_total = total

    def _resolved_total(self) -> Optional[int]:
        return self.expected_total if self.expected_total is not None else self.count

    def finish(self, success: bool = True) -> None:
        elapsed = perf_counter() - self.start
        total = self._resolved_total()
        statements = self.counter.count if self.counter else 0

        if success:
            message = f"{self.label} completed in {elapsed:.3f}s"
            if total:
                message += f" ({total:,} {self.unit})"
            if statements:
                message += f" ({statements:,} SQL statements)"
            self.logger.log(self.level, message)
        else:
            self.logger.error(f"{self.label} failed after {elapsed:.3f}s")


@contextmanager
def timeit(
    label: str,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    unit: str = "items",
    total: int | None = None,
    session: Session | None = None,
) -> Iterator[_Timer]:
    """Context manager timing an operation.

    Args:
        label: Description of the operation being timed
        logger: Logger instance to use (defaults to "kinfolk.timer")
        level: Logging level for the timing message
        unit: Unit reported alongside the item count (e.g., "records")
        total: Expected total count, when known up front
        session: When given, SQL statements emitted through its bind are counted
    """

    counter = None
    if session is not None:
        counter = StatementCounter()
        counter.attach(session)

    timer = _Timer(
        label=label,
        logger=logger or logging.getLogger("kinfolk.timer"),
        level=level,
        unit=unit,
        expected_total=total,
        counter=counter,
    )

    try:
        yield timer
    except Exception:
        timer.finish(success=False)
        raise
    else:
        timer.finish(success=True)
    finally:
        if counter is not None:
            counter.detach()
