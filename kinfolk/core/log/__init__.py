"""Logging setup for the API and the maintenance scripts.

Records go through a queue to a rich console handler and, when ``LOG_FILE``
is set, to a size-rotated plain text file. Both handlers prefix every line
with the fields bound through :data:`log_context`.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import SimpleQueue
from threading import RLock

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from .context import ContextFilter, log_context
from .timing import timeit

__all__ = [
    "init_logging",
    "get_logger",
    "shutdown_logging",
    "log_context",
    "timeit",
]

# Libraries that are chatty at INFO; they only log at WARNING and above
# unless LOG_LEVEL is DEBUG.
_NOISY_LOGGERS = ("sqlalchemy.engine", "httpx", "uvicorn.access")


def _env_path(name: str) -> Path | None:
    value = os.getenv(name, "")
    return Path(value) if value else None


@dataclass
class LoggingConfig:
    app_name: str = "kinfolk"
    level: str | int = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_file: Path | None = field(default_factory=lambda: _env_path("LOG_FILE"))
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 3
    console: bool = True
    rich_tracebacks: bool = True


_lock = RLock()
_active: LoggingConfig | None = None
_listener: QueueListener | None = None
_context_filter = ContextFilter()


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def _console_handler(cfg: LoggingConfig) -> logging.Handler:
    if cfg.rich_tracebacks:
        install_rich_traceback(show_locals=False)
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=cfg.rich_tracebacks,
        show_path=False,
        markup=False,
        log_time_format="%H:%M:%S",
    )
    handler.setFormatter(logging.Formatter("[%(name)s] %(context)s%(message)s"))
    return handler


def _file_handler(cfg: LoggingConfig) -> logging.Handler:
    path = Path(cfg.log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        path,
        maxBytes=cfg.max_bytes,
        backupCount=cfg.backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(context)s%(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def init_logging(**overrides: object) -> None:
    """Install the handlers; calling again with the same options is a no-op."""

    global _active, _listener

    cfg = LoggingConfig(app_name=str(overrides.pop("app_name", "kinfolk")))
    for key, value in overrides.items():
        if not hasattr(cfg, key):
            raise TypeError(f"Unknown logging option: {key}")
        setattr(cfg, key, value)

    with _lock:
        if _active == cfg:
            return
        _teardown_locked()

        level = _parse_level(cfg.level)
        handlers: list[logging.Handler] = []
        if cfg.console:
            handlers.append(_console_handler(cfg))
        if cfg.log_file:
            handlers.append(_file_handler(cfg))
        for handler in handlers:
            handler.setLevel(level)
            handler.addFilter(_context_filter)

        root = logging.getLogger()
        root.setLevel(level)
        if handlers:
            # The filter runs on the calling thread so context vars are captured.
            queue: SimpleQueue = SimpleQueue()
            queue_handler = QueueHandler(queue)
            queue_handler.addFilter(_context_filter)
            root.addHandler(queue_handler)
            _listener = QueueListener(queue, *handlers, respect_handler_level=True)
            _listener.start()

        quiet = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(quiet)
        _active = cfg


def _teardown_locked() -> None:
    global _active, _listener
    if _listener is not None:
        _listener.stop()
    _listener = None
    _active = None
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()


def shutdown_logging() -> None:
    """Stop the queue listener and detach every handler."""

    with _lock:
        _teardown_locked()


def get_logger(name: str | None = None) -> logging.Logger:
    with _lock:
        if _active is None:
            init_logging()
        app_name = _active.app_name if _active else "kinfolk"
    return logging.getLogger(name or app_name)
