"""Core utilities shared across the application."""

from .config import Settings, get_settings  # noqa: F401
from .errors import KinfolkError  # noqa: F401
from .logger import get_logger  # noqa: F401

__all__ = ["KinfolkError", "Settings", "get_settings", "get_logger"]
