"""Database models for people, records and the sharing grant tables."""
from __future__ import annotations

from .base import Base, as_utc, utcnow
from .identity import Account
from .people import DEFAULT_THEME_COLOR, SELF_RELATION, Gender, Person, SharingPreference
from .records import (
    RECORD_MODELS,
    FinancialEntry,
    FinancialEntryType,
    HealthEntry,
    HealthEntryType,
    Note,
    RecordMixin,
    RecordType,
    Task,
    TaskPriority,
    model_for,
)
from .sharing import (
    CollaborationRequest,
    ItemShare,
    PersonShare,
    ProfileLink,
    RequestStatus,
    pair_key,
)

__all__ = [
    "Base",
    "as_utc",
    "utcnow",
    "Account",
    "DEFAULT_THEME_COLOR",
    "SELF_RELATION",
    "Gender",
    "Person",
    "SharingPreference",
    "RECORD_MODELS",
    "FinancialEntry",
    "FinancialEntryType",
    "HealthEntry",
    "HealthEntryType",
    "Note",
    "RecordMixin",
    "RecordType",
    "Task",
    "TaskPriority",
    "model_for",
    "CollaborationRequest",
    "ItemShare",
    "PersonShare",
    "ProfileLink",
    "RequestStatus",
    "pair_key",
]
