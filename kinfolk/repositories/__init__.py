"""Repositories wrapping SQLAlchemy access to the kinfolk tables."""

from .accounts import AccountsRepository
from .people import PeopleRepository
from .records import RecordsRepository
from .requests import CollaborationRequestRepository
from .sharing import SharingRepository

__all__ = [
    "AccountsRepository",
    "CollaborationRequestRepository",
    "PeopleRepository",
    "RecordsRepository",
    "SharingRepository",
]
