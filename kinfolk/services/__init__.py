"""Service layer entrypoints for domain logic."""

from .collaboration_service import CollaborationService
from .grants import GrantResolver
from .people_service import PeopleService
from .person_view import PersonViewComposer
from .records_service import RecordsService
from .sharing_service import SharingService

__all__ = [
    "CollaborationService",
    "GrantResolver",
    "PeopleService",
    "PersonViewComposer",
    "RecordsService",
    "SharingService",
]
