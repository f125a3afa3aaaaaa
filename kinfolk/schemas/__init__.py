"""Pydantic schemas for request and response payloads."""

from .collaboration import (
    AcceptRequest,
    AcceptResult,
    CollaborationRequestCreate,
    CollaborationRequestView,
    DeclineRequest,
    IncomingRequest,
    InviteLink,
    InvitePreview,
    ProfileSnapshot,
)
from .people import (
    LinkedAccountUpdate,
    PersonCreate,
    PersonSummary,
    PersonUpdate,
    ProvisionResult,
    PersonView,
)
from .records import (
    RECORD_PAYLOADS,
    RECORD_VIEWS,
    AnyRecordView,
    YOU,
    FinancialEntryCreate,
    FinancialEntryView,
    HealthEntryCreate,
    HealthEntryView,
    ItemSharesResult,
    ItemSharesUpdate,
    NoteCreate,
    NoteView,
    RecordView,
    SharedFromInfo,
    TaskCreate,
    TaskView,
)
from .sharing import CollaboratorView, RemovedCollaborator

__all__ = [
    "AcceptRequest",
    "AcceptResult",
    "CollaborationRequestCreate",
    "CollaborationRequestView",
    "DeclineRequest",
    "IncomingRequest",
    "InviteLink",
    "InvitePreview",
    "ProfileSnapshot",
    "LinkedAccountUpdate",
    "PersonCreate",
    "PersonSummary",
    "PersonUpdate",
    "ProvisionResult",
    "PersonView",
    "RECORD_PAYLOADS",
    "RECORD_VIEWS",
    "AnyRecordView",
    "YOU",
    "FinancialEntryCreate",
    "FinancialEntryView",
    "HealthEntryCreate",
    "HealthEntryView",
    "ItemSharesResult",
    "ItemSharesUpdate",
    "NoteCreate",
    "NoteView",
    "RecordView",
    "SharedFromInfo",
    "TaskCreate",
    "TaskView",
    "CollaboratorView",
    "RemovedCollaborator",
]
