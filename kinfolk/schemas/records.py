"""Schemas for records and the attribution attached to them."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from kinfolk.models import (
    FinancialEntryType,
    HealthEntryType,
    RecordType,
    TaskPriority,
)

YOU = "You"


class SharedFromInfo(BaseModel):
    """Who shared a record with the viewer, as recorded on its item share."""

    account_id: int | None = None
    name: str
    email: str | None = None


class RecordView(BaseModel):
    """Fields common to every record as seen by one viewer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    record_type: RecordType
    person_id: int
    title: str
    created_at: dt.datetime
    created_by_account_id: int
    is_own: bool = False
    attribution: str = YOU
    created_by_name: str | None = None
    created_by_email: str | None = None
    shared_from: SharedFromInfo | None = None
    shared_with_person_share_ids: list[int] = Field(default_factory=list)


class TaskView(RecordView):
    record_type: Literal[RecordType.TODO] = RecordType.TODO
    due_date: dt.date | None = None
    description: str | None = None
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.MEDIUM


class HealthEntryView(RecordView):
    record_type: Literal[RecordType.HEALTH] = RecordType.HEALTH
    date: dt.date
    type: HealthEntryType
    notes: str | None = None


class NoteView(RecordView):
    record_type: Literal[RecordType.NOTE] = RecordType.NOTE
    content: str | None = None
    tags: list[str] = Field(default_factory=list)


class FinancialEntryView(RecordView):
    record_type: Literal[RecordType.FINANCE] = RecordType.FINANCE
    amount: Decimal
    type: FinancialEntryType
    date: dt.date

    @field_serializer("amount")
    def _serialize_amount(self, value: Decimal) -> str:
        return str(value)


RECORD_VIEWS: dict[RecordType, type[RecordView]] = {
    RecordType.TODO: TaskView,
    RecordType.HEALTH: HealthEntryView,
    RecordType.NOTE: NoteView,
    RecordType.FINANCE: FinancialEntryView,
}


class _RecordCreateBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    share_with: list[int] | None = None

    def record_fields(self) -> dict[str, Any]:
        """Column values for the record table, without the sharing selection."""

        return self.model_dump(exclude={"share_with"}, exclude_unset=True)


class TaskCreate(_RecordCreateBase):
    due_date: dt.date | None = None
    description: str | None = None
    is_completed: bool = False
    priority: TaskPriority = TaskPriority.MEDIUM


class HealthEntryCreate(_RecordCreateBase):
    date: dt.date
    type: HealthEntryType = HealthEntryType.OTHER
    notes: str | None = None


class NoteCreate(_RecordCreateBase):
    content: str | None = None
    tags: list[str] = Field(default_factory=list)


class FinancialEntryCreate(_RecordCreateBase):
    amount: Decimal
    type: FinancialEntryType = FinancialEntryType.EXPENSE
    date: dt.date


RECORD_PAYLOADS: dict[RecordType, type[_RecordCreateBase]] = {
    RecordType.TODO: TaskCreate,
    RecordType.HEALTH: HealthEntryCreate,
    RecordType.NOTE: NoteCreate,
    RecordType.FINANCE: FinancialEntryCreate,
}


class ItemSharesUpdate(BaseModel):
    """Full replacement of the person shares a record is extended to."""

    person_share_ids: list[int] = Field(default_factory=list)


class ItemSharesResult(BaseModel):
    record_type: RecordType
    record_id: int
    person_share_ids: list[int]


AnyRecordView = Annotated[
    TaskView | HealthEntryView | NoteView | FinancialEntryView,
    Field(discriminator="record_type"),
]
