"""Schemas for person profiles and the merged per-person view."""
from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from kinfolk.models import Gender, SharingPreference

from .records import FinancialEntryView, HealthEntryView, NoteView, TaskView


class PersonSummary(BaseModel):
    """Display fields of a person profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_account_id: int
    linked_account_id: int | None = None
    name: str
    relation: str = ""
    avatar_url: str | None = None
    theme_color: str
    birthday: date | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None
    sharing_preference: SharingPreference
    created_at: datetime


class PersonView(PersonSummary):
    """Everything one viewer may see about one person.

    Records arrive through ownership, active profile links and item shares;
    each appears once regardless of how many of those paths reach it.
    """

    is_owner: bool = False
    is_self: bool = False
    collaborators: list[str] = Field(default_factory=list)
    todos: list[TaskView] = Field(default_factory=list)
    health_records: list[HealthEntryView] = Field(default_factory=list)
    notes: list[NoteView] = Field(default_factory=list)
    financial_records: list[FinancialEntryView] = Field(default_factory=list)


class PersonCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=160)
    relation: str = Field(default="", max_length=80)
    avatar_url: str | None = None
    theme_color: str | None = None
    birthday: date | None = None
    email: str | None = None
    phone: str | None = Field(default=None, max_length=20)
    date_of_birth: date | None = None
    gender: Gender | None = None
    sharing_preference: SharingPreference = SharingPreference.ASK_EVERY_TIME


class PersonUpdate(BaseModel):
    """Partial update; only fields present in the payload are written."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=160)
    relation: str | None = Field(default=None, max_length=80)
    avatar_url: str | None = None
    theme_color: str | None = None
    birthday: date | None = None
    email: str | None = None
    phone: str | None = Field(default=None, max_length=20)
    date_of_birth: date | None = None
    gender: Gender | None = None
    sharing_preference: SharingPreference | None = None


class LinkedAccountUpdate(BaseModel):
    account_id: int


class ProvisionResult(BaseModel):
    """Outcome of first sign-in provisioning."""

    self_profile: PersonSummary
    claimed_requests: int = 0
