"""Schemas for collaboration requests and invite links."""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kinfolk.models import Gender, Person, RequestStatus


class ProfileSnapshot(BaseModel):
    """Copy of a person's display fields taken when a request is created.

    The recipient cannot read the live person until they accept, so the
    request carries this instead. It is never refreshed after creation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    relation: str = ""
    avatar_url: str | None = None
    birthday: date | None = None
    email: str | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: Gender | None = None

    @classmethod
    def from_person(cls, person: Person) -> "ProfileSnapshot":
        return cls(
            name=person.name,
            relation=person.relation or "",
            avatar_url=person.avatar_url,
            birthday=person.birthday,
            email=person.email,
            phone=person.phone,
            date_of_birth=person.date_of_birth,
            gender=person.gender,
        )

    @classmethod
    def from_json(cls, payload: dict[str, Any] | None) -> "ProfileSnapshot":
        return cls.model_validate(payload or {"name": "Unknown"})

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class CollaborationRequestCreate(BaseModel):
    """Target of a request: an existing account, an email address, or both."""

    target_account_id: int | None = None
    target_email: str | None = None


class CollaborationRequestView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    person_id: int
    requester_account_id: int
    target_account_id: int | None = None
    target_email: str | None = None
    invite_token: str
    status: RequestStatus
    merged_into_person_id: int | None = None
    created_at: datetime
    updated_at: datetime


class InviteLink(BaseModel):
    request_id: int
    token: str
    url: str


class IncomingRequest(BaseModel):
    """A pending request addressed to the viewer."""

    id: int
    person_id: int
    person_name: str
    requester_account_id: int
    requester_name: str
    requester_email: str | None = None
    profile_snapshot: ProfileSnapshot
    status: RequestStatus
    created_at: datetime


class InvitePreview(BaseModel):
    """What the invite landing page shows before the visitor answers."""

    request_id: int
    token: str
    status: RequestStatus
    person: ProfileSnapshot
    requester_name: str
    requester_email: str | None = None
    requester_avatar_url: str | None = None


class AcceptRequest(BaseModel):
    """How to accept: merge into an existing person, create a new one, or neither.

    With neither, the acceptor only gains access to the requester's person.
    """

    merge_into_person_id: int | None = None
    create_new: bool = Field(default=False)
    invite_token: str | None = None


class AcceptResult(BaseModel):
    request_id: int
    status: RequestStatus
    person_id: int | None = None
    created_person: bool
    link_id: int | None = None


class DeclineRequest(BaseModel):
    invite_token: str | None = None
