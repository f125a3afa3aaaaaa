"""Schemas describing collaborators on a person."""
from __future__ import annotations

from pydantic import BaseModel


class CollaboratorView(BaseModel):
    """An account holding an active person share."""

    person_share_id: int
    account_id: int
    name: str
    email: str | None = None
    avatar_url: str | None = None


class RemovedCollaborator(BaseModel):
    person_id: int
    account_id: int
    share_revoked: bool
    links_revoked: int
