"""Routes for answering collaboration requests."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from kinfolk.core.logger import get_logger
from kinfolk.models import Account
from kinfolk.schemas import (
    AcceptRequest,
    AcceptResult,
    CollaborationRequestView,
    DeclineRequest,
    IncomingRequest,
    InvitePreview,
)
from kinfolk.services import CollaborationService

from .dependencies import get_collaboration_service, get_current_account

router = APIRouter(prefix="/collaboration-requests", tags=["collaboration"])
LOGGER = get_logger(__name__)


@router.get("/incoming", response_model=list[IncomingRequest])
def list_incoming(
    account: Account = Depends(get_current_account),
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> list[IncomingRequest]:
    return collaboration.list_incoming(account.id)


@router.get("/invites/{token}", response_model=InvitePreview)
def preview_invite(
    token: str,
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> InvitePreview:
    """Invite landing page data; the token itself is the credential."""

    return collaboration.get_by_token(token)


@router.post("/{request_id}/accept", response_model=AcceptResult)
def accept_request(
    request_id: int,
    payload: AcceptRequest | None = None,
    account: Account = Depends(get_current_account),
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> AcceptResult:
    payload = payload or AcceptRequest()
    return collaboration.accept(
        request_id,
        account.id,
        merge_into_person_id=payload.merge_into_person_id,
        create_new=payload.create_new,
        invite_token=payload.invite_token,
    )


@router.post("/{request_id}/decline", response_model=CollaborationRequestView)
def decline_request(
    request_id: int,
    payload: DeclineRequest | None = None,
    account: Account = Depends(get_current_account),
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> CollaborationRequestView:
    payload = payload or DeclineRequest()
    request = collaboration.decline(request_id, account.id, invite_token=payload.invite_token)
    return CollaborationRequestView.model_validate(request)
