"""Routes acting on the signed-in account itself."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from kinfolk.core.logger import get_logger
from kinfolk.models import Account
from kinfolk.schemas import PersonSummary, ProvisionResult
from kinfolk.services import CollaborationService, PeopleService

from .dependencies import get_collaboration_service, get_current_account, get_people_service

router = APIRouter(prefix="/me", tags=["me"])
LOGGER = get_logger(__name__)


@router.post("/provision", response_model=ProvisionResult)
def provision(
    account: Account = Depends(get_current_account),
    people: PeopleService = Depends(get_people_service),
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> ProvisionResult:
    """Ensure the self profile exists and claim invitations sent to the account's email."""

    person = people.ensure_self_profile(account)
    claimed = collaboration.claim_pending_for_account(account)
    return ProvisionResult(
        self_profile=PersonSummary.model_validate(person),
        claimed_requests=claimed,
    )
