"""Routes for person profiles, their collaborators and invitations."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from kinfolk.core.logger import get_logger
from kinfolk.models import Account
from kinfolk.schemas import (
    CollaborationRequestCreate,
    CollaborationRequestView,
    CollaboratorView,
    InviteLink,
    LinkedAccountUpdate,
    PersonCreate,
    PersonSummary,
    PersonUpdate,
    PersonView,
    RemovedCollaborator,
)
from kinfolk.services import (
    CollaborationService,
    PeopleService,
    PersonViewComposer,
    SharingService,
)

from .dependencies import (
    get_collaboration_service,
    get_current_account,
    get_people_service,
    get_person_view_composer,
    get_sharing_service,
)

router = APIRouter(prefix="/people", tags=["people"])
LOGGER = get_logger(__name__)


@router.get("", response_model=list[PersonView])
def list_people(
    account: Account = Depends(get_current_account),
    composer: PersonViewComposer = Depends(get_person_view_composer),
) -> list[PersonView]:
    return composer.build_people_views(account.id)


@router.post("", response_model=PersonView, status_code=status.HTTP_201_CREATED)
def create_person(
    payload: PersonCreate,
    account: Account = Depends(get_current_account),
    people: PeopleService = Depends(get_people_service),
    composer: PersonViewComposer = Depends(get_person_view_composer),
) -> PersonView:
    person = people.create_person(account.id, payload)
    return composer.build_person_view(account.id, person.id)


@router.get("/{person_id}", response_model=PersonView)
def get_person(
    person_id: int,
    account: Account = Depends(get_current_account),
    composer: PersonViewComposer = Depends(get_person_view_composer),
) -> PersonView:
    """Merged view of one person with every record the caller may see."""

    return composer.build_person_view(account.id, person_id)


@router.patch("/{person_id}", response_model=PersonView)
def update_person(
    person_id: int,
    payload: PersonUpdate,
    account: Account = Depends(get_current_account),
    people: PeopleService = Depends(get_people_service),
    composer: PersonViewComposer = Depends(get_person_view_composer),
) -> PersonView:
    people.update_person(person_id, account.id, payload)
    return composer.build_person_view(account.id, person_id)


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_person(
    person_id: int,
    account: Account = Depends(get_current_account),
    people: PeopleService = Depends(get_people_service),
) -> Response:
    people.delete_person(person_id, account.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{person_id}/linked-account", response_model=PersonSummary)
def link_account(
    person_id: int,
    payload: LinkedAccountUpdate,
    account: Account = Depends(get_current_account),
    sharing: SharingService = Depends(get_sharing_service),
) -> PersonSummary:
    person = sharing.link_account_to_person(person_id, payload.account_id, account.id)
    return PersonSummary.model_validate(person)


@router.get("/{person_id}/collaborators", response_model=list[CollaboratorView])
def list_collaborators(
    person_id: int,
    account: Account = Depends(get_current_account),
    sharing: SharingService = Depends(get_sharing_service),
) -> list[CollaboratorView]:
    return sharing.list_collaborators(person_id, account.id)


@router.delete(
    "/{person_id}/collaborators/{collaborator_account_id}",
    response_model=RemovedCollaborator,
)
def remove_collaborator(
    person_id: int,
    collaborator_account_id: int,
    account: Account = Depends(get_current_account),
    sharing: SharingService = Depends(get_sharing_service),
) -> RemovedCollaborator:
    return sharing.remove_collaborator(person_id, collaborator_account_id, account.id)


@router.post(
    "/{person_id}/invite-link",
    response_model=InviteLink,
    status_code=status.HTTP_201_CREATED,
)
def create_invite_link(
    person_id: int,
    account: Account = Depends(get_current_account),
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> InviteLink:
    return collaboration.create_by_link(person_id, account.id)


@router.post(
    "/{person_id}/collaboration-requests",
    response_model=CollaborationRequestView,
    status_code=status.HTTP_201_CREATED,
)
def create_collaboration_request(
    person_id: int,
    payload: CollaborationRequestCreate,
    account: Account = Depends(get_current_account),
    collaboration: CollaborationService = Depends(get_collaboration_service),
) -> CollaborationRequestView:
    request = collaboration.create_by_target(
        person_id,
        account.id,
        target_account_id=payload.target_account_id,
        target_email=payload.target_email,
    )
    return CollaborationRequestView.model_validate(request)
