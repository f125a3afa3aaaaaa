"""Collaboration requests: invite links, targeted requests, accept and decline.

A request offers the recipient a link to one of the requester's people. It
stays PENDING until answered and then moves to ACCEPTED or DECLINED exactly
once. Acceptance writes up to three grants in one transaction:

1. a person share for the acceptor on the requester's person,
2. the reciprocal person share for the requester on the acceptor's person,
3. an active profile link between the two people.

The last two need a person on the acceptor's side, either an existing one
to merge into or one created from the snapshot.

Grant inserts tolerate duplicates, so retrying a failed ``accept`` is safe.
"""
from __future__ import annotations

import secrets

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from kinfolk.core.config import InviteSettings, get_settings
from kinfolk.core.errors import (
    GrantInconsistency,
    InvalidTarget,
    MissingEmail,
    PersonNotFound,
    RequestAlreadyResolved,
    RequestNotFound,
)
from kinfolk.core.logger import get_logger
from kinfolk.models import (
    DEFAULT_THEME_COLOR,
    Account,
    CollaborationRequest,
    Person,
    ProfileLink,
    RequestStatus,
)
from kinfolk.repositories import (
    AccountsRepository,
    CollaborationRequestRepository,
    PeopleRepository,
    SharingRepository,
)
from kinfolk.schemas import AcceptResult, IncomingRequest, InviteLink, InvitePreview, ProfileSnapshot

from .base import TransactionalService
from .tokens import new_invite_token

LOGGER = get_logger(__name__)

UNKNOWN = "Unknown"


class CollaborationService(TransactionalService):
    """State machine for collaboration requests."""

    def __init__(
        self,
        session: Session,
        requests: CollaborationRequestRepository | None = None,
        people: PeopleRepository | None = None,
        sharing: SharingRepository | None = None,
        accounts: AccountsRepository | None = None,
        invites: InviteSettings | None = None,
    ) -> None:
        super().__init__(session)
        self._requests = requests or CollaborationRequestRepository(session)
        self._people = people or PeopleRepository(session)
        self._sharing = sharing or SharingRepository(session)
        self._accounts = accounts or AccountsRepository(session)
        self._invites = invites or get_settings().invites

    # Creation ----------------------------------------------------------

    def create_by_link(self, person_id: int, requester_account_id: int) -> InviteLink:
        """Create a request addressed to the person's own email and return its link."""

        person = self._shareable_person(person_id, requester_account_id)
        request = self._create(
            person,
            requester_account_id,
            target_account_id=None,
            target_email=person.email.strip(),
        )
        url = self._invites.url_for(request.invite_token)
        LOGGER.info(
            "Created invite link",
            extra={"request_id": request.id, "person_id": person_id},
        )
        return InviteLink(request_id=request.id, token=request.invite_token, url=url)

    def create_by_target(
        self,
        person_id: int,
        requester_account_id: int,
        target_account_id: int | None = None,
        target_email: str | None = None,
    ) -> CollaborationRequest:
        """Create a request for a known account and/or an email address.

        A target given only by email is resolved to an account when one is
        registered under that address. When both are given the account id
        wins for addressing; the email is kept as entered.
        """

        person = self._shareable_person(person_id, requester_account_id)
        email = (target_email or "").strip() or None
        if target_account_id is None and email is None:
            raise InvalidTarget(person_id=person_id)

        if target_account_id is None:
            account = self._accounts.find_by_email(email)
            if account is not None:
                target_account_id = account.id
        elif email is None:
            account = self._accounts.get(target_account_id)
            email = account.email if account is not None else None
        if target_account_id == requester_account_id:
            raise InvalidTarget("You cannot send an invitation to yourself.")

        request = self._create(
            person,
            requester_account_id,
            target_account_id=target_account_id,
            target_email=email,
        )
        LOGGER.info(
            "Created collaboration request",
            extra={
                "request_id": request.id,
                "person_id": person_id,
                "target_account_id": target_account_id,
            },
        )
        return request

    def _shareable_person(self, person_id: int, requester_account_id: int) -> Person:
        person = self._people.get(person_id)
        if person is None or person.owner_account_id != requester_account_id:
            raise PersonNotFound(person_id=person_id)
        if not person.has_email:
            LOGGER.info("Sharing blocked, person has no email", extra={"person_id": person_id})
            raise MissingEmail(person_id=person_id)
        return person

    def _create(
        self,
        person: Person,
        requester_account_id: int,
        *,
        target_account_id: int | None,
        target_email: str | None,
    ) -> CollaborationRequest:
        with self._unit_of_work():
            token = new_invite_token(self._requests.token_exists)
            request = self._requests.add(
                CollaborationRequest(
                    person_id=person.id,
                    requester_account_id=requester_account_id,
                    target_account_id=target_account_id,
                    target_email=target_email,
                    invite_token=token,
                    profile_snapshot=ProfileSnapshot.from_person(person).to_json(),
                    status=RequestStatus.PENDING,
                )
            )
        return request

    # Reads -------------------------------------------------------------

    def list_incoming(self, account_id: int) -> list[IncomingRequest]:
        """Pending requests addressed to the account by id or email, newest first."""

        account = self._accounts.get(account_id)
        rows = self._requests.list_pending_for(account_id, account.email if account else None)
        if not rows:
            return []

        contacts = self._people.list_owned(account_id)
        requesters = self._accounts.get_many(row.requester_account_id for row in rows)

        incoming = []
        for row in rows:
            requester = requesters.get(row.requester_account_id)
            snapshot = ProfileSnapshot.from_json(row.profile_snapshot)
            incoming.append(
                IncomingRequest(
                    id=row.id,
                    person_id=row.person_id,
                    person_name=snapshot.name,
                    requester_account_id=row.requester_account_id,
                    requester_name=_requester_name(row.requester_account_id, requester, contacts),
                    requester_email=requester.email if requester else None,
                    profile_snapshot=snapshot,
                    status=row.status,
                    created_at=row.created_at,
                )
            )
        return incoming

    def get_by_token(self, token: str) -> InvitePreview:
        request = self._requests.get_by_token(token)
        if request is None:
            raise RequestNotFound()
        requester = self._accounts.get(request.requester_account_id)
        return InvitePreview(
            request_id=request.id,
            token=request.invite_token,
            status=request.status,
            person=ProfileSnapshot.from_json(request.profile_snapshot),
            requester_name=requester.name if requester else UNKNOWN,
            requester_email=requester.email if requester else None,
            requester_avatar_url=requester.avatar_url if requester else None,
        )

    # Transitions -------------------------------------------------------

    def accept(
        self,
        request_id: int,
        accepting_account_id: int,
        *,
        merge_into_person_id: int | None = None,
        create_new: bool = False,
        invite_token: str | None = None,
    ) -> AcceptResult:
        """Accept a pending request.

        With ``merge_into_person_id`` the request is linked to a person the
        acceptor already owns; with ``create_new`` a person is first created
        for the acceptor from the request's snapshot. Either way both owners
        get a share on the other side and the two people are linked. Without
        a mode the acceptor only gains access to the requester's person.
        """

        acceptor = self._accounts.get(accepting_account_id)
        request = self._pending_request_for(request_id, accepting_account_id, acceptor, invite_token)
        source = self._people.get(request.person_id)
        if source is None:
            raise PersonNotFound(person_id=request.person_id)

        target: Person | None = None
        if merge_into_person_id is not None:
            target = self._people.get(merge_into_person_id)
            if target is None or target.owner_account_id != accepting_account_id:
                raise PersonNotFound(person_id=merge_into_person_id)

        requester = self._accounts.get(request.requester_account_id)
        created = merge_into_person_id is None and create_new
        link = None
        with self._unit_of_work():
            if created:
                target = self._people.add(self._person_from_snapshot(request, accepting_account_id))

            self._sharing.grant_person_share(
                source.id, accepting_account_id, acceptor.email if acceptor else None
            )
            if target is not None:
                link = self._grant_reciprocal(request, source, target, requester)

            resolved = self._requests.resolve(
                request.id,
                RequestStatus.ACCEPTED,
                merged_into_person_id=target.id if target is not None else None,
                target_account_id=accepting_account_id,
            )
            if not resolved:
                raise RequestAlreadyResolved(request_id=request_id)

        LOGGER.info(
            "Accepted collaboration request",
            extra={
                "request_id": request_id,
                "source_person_id": source.id,
                "target_person_id": target.id if target is not None else None,
                "created_person": created,
                "link_id": link.id if link is not None else None,
            },
        )
        return AcceptResult(
            request_id=request.id,
            status=RequestStatus.ACCEPTED,
            person_id=target.id if target is not None else None,
            created_person=created,
            link_id=link.id if link is not None else None,
        )

    def _grant_reciprocal(
        self,
        request: CollaborationRequest,
        source: Person,
        target: Person,
        requester: Account | None,
    ) -> ProfileLink:
        try:
            self._sharing.grant_person_share(
                target.id,
                request.requester_account_id,
                requester.email if requester else None,
            )
            return self._sharing.ensure_link(
                profile_a_id=source.id,
                profile_b_id=target.id,
                user_a_id=request.requester_account_id,
                user_b_id=target.owner_account_id,
                collaboration_request_id=request.id,
            )
        except (SQLAlchemyError, LookupError) as exc:
            LOGGER.error(
                "Reciprocal grant failed",
                extra={"request_id": request.id, "error": str(exc)},
            )
            raise GrantInconsistency(request_id=request.id) from exc

    def decline(
        self,
        request_id: int,
        account_id: int,
        *,
        invite_token: str | None = None,
    ) -> CollaborationRequest:
        account = self._accounts.get(account_id)
        request = self._pending_request_for(request_id, account_id, account, invite_token)
        with self._unit_of_work():
            if not self._requests.resolve(request.id, RequestStatus.DECLINED):
                raise RequestAlreadyResolved(request_id=request_id)
        LOGGER.info("Declined collaboration request", extra={"request_id": request_id})
        return request

    def claim_pending_for_account(self, account: Account) -> int:
        """Address pending email-only requests to the account registered under that email."""

        with self._unit_of_work():
            claimed = self._requests.claim_pending_for_email(account.id, account.email)
        if claimed:
            LOGGER.info(
                "Claimed pending requests",
                extra={"account_id": account.id, "count": claimed},
            )
        return claimed

    def _pending_request_for(
        self,
        request_id: int,
        account_id: int,
        account: Account | None,
        invite_token: str | None,
    ) -> CollaborationRequest:
        request = self._requests.get(request_id)
        if request is None or not _is_addressed_to(request, account_id, account, invite_token):
            raise RequestNotFound(request_id=request_id)
        if request.requester_account_id == account_id:
            raise InvalidTarget("You cannot answer your own invitation.")
        if not request.is_pending:
            raise RequestAlreadyResolved(request_id=request_id, status=request.status.value)
        return request

    @staticmethod
    def _person_from_snapshot(request: CollaborationRequest, owner_account_id: int) -> Person:
        snapshot = ProfileSnapshot.from_json(request.profile_snapshot)
        return Person(
            owner_account_id=owner_account_id,
            name=snapshot.name,
            relation=snapshot.relation,
            avatar_url=snapshot.avatar_url,
            email=snapshot.email,
            birthday=snapshot.birthday,
            theme_color=DEFAULT_THEME_COLOR,
        )


def _is_addressed_to(
    request: CollaborationRequest,
    account_id: int,
    account: Account | None,
    invite_token: str | None,
) -> bool:
    if request.target_account_id == account_id:
        return True
    if (
        account is not None
        and account.email
        and request.target_email
        and account.email.strip().lower() == request.target_email.strip().lower()
    ):
        return True
    return bool(invite_token) and secrets.compare_digest(invite_token, request.invite_token)


def _requester_name(requester_id: int, requester: Account | None, contacts: list[Person]) -> str:
    """Name the viewer knows the requester by, falling back to the account's own."""

    for contact in contacts:
        if contact.linked_account_id == requester_id:
            return contact.name
    requester_email = (requester.email or "").strip().lower() if requester else ""
    if requester_email:
        for contact in contacts:
            if (contact.email or "").strip().lower() == requester_email:
                return contact.name
    if requester is not None and requester.display_name:
        return requester.display_name
    return UNKNOWN
