"""Person shares, profile links and per-record item shares."""
from __future__ import annotations

from typing import Iterable

from sqlalchemy.orm import Session

from kinfolk.core.errors import PersonNotFound, RecordNotFound
from kinfolk.core.logger import get_logger
from kinfolk.models import Account, Person, PersonShare, RecordType, SharingPreference, utcnow
from kinfolk.repositories import (
    AccountsRepository,
    PeopleRepository,
    RecordsRepository,
    SharingRepository,
)
from kinfolk.schemas import CollaboratorView, ItemSharesResult, RemovedCollaborator

from .base import TransactionalService
from .grants import GrantResolver

LOGGER = get_logger(__name__)

UNKNOWN = "Unknown"


def collaborator_name(share: PersonShare, account: Account | None) -> str:
    """Display name for the holder of ``share``."""

    if account is not None and account.display_name:
        return account.display_name
    if share.account_email:
        return share.account_email
    if account is not None:
        return account.name
    return UNKNOWN


class SharingService(TransactionalService):
    """Manage who a person is shared with and which records they see."""

    def __init__(
        self,
        session: Session,
        people: PeopleRepository | None = None,
        sharing: SharingRepository | None = None,
        accounts: AccountsRepository | None = None,
        records: RecordsRepository | None = None,
        resolver: GrantResolver | None = None,
    ) -> None:
        super().__init__(session)
        self._people = people or PeopleRepository(session)
        self._sharing = sharing or SharingRepository(session)
        self._accounts = accounts or AccountsRepository(session)
        self._records = records or RecordsRepository(session)
        self._resolver = resolver or GrantResolver(
            session, people=self._people, sharing=self._sharing
        )

    def remove_collaborator(
        self,
        person_id: int,
        collaborator_account_id: int,
        acting_account_id: int,
    ) -> RemovedCollaborator:
        """Stop sharing a person with one collaborator.

        Either the owner removes the collaborator or the collaborator leaves.
        Links are deactivated and the person share revoked; item shares that
        already name the share are kept, so records shared before removal
        stay visible to the former collaborator.
        """

        person = self._people.get(person_id)
        if person is None or acting_account_id not in (
            person.owner_account_id,
            collaborator_account_id,
        ):
            raise PersonNotFound(person_id=person_id)

        with self._unit_of_work():
            now = utcnow()
            links = self._sharing.deactivate_links(person_id, collaborator_account_id, when=now)
            revoked = self._sharing.revoke_person_share(
                person_id, collaborator_account_id, when=now
            )

        LOGGER.info(
            "Removed collaborator",
            extra={
                "person_id": person_id,
                "collaborator_account_id": collaborator_account_id,
                "acting_account_id": acting_account_id,
                "links_revoked": len(links),
                "share_revoked": revoked,
            },
        )
        return RemovedCollaborator(
            person_id=person_id,
            account_id=collaborator_account_id,
            share_revoked=revoked,
            links_revoked=len(links),
        )

    def list_collaborators(self, person_id: int, viewer_account_id: int) -> list[CollaboratorView]:
        person = self._people.get(person_id)
        if person is None or not self._resolver.can_view(viewer_account_id, person):
            raise PersonNotFound(person_id=person_id)

        shares = [
            share
            for share in self._sharing.list_person_shares([person_id])
            if share.account_id is not None
        ]
        accounts = self._accounts.get_many(share.account_id for share in shares)
        collaborators = []
        for share in shares:
            account = accounts.get(share.account_id)
            collaborators.append(
                CollaboratorView(
                    person_share_id=share.id,
                    account_id=share.account_id,
                    name=collaborator_name(share, account),
                    email=account.email if account else share.account_email,
                    avatar_url=account.avatar_url if account else None,
                )
            )
        return collaborators

    def link_account_to_person(
        self, person_id: int, account_id: int, acting_account_id: int
    ) -> Person:
        """Mark ``person_id`` as the identity of ``account_id``. Grants are untouched."""

        with self._unit_of_work():
            person = self._people.get(person_id)
            if person is None or person.owner_account_id != acting_account_id:
                raise PersonNotFound(person_id=person_id)
            person.linked_account_id = account_id
            self._session.flush()
        LOGGER.info(
            "Linked account to person",
            extra={"person_id": person_id, "linked_account_id": account_id},
        )
        return person

    def set_item_shares(
        self,
        record_type: RecordType | str,
        record_id: int,
        person_share_ids: Iterable[int],
        acting_account_id: int,
    ) -> ItemSharesResult:
        """Replace the set of person shares a record is extended to.

        An empty selection makes the record private again. Share ids are
        stored as given; ids that match no share simply grant nothing.
        """

        record_type = RecordType(record_type)
        share_ids = list(dict.fromkeys(int(share_id) for share_id in person_share_ids))

        with self._unit_of_work():
            record = self._records.get(record_type, record_id)
            if record is None:
                raise RecordNotFound(record_type=record_type.value, record_id=record_id)
            person = self._people.get(record.person_id)
            owner_id = person.owner_account_id if person is not None else None
            if acting_account_id not in (record.created_by_account_id, owner_id):
                raise RecordNotFound(record_type=record_type.value, record_id=record_id)
            self._sharing.replace_item_shares(
                record_type, record_id, share_ids, acting_account_id
            )

        LOGGER.info(
            "Replaced item shares",
            extra={
                "record_type": record_type.value,
                "record_id": record_id,
                "person_share_ids": share_ids,
            },
        )
        return ItemSharesResult(
            record_type=record_type, record_id=record_id, person_share_ids=share_ids
        )

    def default_share_selection(self, person: Person) -> list[int]:
        """Share ids preselected for a new record on ``person``."""

        if person.sharing_preference != SharingPreference.ALWAYS_SHARE:
            return []
        return [share.id for share in self._sharing.list_person_shares([person.id])]
