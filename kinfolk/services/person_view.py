"""Read-side composition of the merged per-person view."""
from __future__ import annotations

from collections import defaultdict

from sqlalchemy.orm import Session

from kinfolk.core.errors import PersonNotFound
from kinfolk.core.log import log_context, timeit
from kinfolk.core.logger import get_logger
from kinfolk.models import Account, ItemShare, Person, RecordMixin, RecordType, as_utc
from kinfolk.repositories import (
    AccountsRepository,
    PeopleRepository,
    RecordsRepository,
    SharingRepository,
)
from kinfolk.schemas import RECORD_VIEWS, YOU, PersonView, RecordView, SharedFromInfo

from .grants import Grant, GrantResolver, GrantScope
from .sharing_service import UNKNOWN, collaborator_name

LOGGER = get_logger(__name__)

_RECORD_LISTS: dict[RecordType, str] = {
    RecordType.TODO: "todos",
    RecordType.HEALTH: "health_records",
    RecordType.NOTE: "notes",
    RecordType.FINANCE: "financial_records",
}


class PersonViewComposer:
    """Build ``PersonView`` objects for a viewer.

    Visibility is recomputed on every call from the grant tables; nothing
    about it is cached or stored.
    """

    def __init__(
        self,
        session: Session,
        people: PeopleRepository | None = None,
        records: RecordsRepository | None = None,
        sharing: SharingRepository | None = None,
        accounts: AccountsRepository | None = None,
        resolver: GrantResolver | None = None,
    ) -> None:
        self._session = session
        self._people = people or PeopleRepository(session)
        self._records = records or RecordsRepository(session)
        self._sharing = sharing or SharingRepository(session)
        self._accounts = accounts or AccountsRepository(session)
        self._resolver = resolver or GrantResolver(
            session, people=self._people, sharing=self._sharing
        )

    def build_person_view(self, viewer_account_id: int, person_id: int) -> PersonView:
        person = self._people.get(person_id)
        if person is None or not self._resolver.can_view(viewer_account_id, person):
            LOGGER.info(
                "Person not visible",
                extra={"person_id": person_id, "viewer_account_id": viewer_account_id},
            )
            raise PersonNotFound(person_id=person_id)

        with log_context.scoped(account_id=viewer_account_id, person_id=person_id):
            with timeit(
                "Compose person view", logger=LOGGER, unit="records", session=self._session
            ) as timer:
                view = self._compose(viewer_account_id, person)
                timer.add(_record_count(view))
        return view

    def build_people_views(self, viewer_account_id: int) -> list[PersonView]:
        """Views of every person listed for the viewer, newest first."""

        person_ids = self._resolver.visible_person_ids(viewer_account_id)
        with timeit(
            "Compose people views",
            logger=LOGGER,
            unit="people",
            total=len(person_ids),
            session=self._session,
        ):
            people = self._people.get_many(person_ids)
            return [self._compose(viewer_account_id, person) for person in people]

    def _compose(self, viewer_account_id: int, person: Person) -> PersonView:
        scope = self._resolver.scope_for(viewer_account_id, person)
        grant = self._resolver.resolve(scope)

        visible: dict[RecordType, list[RecordMixin]] = {}
        item_shares: dict[tuple[RecordType, int], list[ItemShare]] = defaultdict(list)
        account_ids: set[int] = set()

        for record_type in RecordType:
            records = self._visible_records(viewer_account_id, record_type, scope, grant)
            visible[record_type] = records
            for row in self._sharing.list_item_shares_for_records(
                record_type, (record.id for record in records)
            ):
                item_shares[(record_type, row.record_id)].append(row)
                account_ids.add(row.created_by_account_id)
            account_ids.update(record.created_by_account_id for record in records)

        accounts = self._accounts.get_many(account_ids)
        held_share_ids = scope.held_share_ids

        lists: dict[str, list[RecordView]] = {}
        for record_type, records in visible.items():
            views = [
                self._record_view(
                    viewer_account_id,
                    record,
                    item_shares.get((record_type, record.id), []),
                    held_share_ids,
                    accounts,
                )
                for record in records
            ]
            views.sort(key=lambda view: (as_utc(view.created_at), view.id), reverse=True)
            lists[_RECORD_LISTS[record_type]] = views

        return PersonView.model_validate(person).model_copy(
            update={
                "is_owner": person.owner_account_id == viewer_account_id,
                "is_self": person.linked_account_id == viewer_account_id,
                "collaborators": self._collaborator_names(person.id),
                **lists,
            }
        )

    def _visible_records(
        self,
        viewer_account_id: int,
        record_type: RecordType,
        scope: GrantScope,
        grant: Grant,
    ) -> list[RecordMixin]:
        candidates: dict[int, RecordMixin] = {
            record.id: record
            for record in self._records.list_for_people(record_type, scope.relevant_person_ids)
        }
        extra_ids = {
            record_id
            for key_type, record_id in grant.record_keys
            if key_type == record_type and record_id not in candidates
        }
        for record in self._records.list_by_ids(record_type, extra_ids):
            candidates.setdefault(record.id, record)

        return [
            record
            for record in candidates.values()
            if record.created_by_account_id == viewer_account_id
            or grant.allows(record_type, record.id, record.person_id)
        ]

    def _record_view(
        self,
        viewer_account_id: int,
        record: RecordMixin,
        shares: list[ItemShare],
        held_share_ids: frozenset[int],
        accounts: dict[int, Account],
    ) -> RecordView:
        view_cls = RECORD_VIEWS[record.record_type]
        creator = accounts.get(record.created_by_account_id)
        shared_from = _shared_from(shares, held_share_ids, accounts)
        update: dict[str, object] = {
            "shared_with_person_share_ids": sorted({row.person_share_id for row in shares}),
            "created_by_name": creator.name if creator else None,
            "created_by_email": creator.email if creator else None,
            "shared_from": shared_from,
        }
        if record.created_by_account_id == viewer_account_id:
            update.update(is_own=True, attribution=YOU)
        else:
            if creator is not None:
                name = creator.name
            elif shared_from is not None:
                name = shared_from.name
                update["created_by_email"] = shared_from.email
            else:
                name = UNKNOWN
            update.update(is_own=False, attribution=f"Shared by {name}")
        return view_cls.model_validate(record).model_copy(update=update)

    def _collaborator_names(self, person_id: int) -> list[str]:
        shares = [
            share
            for share in self._sharing.list_person_shares([person_id])
            if share.account_id is not None
        ]
        accounts = self._accounts.get_many(share.account_id for share in shares)
        return [collaborator_name(share, accounts.get(share.account_id)) for share in shares]


def _shared_from(
    shares: list[ItemShare],
    held_share_ids: frozenset[int],
    accounts: dict[int, Account],
) -> SharedFromInfo | None:
    """Who extended the record to one of the viewer's person shares, if anyone."""

    for row in shares:
        if row.person_share_id not in held_share_ids:
            continue
        account = accounts.get(row.created_by_account_id)
        return SharedFromInfo(
            account_id=row.created_by_account_id,
            name=account.name if account else UNKNOWN,
            email=account.email if account else None,
        )
    return None


def _record_count(view: PersonView) -> int:
    return sum(len(getattr(view, name)) for name in _RECORD_LISTS.values())
