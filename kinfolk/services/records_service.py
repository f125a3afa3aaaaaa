"""Adding and removing records on people."""
from __future__ import annotations

from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from kinfolk.core.errors import PersonNotFound, RecordNotFound
from kinfolk.core.logger import get_logger
from kinfolk.models import RecordType, model_for
from kinfolk.repositories import PeopleRepository, RecordsRepository, SharingRepository
from kinfolk.schemas import RECORD_VIEWS, YOU, RecordView

from .base import TransactionalService
from .grants import GrantResolver
from .sharing_service import SharingService

LOGGER = get_logger(__name__)


class RecordsService(TransactionalService):
    """Write access to the record stores with item sharing applied on create."""

    def __init__(
        self,
        session: Session,
        people: PeopleRepository | None = None,
        records: RecordsRepository | None = None,
        sharing: SharingRepository | None = None,
    ) -> None:
        super().__init__(session)
        self._people = people or PeopleRepository(session)
        self._records = records or RecordsRepository(session)
        self._sharing = sharing or SharingRepository(session)
        self._resolver = GrantResolver(session, people=self._people, sharing=self._sharing)
        self._sharing_service = SharingService(
            session,
            people=self._people,
            sharing=self._sharing,
            records=self._records,
            resolver=self._resolver,
        )

    def add_record(
        self,
        person_id: int,
        record_type: RecordType | str,
        fields: Mapping[str, Any],
        acting_account_id: int,
        share_with: Iterable[int] | None = None,
    ) -> RecordView:
        """Create a record authored by ``acting_account_id``.

        When ``share_with`` is omitted the person's sharing preference picks
        the item shares; an explicit empty selection keeps the record private.
        """

        record_type = RecordType(record_type)
        person = self._people.get(person_id)
        if person is None or not self._resolver.can_contribute(acting_account_id, person):
            raise PersonNotFound(person_id=person_id)

        if share_with is None:
            share_ids = self._sharing_service.default_share_selection(person)
        else:
            share_ids = list(dict.fromkeys(int(share_id) for share_id in share_with))

        model = model_for(record_type)
        with self._unit_of_work():
            record = self._records.add(
                model(**dict(fields), person_id=person_id, created_by_account_id=acting_account_id)
            )
            if share_ids:
                self._sharing.replace_item_shares(
                    record_type, record.id, share_ids, acting_account_id
                )

        LOGGER.info(
            "Added record",
            extra={
                "record_type": record_type.value,
                "record_id": record.id,
                "person_id": person_id,
                "shared_with": len(share_ids),
            },
        )
        return RECORD_VIEWS[record_type].model_validate(record).model_copy(
            update={
                "is_own": True,
                "attribution": YOU,
                "shared_with_person_share_ids": sorted(share_ids),
            }
        )

    def delete_record(
        self, record_type: RecordType | str, record_id: int, acting_account_id: int
    ) -> None:
        """Delete a record; only its author or the person's owner may."""

        record_type = RecordType(record_type)
        with self._unit_of_work():
            record = self._records.get(record_type, record_id)
            if record is None:
                raise RecordNotFound(record_type=record_type.value, record_id=record_id)
            person = self._people.get(record.person_id)
            owner_id = person.owner_account_id if person is not None else None
            if acting_account_id not in (record.created_by_account_id, owner_id):
                raise RecordNotFound(record_type=record_type.value, record_id=record_id)
            self._records.delete(record)
        LOGGER.info(
            "Deleted record",
            extra={"record_type": record_type.value, "record_id": record_id},
        )
