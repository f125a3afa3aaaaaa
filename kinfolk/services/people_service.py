"""Person registry: self profiles and owner-only profile edits."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.orm import Session

from kinfolk.core.errors import PersonNotFound
from kinfolk.core.logger import get_logger
from kinfolk.models import DEFAULT_THEME_COLOR, SELF_RELATION, Account, Person
from kinfolk.repositories import PeopleRepository
from kinfolk.schemas import PersonCreate, PersonUpdate

from .base import TransactionalService

LOGGER = get_logger(__name__)


class PeopleService(TransactionalService):
    """Create, edit and delete the people an account keeps track of."""

    def __init__(
        self,
        session: Session,
        repository: PeopleRepository | None = None,
    ) -> None:
        super().__init__(session)
        self._people = repository or PeopleRepository(session)

    def require_owned(self, person_id: int, account_id: int) -> Person:
        """Return the person when ``account_id`` owns it, else raise ``PersonNotFound``."""

        person = self._people.get(person_id)
        if person is None or person.owner_account_id != account_id:
            raise PersonNotFound(person_id=person_id)
        return person

    def ensure_self_profile(self, account: Account) -> Person:
        """Return the account's self profile, creating it on first call.

        An owned profile with relation "Self" that is not yet linked to any
        account is adopted instead of creating a second one.
        """

        with self._unit_of_work():
            person = self._people.find_self_profile(account.id)
            if person is not None:
                return person

            person = self._people.find_unlinked_self_relation(account.id)
            if person is not None:
                person.linked_account_id = account.id
                if not person.email and account.email:
                    person.email = account.email
                self._session.flush()
                LOGGER.info(
                    "Linked existing profile as self",
                    extra={"account_id": account.id, "person_id": person.id},
                )
                return person

            person = self._people.add(
                Person(
                    owner_account_id=account.id,
                    linked_account_id=account.id,
                    name=account.name,
                    relation=SELF_RELATION,
                    email=account.email,
                    avatar_url=account.avatar_url,
                    theme_color=DEFAULT_THEME_COLOR,
                )
            )
            LOGGER.info(
                "Created self profile",
                extra={"account_id": account.id, "person_id": person.id},
            )
            return person

    def create_person(self, owner_account_id: int, payload: PersonCreate) -> Person:
        values = payload.model_dump()
        values["theme_color"] = values.get("theme_color") or DEFAULT_THEME_COLOR
        values["email"] = _clean_email(values.get("email"))
        with self._unit_of_work():
            person = self._people.add(Person(owner_account_id=owner_account_id, **values))
        LOGGER.info(
            "Created person",
            extra={"account_id": owner_account_id, "person_id": person.id},
        )
        return person

    def update_person(
        self, person_id: int, acting_account_id: int, payload: PersonUpdate | Mapping[str, Any]
    ) -> Person:
        if isinstance(payload, PersonUpdate):
            changes = payload.model_dump(exclude_unset=True)
        else:
            changes = dict(payload)
        if "email" in changes:
            changes["email"] = _clean_email(changes["email"])
        with self._unit_of_work():
            person = self.require_owned(person_id, acting_account_id)
            for field, value in changes.items():
                setattr(person, field, value)
            self._session.flush()
        LOGGER.info(
            "Updated person",
            extra={"person_id": person_id, "fields": sorted(changes)},
        )
        return person

    def delete_person(self, person_id: int, acting_account_id: int) -> None:
        with self._unit_of_work():
            person = self.require_owned(person_id, acting_account_id)
            self._people.delete(person)
        LOGGER.info("Deleted person", extra={"person_id": person_id})


def _clean_email(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None
