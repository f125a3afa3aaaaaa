"""Data access for person profiles."""
from __future__ import annotations

from typing import Iterable

from sqlalchemy import delete, func, select

from kinfolk.models import (
    RECORD_MODELS,
    CollaborationRequest,
    ItemShare,
    Person,
    PersonShare,
    ProfileLink,
    SELF_RELATION,
)

from .base import BaseRepository


class PeopleRepository(BaseRepository):
    """Repository for ``Person`` rows."""

    def get(self, person_id: int) -> Person | None:
        return self._session.get(Person, person_id)

    def get_many(self, person_ids: Iterable[int]) -> list[Person]:
        ids = set(person_ids)
        if not ids:
            return []
        statement = (
            select(Person)
            .where(Person.id.in_(ids))
            .order_by(Person.created_at.desc(), Person.id.desc())
        )
        return list(self._session.execute(statement).scalars())

    def list_owned(self, account_id: int) -> list[Person]:
        statement = (
            select(Person)
            .where(Person.owner_account_id == account_id)
            .order_by(Person.created_at.desc(), Person.id.desc())
        )
        return list(self._session.execute(statement).scalars())

    def find_self_profile(self, account_id: int) -> Person | None:
        statement = (
            select(Person)
            .where(
                Person.owner_account_id == account_id,
                Person.linked_account_id == account_id,
            )
            .order_by(Person.id)
        )
        return self._session.execute(statement).scalars().first()

    def find_unlinked_self_relation(self, account_id: int) -> Person | None:
        statement = (
            select(Person)
            .where(
                Person.owner_account_id == account_id,
                Person.linked_account_id.is_(None),
                func.lower(Person.relation) == SELF_RELATION.lower(),
            )
            .order_by(Person.id)
        )
        return self._session.execute(statement).scalars().first()

    def add(self, person: Person) -> Person:
        return self._add(person)

    def delete(self, person: Person) -> None:
        """Delete ``person`` together with its records and grants."""

        person_id = person.id
        for model in RECORD_MODELS.values():
            record_ids = select(model.id).where(model.person_id == person_id)
            self._session.execute(
                delete(ItemShare)
                .where(
                    ItemShare.record_type == model.record_type,
                    ItemShare.record_id.in_(record_ids),
                )
                .execution_options(synchronize_session=False)
            )
            self._session.execute(
                delete(model)
                .where(model.person_id == person_id)
                .execution_options(synchronize_session=False)
            )
        self._session.execute(
            delete(PersonShare)
            .where(PersonShare.person_id == person_id)
            .execution_options(synchronize_session=False)
        )
        self._session.execute(
            delete(CollaborationRequest)
            .where(CollaborationRequest.person_id == person_id)
            .execution_options(synchronize_session=False)
        )
        self._session.execute(
            delete(ProfileLink)
            .where((ProfileLink.profile_a_id == person_id) | (ProfileLink.profile_b_id == person_id))
            .execution_options(synchronize_session=False)
        )
        self._session.delete(person)
        self._session.flush()
