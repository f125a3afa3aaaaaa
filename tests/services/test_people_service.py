"""Tests for the person registry."""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import func, select

from kinfolk.core.errors import PersonNotFound
from kinfolk.models import ItemShare, Note, Person, PersonShare, RecordType
from kinfolk.schemas import PersonCreate, PersonUpdate
from kinfolk.services import PeopleService, RecordsService, SharingService


def _self_profiles(session, account_id: int) -> list[Person]:
    return list(
        session.execute(
            select(Person).where(
                Person.owner_account_id == account_id,
                Person.linked_account_id == account_id,
            )
        ).scalars()
    )


def test_ensure_self_profile_is_idempotent(session, alice) -> None:
    """Provisioning twice yields exactly one self profile."""

    service = PeopleService(session)

    first = service.ensure_self_profile(alice)
    second = service.ensure_self_profile(alice)

    assert first.id == second.id
    profiles = _self_profiles(session, alice.id)
    assert [profile.id for profile in profiles] == [first.id]
    assert first.is_self_profile
    assert first.name == "Alice"
    assert first.email == "alice@example.com"
    assert first.relation == "Self"


def test_ensure_self_profile_adopts_unlinked_self_relation(session, alice, make_person) -> None:
    """A hand-made "Self" profile is linked rather than duplicated."""

    existing = make_person(alice, "Me", relation="self")

    person = PeopleService(session).ensure_self_profile(alice)

    assert person.id == existing.id
    assert person.linked_account_id == alice.id
    assert person.email == "alice@example.com"
    assert session.scalar(select(func.count()).select_from(Person)) == 1


def test_create_and_update_person(session, alice) -> None:
    service = PeopleService(session)

    person = service.create_person(
        alice.id,
        PersonCreate(name="Mom", relation="Mother", email="  mom@example.com ", birthday=date(1960, 5, 1)),
    )
    updated = service.update_person(person.id, alice.id, PersonUpdate(phone="555-0100"))

    assert person.owner_account_id == alice.id
    assert person.email == "mom@example.com"
    assert person.theme_color == "bg-brown-100"
    assert updated.phone == "555-0100"
    assert updated.name == "Mom"


def test_only_owner_may_edit_or_delete(session, alice, bob, make_person) -> None:
    person = make_person(alice, "Mom", email="mom@example.com")
    service = PeopleService(session)

    with pytest.raises(PersonNotFound):
        service.update_person(person.id, bob.id, {"name": "Not mom"})
    with pytest.raises(PersonNotFound):
        service.delete_person(person.id, bob.id)

    assert session.get(Person, person.id).name == "Mom"


def test_delete_person_removes_records_and_grants(session, alice, bob, make_person) -> None:
    """Deleting a person takes its records, shares and item shares with it."""

    person = make_person(alice, "Mom", email="mom@example.com")
    session.add(PersonShare(person_id=person.id, account_id=bob.id))
    session.commit()
    share_id = session.execute(select(PersonShare.id)).scalar_one()

    note = RecordsService(session).add_record(
        person.id, RecordType.NOTE, {"title": "Allergies"}, alice.id, share_with=[share_id]
    )
    SharingService(session).set_item_shares(RecordType.NOTE, note.id, [share_id], alice.id)

    PeopleService(session).delete_person(person.id, alice.id)

    assert session.get(Person, person.id) is None
    assert session.scalar(select(func.count()).select_from(Note)) == 0
    assert session.scalar(select(func.count()).select_from(PersonShare)) == 0
    assert session.scalar(select(func.count()).select_from(ItemShare)) == 0
