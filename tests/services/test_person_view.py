"""Tests for the merged per-person view and grant resolution."""
from __future__ import annotations

from datetime import date
from unittest.mock import create_autospec

import pytest

from kinfolk.core.config import InviteSettings
from kinfolk.core.errors import PersonNotFound
from kinfolk.models import ItemShare, Person, PersonShare, RecordType
from kinfolk.repositories import PeopleRepository, SharingRepository
from kinfolk.services import (
    CollaborationService,
    GrantResolver,
    PersonViewComposer,
    RecordsService,
    SharingService,
)
from kinfolk.services.grants import Grant, GrantScope, ProfileLinkGrant

INVITES = InviteSettings(base_url="https://kinfolk.test")


def _accept_link(session, owner, owner_person, collaborator, **accept_kwargs):
    service = CollaborationService(session, invites=INVITES)
    request = service.create_by_target(
        owner_person.id, owner.id, target_account_id=collaborator.id
    )
    return service.accept(request.id, collaborator.id, **accept_kwargs)


def _titles(records) -> list[str]:
    return [record.title for record in records]


def test_owner_sees_own_records(session, alice, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    records = RecordsService(session)
    records.add_record(mom.id, RecordType.TODO, {"title": "Call"}, alice.id)
    records.add_record(mom.id, RecordType.HEALTH, {"title": "Checkup", "date": date(2024, 1, 2)}, alice.id)

    view = PersonViewComposer(session).build_person_view(alice.id, mom.id)

    assert view.is_owner is True
    assert view.name == "Mom"
    assert _titles(view.todos) == ["Call"]
    assert _titles(view.health_records) == ["Checkup"]
    assert view.todos[0].attribution == "You"
    assert view.collaborators == []


def test_strangers_cannot_view(session, alice, carol, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")

    with pytest.raises(PersonNotFound):
        PersonViewComposer(session).build_person_view(carol.id, mom.id)
    with pytest.raises(PersonNotFound):
        PersonViewComposer(session).build_person_view(alice.id, 12345)


def test_end_to_end_invite_accept_and_shared_records(session, alice, bob, make_person) -> None:
    """Bob accepts Alice's invite and then sees what Alice adds to Mom."""

    mom = make_person(alice, "Mom", email="mom@example.com", relation="Mother")
    service = CollaborationService(session, invites=INVITES)
    service.create_by_target(mom.id, alice.id, target_email="b@x.com")

    incoming = service.list_incoming(bob.id)
    assert len(incoming) == 1
    assert incoming[0].person_name == "Mom"

    result = service.accept(incoming[0].id, bob.id, create_new=True)
    bobs_mom = session.get(Person, result.person_id)
    assert bobs_mom.owner_account_id == bob.id
    assert bobs_mom.name == "Mom"

    RecordsService(session).add_record(mom.id, RecordType.NOTE, {"title": "Allergic to nuts"}, alice.id)

    view = PersonViewComposer(session).build_person_view(bob.id, bobs_mom.id)

    assert _titles(view.notes) == ["Allergic to nuts"]
    assert view.notes[0].attribution == "Shared by Alice"
    assert view.notes[0].created_by_email == "alice@example.com"
    assert view.notes[0].is_own is False
    assert view.collaborators == ["Alice"]


def test_link_is_symmetric(session, alice, bob, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    mother = make_person(bob, "Mother", email="mother@example.com")
    records = RecordsService(session)
    records.add_record(mom.id, RecordType.TODO, {"title": "From Alice"}, alice.id)
    records.add_record(mother.id, RecordType.TODO, {"title": "From Bob"}, bob.id)

    _accept_link(session, alice, mom, bob, merge_into_person_id=mother.id)
    composer = PersonViewComposer(session)

    alice_view = composer.build_person_view(alice.id, mom.id)
    bob_view = composer.build_person_view(bob.id, mother.id)

    assert sorted(_titles(alice_view.todos)) == ["From Alice", "From Bob"]
    assert sorted(_titles(bob_view.todos)) == ["From Alice", "From Bob"]
    by_title = {todo.title: todo.attribution for todo in bob_view.todos}
    assert by_title == {"From Alice": "Shared by Alice", "From Bob": "You"}


def test_revocation_is_not_retroactive(session, alice, bob, make_person) -> None:
    """Item-shared records stay visible after the collaborator is removed."""

    mom = make_person(alice, "Mom", email="mom@example.com")
    session.add(PersonShare(person_id=mom.id, account_id=bob.id, account_email=bob.email))
    session.commit()
    share = SharingRepository(session).get_person_share(mom.id, bob.id)
    records = RecordsService(session)
    shared = records.add_record(
        mom.id, RecordType.NOTE, {"title": "Shared"}, alice.id, share_with=[share.id]
    )
    records.add_record(mom.id, RecordType.NOTE, {"title": "Private"}, alice.id, share_with=[])
    composer = PersonViewComposer(session)

    before = composer.build_person_view(bob.id, mom.id)
    assert _titles(before.notes) == ["Shared"]
    assert composer.build_person_view(alice.id, mom.id).collaborators == ["Bob"]

    SharingService(session).remove_collaborator(mom.id, bob.id, alice.id)
    records.add_record(mom.id, RecordType.NOTE, {"title": "After removal"}, alice.id)

    after = composer.build_person_view(bob.id, mom.id)
    assert _titles(after.notes) == ["Shared"]
    assert after.notes[0].id == shared.id
    assert after.notes[0].shared_from.name == "Alice"
    assert composer.build_person_view(alice.id, mom.id).collaborators == []


def test_record_reachable_twice_appears_once(session, alice, bob, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    mother = make_person(bob, "Mother", email="mother@example.com")
    _accept_link(session, alice, mom, bob, merge_into_person_id=mother.id)
    share = SharingRepository(session).get_person_share(mom.id, bob.id)
    RecordsService(session).add_record(
        mom.id, RecordType.TODO, {"title": "Both paths"}, alice.id, share_with=[share.id]
    )

    view = PersonViewComposer(session).build_person_view(bob.id, mother.id)

    assert _titles(view.todos) == ["Both paths"]
    assert view.todos[0].shared_with_person_share_ids == [share.id]


def test_people_views_fold_linked_profiles(session, alice, bob, carol, make_person) -> None:
    """Linked counterparts surface through the viewer's own profile only."""

    mom = make_person(alice, "Mom", email="mom@example.com")
    mother = make_person(bob, "Mother", email="mother@example.com")
    _accept_link(session, alice, mom, bob, merge_into_person_id=mother.id)
    uncle = make_person(carol, "Uncle", email="uncle@example.com")
    session.add(PersonShare(person_id=uncle.id, account_id=bob.id))
    session.commit()

    views = PersonViewComposer(session).build_people_views(bob.id)

    assert sorted(view.id for view in views) == sorted([mother.id, uncle.id])
    assert {view.id: view.is_owner for view in views} == {mother.id: True, uncle.id: False}


def test_people_views_keep_revoked_shares_with_surfaced_records(
    session, alice, bob, carol, make_person
) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    dad = make_person(alice, "Dad", email="dad@example.com")
    session.add_all(
        [
            PersonShare(person_id=mom.id, account_id=bob.id),
            PersonShare(person_id=dad.id, account_id=bob.id),
        ]
    )
    session.commit()
    sharing = SharingRepository(session)
    mom_share = sharing.get_person_share(mom.id, bob.id)
    RecordsService(session).add_record(
        mom.id, RecordType.NOTE, {"title": "Kept"}, alice.id, share_with=[mom_share.id]
    )
    service = SharingService(session)
    service.remove_collaborator(mom.id, bob.id, alice.id)
    service.remove_collaborator(dad.id, bob.id, alice.id)

    views = PersonViewComposer(session).build_people_views(bob.id)

    assert [view.id for view in views] == [mom.id]
    assert _titles(views[0].notes) == ["Kept"]


def test_orphaned_item_shares_grant_nothing(session, alice, bob, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    session.add(PersonShare(person_id=mom.id, account_id=bob.id))
    session.commit()
    note = RecordsService(session).add_record(mom.id, RecordType.NOTE, {"title": "x"}, alice.id)
    session.add(
        ItemShare(
            record_type=RecordType.NOTE,
            record_id=note.id,
            person_share_id=999,
            created_by_account_id=alice.id,
        )
    )
    session.commit()

    view = PersonViewComposer(session).build_person_view(bob.id, mom.id)

    assert view.notes == []


def test_resolver_ors_strategy_results() -> None:
    """The resolver unions whatever each strategy grants."""

    first = create_autospec(ProfileLinkGrant, instance=True)
    first.name = "first"
    first.resolve.return_value = Grant(person_ids=frozenset({1}))
    second = create_autospec(ProfileLinkGrant, instance=True)
    second.name = "second"
    second.resolve.return_value = Grant(record_keys=frozenset({(RecordType.NOTE, 5)}))

    resolver = GrantResolver(
        session=None,
        people=create_autospec(PeopleRepository, instance=True),
        sharing=create_autospec(SharingRepository, instance=True),
        strategies=[first, second],
    )
    scope = GrantScope(viewer_account_id=1, person_id=1, relevant_person_ids=frozenset({1}))

    grant = resolver.resolve(scope)

    assert grant.allows(RecordType.TODO, 99, person_id=1)
    assert grant.allows(RecordType.NOTE, 5, person_id=2)
    assert not grant.allows(RecordType.TODO, 5, person_id=2)


def test_collaborators_skip_shares_without_an_account(session, alice, bob, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    session.add_all(
        [
            PersonShare(person_id=mom.id, account_id=bob.id),
            PersonShare(person_id=mom.id, account_id=None, account_email="pending@example.com"),
        ]
    )
    session.commit()

    view = PersonViewComposer(session).build_person_view(alice.id, mom.id)
    listed = SharingService(session).list_collaborators(mom.id, alice.id)

    assert view.collaborators == ["Bob"]
    assert view.collaborators == [row.name for row in listed]
