"""Tests for person shares, profile links and item shares."""
from __future__ import annotations

import pytest
from sqlalchemy import select

from kinfolk.core.config import InviteSettings
from kinfolk.core.errors import PersonNotFound, RecordNotFound
from kinfolk.models import ItemShare, PersonShare, ProfileLink, RecordType, SharingPreference
from kinfolk.repositories import SharingRepository
from kinfolk.services import CollaborationService, RecordsService, SharingService

INVITES = InviteSettings(base_url="https://kinfolk.test")


def _link(session, owner, owner_person, collaborator, collaborator_person) -> None:
    service = CollaborationService(session, invites=INVITES)
    request = service.create_by_target(
        owner_person.id, owner.id, target_account_id=collaborator.id
    )
    service.accept(request.id, collaborator.id, merge_into_person_id=collaborator_person.id)


@pytest.fixture()
def linked(session, alice, bob, make_person):
    mom = make_person(alice, "Mom", email="mom@example.com")
    mother = make_person(bob, "Mother", email="mother@example.com")
    _link(session, alice, mom, bob, mother)
    return mom, mother


def test_remove_collaborator_revokes_links_and_share(session, alice, bob, linked) -> None:
    mom, mother = linked

    removed = SharingService(session).remove_collaborator(mom.id, bob.id, alice.id)

    assert removed.share_revoked is True
    assert removed.links_revoked == 1
    link = session.execute(select(ProfileLink)).scalar_one()
    assert link.is_active is False
    assert link.revoked_at is not None
    assert link.active_pair_key is None
    assert SharingRepository(session).get_person_share(mom.id, bob.id).revoked_at is not None


def test_collaborator_may_leave(session, alice, bob, linked) -> None:
    mom, _ = linked

    removed = SharingService(session).remove_collaborator(mom.id, bob.id, bob.id)

    assert removed.share_revoked is True


def test_third_party_cannot_remove_collaborators(session, bob, carol, linked) -> None:
    mom, _ = linked

    with pytest.raises(PersonNotFound):
        SharingService(session).remove_collaborator(mom.id, bob.id, carol.id)

    assert SharingRepository(session).get_person_share(mom.id, bob.id).is_active


def test_list_collaborators_skips_revoked_shares(session, alice, bob, carol, make_person, linked) -> None:
    mom, _ = linked
    aunt = make_person(carol, "Aunt", email="aunt@example.com")
    _link(session, alice, mom, carol, aunt)
    service = SharingService(session)

    names = [row.name for row in service.list_collaborators(mom.id, alice.id)]
    assert sorted(names) == ["Bob", "Carol"]

    service.remove_collaborator(mom.id, carol.id, alice.id)

    collaborators = service.list_collaborators(mom.id, alice.id)
    assert [(row.account_id, row.name, row.email) for row in collaborators] == [
        (bob.id, "Bob", "b@x.com")
    ]


def test_link_account_to_person_is_owner_only(session, alice, bob, make_person) -> None:
    person = make_person(alice, "Bob's profile", email="b@x.com")
    service = SharingService(session)

    with pytest.raises(PersonNotFound):
        service.link_account_to_person(person.id, bob.id, bob.id)

    updated = service.link_account_to_person(person.id, bob.id, alice.id)

    assert updated.linked_account_id == bob.id
    assert session.execute(select(PersonShare)).first() is None


def test_set_item_shares_replaces_selection(session, alice, bob, carol, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    session.add_all(
        [
            PersonShare(person_id=mom.id, account_id=bob.id),
            PersonShare(person_id=mom.id, account_id=carol.id),
        ]
    )
    session.commit()
    bob_share, carol_share = SharingRepository(session).list_person_shares([mom.id])
    task = RecordsService(session).add_record(
        mom.id, RecordType.TODO, {"title": "Call"}, alice.id, share_with=[]
    )
    service = SharingService(session)

    result = service.set_item_shares(
        RecordType.TODO, task.id, [bob_share.id, carol_share.id, bob_share.id], alice.id
    )
    assert result.person_share_ids == [bob_share.id, carol_share.id]

    service.set_item_shares(RecordType.TODO, task.id, [carol_share.id], alice.id)
    rows = session.execute(select(ItemShare.person_share_id)).scalars().all()
    assert rows == [carol_share.id]

    service.set_item_shares(RecordType.TODO, task.id, [], alice.id)
    assert session.execute(select(ItemShare)).first() is None


def test_set_item_shares_requires_existing_record(session, alice) -> None:
    with pytest.raises(RecordNotFound):
        SharingService(session).set_item_shares(RecordType.NOTE, 404, [1], alice.id)


def test_set_item_shares_by_stranger_is_rejected(session, alice, carol, make_person) -> None:
    mom = make_person(alice, "Mom", email="mom@example.com")
    note = RecordsService(session).add_record(mom.id, RecordType.NOTE, {"title": "x"}, alice.id)

    with pytest.raises(RecordNotFound):
        SharingService(session).set_item_shares(RecordType.NOTE, note.id, [1], carol.id)


def test_default_share_selection_follows_preference(session, alice, bob, make_person, linked) -> None:
    mom, _ = linked
    service = SharingService(session)
    share = SharingRepository(session).get_person_share(mom.id, bob.id)

    assert service.default_share_selection(mom) == []

    mom.sharing_preference = SharingPreference.ALWAYS_SHARE
    session.commit()
    assert service.default_share_selection(mom) == [share.id]

    service.remove_collaborator(mom.id, bob.id, alice.id)
    assert service.default_share_selection(mom) == []
