"""Tests for adding and deleting records."""
from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from kinfolk.core.errors import PersonNotFound, RecordNotFound
from kinfolk.models import (
    FinancialEntry,
    ItemShare,
    PersonShare,
    RecordType,
    SharingPreference,
)
from kinfolk.repositories import SharingRepository
from kinfolk.services import RecordsService


def _share(session, person, account) -> PersonShare:
    share = PersonShare(person_id=person.id, account_id=account.id, account_email=account.email)
    session.add(share)
    session.commit()
    return share


def test_add_record_sets_author(session, alice, make_person) -> None:
    mom = make_person(alice, "Mom")

    view = RecordsService(session).add_record(
        mom.id,
        RecordType.FINANCE,
        {"title": "Groceries", "amount": Decimal("42.50"), "date": date(2024, 3, 1)},
        alice.id,
    )

    entry = session.get(FinancialEntry, view.id)
    assert entry.created_by_account_id == alice.id
    assert entry.person_id == mom.id
    assert view.attribution == "You"
    assert view.is_own is True
    assert view.shared_with_person_share_ids == []


def test_always_share_preselects_active_shares(session, alice, bob, carol, make_person) -> None:
    mom = make_person(alice, "Mom", sharing_preference=SharingPreference.ALWAYS_SHARE)
    bob_share = _share(session, mom, bob)
    carol_share = _share(session, mom, carol)
    SharingRepository(session).revoke_person_share(mom.id, carol.id)
    session.commit()

    view = RecordsService(session).add_record(mom.id, RecordType.NOTE, {"title": "Diet"}, alice.id)

    assert view.shared_with_person_share_ids == [bob_share.id]
    share_ids = session.execute(select(ItemShare.person_share_id)).scalars().all()
    assert carol_share.id not in share_ids


def test_explicit_selection_overrides_preference(session, alice, bob, make_person) -> None:
    mom = make_person(alice, "Mom", sharing_preference=SharingPreference.ALWAYS_SHARE)
    _share(session, mom, bob)

    view = RecordsService(session).add_record(
        mom.id, RecordType.TODO, {"title": "Private"}, alice.id, share_with=[]
    )

    assert view.shared_with_person_share_ids == []
    assert session.scalar(select(func.count()).select_from(ItemShare)) == 0


def test_collaborator_with_active_share_may_add(session, alice, bob, make_person) -> None:
    mom = make_person(alice, "Mom")
    _share(session, mom, bob)

    view = RecordsService(session).add_record(mom.id, RecordType.NOTE, {"title": "Hi"}, bob.id)

    assert view.created_by_account_id == bob.id


def test_stranger_cannot_add(session, alice, carol, make_person) -> None:
    mom = make_person(alice, "Mom")

    with pytest.raises(PersonNotFound):
        RecordsService(session).add_record(mom.id, RecordType.NOTE, {"title": "Hi"}, carol.id)


def test_delete_record_removes_item_shares(session, alice, bob, carol, make_person) -> None:
    mom = make_person(alice, "Mom")
    share = _share(session, mom, bob)
    service = RecordsService(session)
    view = service.add_record(
        mom.id,
        RecordType.HEALTH,
        {"title": "Flu shot", "date": date(2024, 10, 1)},
        alice.id,
        share_with=[share.id],
    )

    with pytest.raises(RecordNotFound):
        service.delete_record(RecordType.HEALTH, view.id, carol.id)

    service.delete_record(RecordType.HEALTH, view.id, alice.id)

    assert session.scalar(select(func.count()).select_from(ItemShare)) == 0
    with pytest.raises(RecordNotFound):
        service.delete_record(RecordType.HEALTH, view.id, alice.id)
