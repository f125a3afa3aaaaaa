"""Grant resolution across ownership, profile links and item shares.

Three independently maintained mechanisms decide whether a viewer may see a
person's records. Each is expressed as a :class:`GrantStrategy` returning the
people whose records it opens up and the individual records it extends;
:class:`GrantResolver` ORs them together.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from sqlalchemy.orm import Session

from kinfolk.core.logger import get_logger
from kinfolk.models import ItemShare, Person, PersonShare, RecordType
from kinfolk.repositories import PeopleRepository, SharingRepository

LOGGER = get_logger(__name__)

RecordKey = tuple[RecordType, int]


@dataclass(frozen=True)
class Grant:
    """People whose records are visible, plus individually shared records."""

    person_ids: frozenset[int] = frozenset()
    record_keys: frozenset[RecordKey] = frozenset()

    def __or__(self, other: "Grant") -> "Grant":
        return Grant(
            person_ids=self.person_ids | other.person_ids,
            record_keys=self.record_keys | other.record_keys,
        )

    def allows(self, record_type: RecordType, record_id: int, person_id: int) -> bool:
        return person_id in self.person_ids or (record_type, record_id) in self.record_keys


@dataclass(frozen=True)
class GrantScope:
    """Inputs shared by every strategy while composing one person's view."""

    viewer_account_id: int
    person_id: int
    relevant_person_ids: frozenset[int]
    people: dict[int, Person] = field(default_factory=dict)
    held_shares: tuple[PersonShare, ...] = ()

    @property
    def owned_person_ids(self) -> frozenset[int]:
        return frozenset(
            person_id
            for person_id, person in self.people.items()
            if person.owner_account_id == self.viewer_account_id
        )

    @property
    def held_share_ids(self) -> frozenset[int]:
        return frozenset(share.id for share in self.held_shares)


class GrantStrategy:
    """One way a viewer can be granted access to records."""

    name = "grant"

    def resolve(self, scope: GrantScope) -> Grant:
        raise NotImplementedError


class OwnershipGrant(GrantStrategy):
    """Owners see every record on their own people."""

    name = "ownership"

    def resolve(self, scope: GrantScope) -> Grant:
        return Grant(person_ids=scope.owned_person_ids)


class ProfileLinkGrant(GrantStrategy):
    """An active link makes both sides' records visible to either owner."""

    name = "profile_link"

    def resolve(self, scope: GrantScope) -> Grant:
        if len(scope.relevant_person_ids) < 2 or not scope.owned_person_ids:
            return Grant()
        return Grant(person_ids=scope.relevant_person_ids)


class ItemShareGrant(GrantStrategy):
    """Records explicitly extended to a person share the viewer holds.

    Revoked shares still count: revocation only stops new records from
    being shared, it does not withdraw what was already shared.
    """

    name = "item_share"

    def __init__(self, repository: SharingRepository) -> None:
        self._repository = repository

    def item_shares(self, scope: GrantScope) -> list[ItemShare]:
        return self._repository.list_item_shares_for_shares(scope.held_share_ids)

    def resolve(self, scope: GrantScope) -> Grant:
        keys = frozenset(
            (RecordType(row.record_type), row.record_id) for row in self.item_shares(scope)
        )
        return Grant(record_keys=keys)


class GrantResolver:
    """Answers access questions by combining the grant strategies."""

    def __init__(
        self,
        session: Session,
        people: PeopleRepository | None = None,
        sharing: SharingRepository | None = None,
        strategies: Sequence[GrantStrategy] | None = None,
    ) -> None:
        self._people = people or PeopleRepository(session)
        self._sharing = sharing or SharingRepository(session)
        self._strategies: tuple[GrantStrategy, ...] = tuple(
            strategies
            if strategies is not None
            else (OwnershipGrant(), ProfileLinkGrant(), ItemShareGrant(self._sharing))
        )

    @property
    def strategies(self) -> tuple[GrantStrategy, ...]:
        return self._strategies

    def relevant_person_ids(self, person_id: int) -> frozenset[int]:
        """``person_id`` plus the other side of every active link touching it."""

        relevant = {person_id}
        for link in self._sharing.list_active_links([person_id]):
            other = link.other_side(person_id)
            if other is not None:
                relevant.add(other)
        return frozenset(relevant)

    def linked_owned_person_ids(self, viewer_account_id: int, person_id: int) -> set[int]:
        """People the viewer owns that are actively linked to ``person_id``."""

        linked = self.relevant_person_ids(person_id) - {person_id}
        return {
            person.id
            for person in self._people.get_many(linked)
            if person.owner_account_id == viewer_account_id
        }

    def can_view(self, viewer_account_id: int, person: Person) -> bool:
        """Owner, any person share (even revoked), or an active link to an owned person."""

        if person.owner_account_id == viewer_account_id:
            return True
        if self._sharing.get_person_share(person.id, viewer_account_id) is not None:
            return True
        return bool(self.linked_owned_person_ids(viewer_account_id, person.id))

    def can_contribute(self, viewer_account_id: int, person: Person) -> bool:
        """Like :meth:`can_view`, but a revoked share no longer counts."""

        if person.owner_account_id == viewer_account_id:
            return True
        share = self._sharing.get_person_share(person.id, viewer_account_id)
        if share is not None and share.is_active:
            return True
        return bool(self.linked_owned_person_ids(viewer_account_id, person.id))

    def scope_for(self, viewer_account_id: int, person: Person) -> GrantScope:
        relevant = self.relevant_person_ids(person.id)
        people = {row.id: row for row in self._people.get_many(relevant)}
        people[person.id] = person
        held = self._sharing.list_shares_held_by(viewer_account_id, person_ids=relevant)
        return GrantScope(
            viewer_account_id=viewer_account_id,
            person_id=person.id,
            relevant_person_ids=relevant,
            people=people,
            held_shares=tuple(held),
        )

    def resolve(self, scope: GrantScope) -> Grant:
        grant = Grant()
        for strategy in self._strategies:
            contribution = strategy.resolve(scope)
            LOGGER.debug(
                "Grant strategy resolved",
                extra={
                    "strategy": strategy.name,
                    "person_id": scope.person_id,
                    "people": len(contribution.person_ids),
                    "records": len(contribution.record_keys),
                },
            )
            grant = grant | contribution
        return grant

    def visible_person_ids(self, viewer_account_id: int) -> list[int]:
        """People listed for the viewer, newest first.

        Owned people, people shared with the viewer, and people reachable
        only through revoked shares whose item shares still surface records.
        A non-owned person actively linked to an owned one is folded into the
        owned profile and not listed separately.
        """

        owned = self._people.list_owned(viewer_account_id)
        owned_ids = {person.id for person in owned}

        candidates: set[int] = set(owned_ids)
        held = self._sharing.list_shares_held_by(viewer_account_id)
        revoked: list[PersonShare] = []
        for share in held:
            if share.is_active:
                candidates.add(share.person_id)
            else:
                revoked.append(share)
        if revoked:
            surfacing = {
                row.person_share_id
                for row in self._sharing.list_item_shares_for_shares(s.id for s in revoked)
            }
            candidates.update(s.person_id for s in revoked if s.id in surfacing)

        folded = _linked_counterparts(self._sharing.list_active_links(owned_ids), owned_ids)
        listed = (candidates - folded) | owned_ids
        return [person.id for person in self._people.get_many(listed)]


def _linked_counterparts(links: Iterable, owned_ids: set[int]) -> set[int]:
    counterparts: set[int] = set()
    for link in links:
        for person_id in (link.profile_a_id, link.profile_b_id):
            other = link.other_side(person_id)
            if person_id in owned_ids and other is not None and other not in owned_ids:
                counterparts.add(other)
    return counterparts


__all__ = [
    "Grant",
    "GrantResolver",
    "GrantScope",
    "GrantStrategy",
    "ItemShareGrant",
    "OwnershipGrant",
    "ProfileLinkGrant",
    "RecordKey",
]
