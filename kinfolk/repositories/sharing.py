"""Data access for the grant tables: person shares, profile links, item shares."""
from __future__ import annotations

from datetime import datetime
from typing import Iterable

from sqlalchemy import and_, delete, or_, select

from kinfolk.core.logger import get_logger
from kinfolk.models import (
    ItemShare,
    PersonShare,
    ProfileLink,
    RecordType,
    pair_key,
    utcnow,
)

from .base import BaseRepository

LOGGER = get_logger(__name__)


class SharingRepository(BaseRepository):
    """Reads and idempotent writes against the three grant tables."""

    # Person shares -----------------------------------------------------

    def get_person_share(self, person_id: int, account_id: int) -> PersonShare | None:
        statement = select(PersonShare).where(
            PersonShare.person_id == person_id,
            PersonShare.account_id == account_id,
        )
        return self._session.execute(statement).scalars().first()

    def grant_person_share(
        self, person_id: int, account_id: int, account_email: str | None = None
    ) -> PersonShare:
        """Ensure ``account_id`` holds an active share on ``person_id``.

        Existing rows are reused and reactivated when revoked; a concurrent
        insert that wins the unique constraint is picked up afterwards.
        """

        share = self.get_person_share(person_id, account_id)
        if share is None:
            candidate = PersonShare(
                person_id=person_id, account_id=account_id, account_email=account_email
            )
            if self._insert_if_absent(candidate):
                return candidate
            share = self.get_person_share(person_id, account_id)
            if share is None:
                raise LookupError(
                    f"person share for person {person_id} and account {account_id} vanished"
                )
        if share.revoked_at is not None:
            share.revoked_at = None
            LOGGER.info(
                "Reactivated person share",
                extra={"person_share_id": share.id, "person_id": person_id},
            )
        if account_email and not share.account_email:
            share.account_email = account_email
        self._session.flush()
        return share

    def list_person_shares(
        self, person_ids: Iterable[int], *, active_only: bool = True
    ) -> list[PersonShare]:
        ids = set(person_ids)
        if not ids:
            return []
        statement = select(PersonShare).where(PersonShare.person_id.in_(ids))
        if active_only:
            statement = statement.where(PersonShare.revoked_at.is_(None))
        return list(self._session.execute(statement.order_by(PersonShare.id)).scalars())

    def list_shares_held_by(
        self,
        account_id: int,
        *,
        person_ids: Iterable[int] | None = None,
        active_only: bool = False,
    ) -> list[PersonShare]:
        statement = select(PersonShare).where(PersonShare.account_id == account_id)
        if person_ids is not None:
            ids = set(person_ids)
            if not ids:
                return []
            statement = statement.where(PersonShare.person_id.in_(ids))
        if active_only:
            statement = statement.where(PersonShare.revoked_at.is_(None))
        return list(self._session.execute(statement.order_by(PersonShare.id)).scalars())

    def revoke_person_share(
        self, person_id: int, account_id: int, when: datetime | None = None
    ) -> bool:
        share = self.get_person_share(person_id, account_id)
        if share is None or share.revoked_at is not None:
            return False
        share.revoked_at = when or utcnow()
        self._session.flush()
        return True

    # Profile links -----------------------------------------------------

    def find_active_link(self, person_a_id: int, person_b_id: int) -> ProfileLink | None:
        statement = select(ProfileLink).where(
            ProfileLink.active_pair_key == pair_key(person_a_id, person_b_id)
        )
        return self._session.execute(statement).scalars().first()

    def ensure_link(
        self,
        *,
        profile_a_id: int,
        profile_b_id: int,
        user_a_id: int,
        user_b_id: int,
        collaboration_request_id: int | None = None,
    ) -> ProfileLink:
        """Return the active link between the two people, creating it if needed."""

        existing = self.find_active_link(profile_a_id, profile_b_id)
        if existing is not None:
            return existing
        key = pair_key(profile_a_id, profile_b_id)
        link = ProfileLink(
            profile_a_id=profile_a_id,
            profile_b_id=profile_b_id,
            user_a_id=user_a_id,
            user_b_id=user_b_id,
            is_active=True,
            pair_key=key,
            active_pair_key=key,
            collaboration_request_id=collaboration_request_id,
        )
        if self._insert_if_absent(link):
            return link
        existing = self.find_active_link(profile_a_id, profile_b_id)
        if existing is None:
            raise LookupError(f"active profile link {key} vanished")
        return existing

    def list_active_links(self, person_ids: Iterable[int]) -> list[ProfileLink]:
        ids = set(person_ids)
        if not ids:
            return []
        statement = select(ProfileLink).where(
            ProfileLink.is_active.is_(True),
            or_(ProfileLink.profile_a_id.in_(ids), ProfileLink.profile_b_id.in_(ids)),
        )
        return list(self._session.execute(statement.order_by(ProfileLink.id)).scalars())

    def deactivate_links(
        self, person_id: int, collaborator_account_id: int, when: datetime | None = None
    ) -> list[ProfileLink]:
        """Revoke active links joining ``person_id`` to a person of the collaborator."""

        statement = select(ProfileLink).where(
            ProfileLink.is_active.is_(True),
            or_(
                and_(
                    ProfileLink.profile_a_id == person_id,
                    ProfileLink.user_b_id == collaborator_account_id,
                ),
                and_(
                    ProfileLink.profile_b_id == person_id,
                    ProfileLink.user_a_id == collaborator_account_id,
                ),
            ),
        )
        links = list(self._session.execute(statement).scalars())
        revoked_at = when or utcnow()
        for link in links:
            link.revoke(revoked_at)
        self._session.flush()
        return links

    # Item shares -------------------------------------------------------

    def list_item_shares_for_shares(self, person_share_ids: Iterable[int]) -> list[ItemShare]:
        ids = set(person_share_ids)
        if not ids:
            return []
        statement = select(ItemShare).where(ItemShare.person_share_id.in_(ids))
        return list(self._session.execute(statement.order_by(ItemShare.id)).scalars())

    def list_item_shares_for_records(
        self, record_type: RecordType, record_ids: Iterable[int]
    ) -> list[ItemShare]:
        ids = set(record_ids)
        if not ids:
            return []
        statement = select(ItemShare).where(
            ItemShare.record_type == record_type,
            ItemShare.record_id.in_(ids),
        )
        return list(self._session.execute(statement.order_by(ItemShare.id)).scalars())

    def replace_item_shares(
        self,
        record_type: RecordType,
        record_id: int,
        person_share_ids: Iterable[int],
        created_by_account_id: int,
    ) -> list[ItemShare]:
        self._session.execute(
            delete(ItemShare)
            .where(ItemShare.record_type == record_type, ItemShare.record_id == record_id)
            .execution_options(synchronize_session=False)
        )
        rows = [
            ItemShare(
                record_type=record_type,
                record_id=record_id,
                person_share_id=share_id,
                created_by_account_id=created_by_account_id,
            )
            for share_id in dict.fromkeys(person_share_ids)
        ]
        self._session.add_all(rows)
        self._session.flush()
        return rows
