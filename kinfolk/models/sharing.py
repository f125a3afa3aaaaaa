"""Grant tables: collaboration requests, profile links, person and item shares."""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_TYPE, Base, utcnow
from .records import RecordType


class RequestStatus(str, Enum):
    """PENDING is the only non-terminal state."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"


class CollaborationRequest(Base):
    """Offer from one account to link one of its people with another account."""

    __tablename__ = "collaboration_requests"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(
        ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    requester_account_id: Mapped[int] = mapped_column(
        ForeignKey("account.id"), nullable=False, index=True
    )
    target_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("account.id"), index=True
    )
    target_email: Mapped[str | None] = mapped_column(String(255), index=True)
    invite_token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    profile_snapshot: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    status: Mapped[RequestStatus] = mapped_column(
        SQLEnum(RequestStatus, native_enum=False),
        nullable=False,
        default=RequestStatus.PENDING,
    )
    merged_into_person_id: Mapped[int | None] = mapped_column(
        ForeignKey("people.id", ondelete="SET NULL")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


def pair_key(person_a_id: int, person_b_id: int) -> str:
    """Canonical key of the unordered pair ``{person_a_id, person_b_id}``."""

    low, high = sorted((int(person_a_id), int(person_b_id)))
    return f"{low}:{high}"


class ProfileLink(Base):
    """Bidirectional equivalence between two people owned by different accounts.

    Stored directed (a -> b) but meaningful in both orderings. Links are
    soft-deleted: ``active_pair_key`` is cleared on revocation so the unique
    constraint only spans active rows.
    """

    __tablename__ = "profile_links"
    __table_args__ = (
        UniqueConstraint("active_pair_key", name="uq_profile_links_active_pair"),
        CheckConstraint("profile_a_id <> profile_b_id", name="ck_profile_links_distinct"),
    )

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    profile_a_id: Mapped[int] = mapped_column(
        ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_b_id: Mapped[int] = mapped_column(
        ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_a_id: Mapped[int] = mapped_column(ForeignKey("account.id"), nullable=False)
    user_b_id: Mapped[int] = mapped_column(ForeignKey("account.id"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    pair_key: Mapped[str] = mapped_column(String(48), nullable=False, index=True)
    active_pair_key: Mapped[str | None] = mapped_column(String(48))
    collaboration_request_id: Mapped[int | None] = mapped_column(
        ForeignKey("collaboration_requests.id", ondelete="SET NULL")
    )
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    def other_side(self, person_id: int) -> int | None:
        """Return the linked person opposite ``person_id``, if it is an endpoint."""

        if self.profile_a_id == person_id:
            return self.profile_b_id
        if self.profile_b_id == person_id:
            return self.profile_a_id
        return None

    def revoke(self, when: datetime | None = None) -> None:
        self.is_active = False
        self.active_pair_key = None
        self.revoked_at = when or utcnow()


class PersonShare(Base):
    """Grants one account access to one person."""

    __tablename__ = "person_shares"
    __table_args__ = (
        UniqueConstraint("person_id", "account_id", name="uq_person_shares_person_account"),
    )

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    person_id: Mapped[int] = mapped_column(
        ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
    )
    account_id: Mapped[int | None] = mapped_column(ForeignKey("account.id"), index=True)
    account_email: Mapped[str | None] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    revoked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def is_active(self) -> bool:
        return self.revoked_at is None


class ItemShare(Base):
    """Extends one record to the collaborator behind one person share."""

    __tablename__ = "item_shares"
    __table_args__ = (
        UniqueConstraint(
            "record_type", "record_id", "person_share_id", name="uq_item_shares_record_share"
        ),
    )

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    record_type: Mapped[RecordType] = mapped_column(
        SQLEnum(RecordType, native_enum=False), nullable=False
    )
    record_id: Mapped[int] = mapped_column(ID_TYPE, nullable=False, index=True)
    # No foreign key: rows outlive the share they name and then match nothing.
    person_share_id: Mapped[int] = mapped_column(ID_TYPE, nullable=False, index=True)
    created_by_account_id: Mapped[int] = mapped_column(
        ForeignKey("account.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
