"""Person profiles tracked by accounts."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum

from sqlalchemy import (
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_TYPE, Base, utcnow


class SharingPreference(str, Enum):
    """Default sharing applied when an account adds a record to a person."""

    ASK_EVERY_TIME = "ASK_EVERY_TIME"
    ALWAYS_SHARE = "ALWAYS_SHARE"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


SELF_RELATION = "Self"
DEFAULT_THEME_COLOR = "bg-brown-100"


class Person(Base):
    """A person profile owned by exactly one account.

    ``linked_account_id`` marks the profile as the identity of that account;
    when it equals ``owner_account_id`` the row is the owner's self profile.
    """

    __tablename__ = "people"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    owner_account_id: Mapped[int] = mapped_column(
        ForeignKey("account.id"), nullable=False, index=True
    )
    linked_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("account.id", ondelete="SET NULL"), index=True
    )
    name: Mapped[str] = mapped_column(String(160), nullable=False)
    relation: Mapped[str] = mapped_column(String(80), nullable=False, default="")
    avatar_url: Mapped[str | None] = mapped_column(String(512))
    theme_color: Mapped[str] = mapped_column(
        String(40), nullable=False, default=DEFAULT_THEME_COLOR
    )
    birthday: Mapped[date | None] = mapped_column(Date)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    phone: Mapped[str | None] = mapped_column(String(20))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[Gender | None] = mapped_column(
        SQLEnum(Gender, native_enum=False, values_callable=lambda e: [m.value for m in e])
    )
    sharing_preference: Mapped[SharingPreference] = mapped_column(
        SQLEnum(SharingPreference, native_enum=False),
        nullable=False,
        default=SharingPreference.ASK_EVERY_TIME,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def is_self_profile(self) -> bool:
        return (
            self.linked_account_id is not None
            and self.linked_account_id == self.owner_account_id
        )

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())
