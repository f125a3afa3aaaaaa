"""Account records mirrored from the identity provider."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ID_TYPE, Base, utcnow


class Account(Base):
    """Authenticated account able to own people and author records."""

    __tablename__ = "account"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(160))
    avatar_url: Mapped[str | None] = mapped_column(String(512))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @property
    def name(self) -> str:
        """Display name, falling back to the local part of the email."""

        if self.display_name:
            return self.display_name
        return self.email.split("@", 1)[0] if self.email else "Unknown"
