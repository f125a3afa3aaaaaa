"""Read access to the identity store."""
from __future__ import annotations

from typing import Iterable

from sqlalchemy import func, select

from kinfolk.models import Account

from .base import BaseRepository


class AccountsRepository(BaseRepository):
    """Lookups of accounts by id or email."""

    def get(self, account_id: int) -> Account | None:
        return self._session.get(Account, account_id)

    def find_by_email(self, email: str | None) -> Account | None:
        normalized = self._normalize_email(email)
        if normalized is None:
            return None
        statement = select(Account).where(func.lower(Account.email) == normalized)
        return self._session.execute(statement).scalars().first()

    def get_many(self, account_ids: Iterable[int]) -> dict[int, Account]:
        ids = {account_id for account_id in account_ids if account_id is not None}
        if not ids:
            return {}
        rows = self._session.execute(select(Account).where(Account.id.in_(ids))).scalars()
        return {account.id: account for account in rows}
