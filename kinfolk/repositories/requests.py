"""Data access for collaboration requests."""
from __future__ import annotations

from typing import Any

from sqlalchemy import func, or_, select, update

from kinfolk.models import CollaborationRequest, RequestStatus, utcnow

from .base import BaseRepository


class CollaborationRequestRepository(BaseRepository):
    """Repository for ``CollaborationRequest`` rows and their state transitions."""

    def get(self, request_id: int) -> CollaborationRequest | None:
        return self._session.get(CollaborationRequest, request_id)

    def get_by_token(self, token: str) -> CollaborationRequest | None:
        statement = select(CollaborationRequest).where(CollaborationRequest.invite_token == token)
        return self._session.execute(statement).scalars().first()

    def token_exists(self, token: str) -> bool:
        statement = select(CollaborationRequest.id).where(
            CollaborationRequest.invite_token == token
        )
        return self._session.execute(statement).first() is not None

    def add(self, request: CollaborationRequest) -> CollaborationRequest:
        return self._add(request)

    def count(self) -> int:
        return self._session.execute(
            select(func.count()).select_from(CollaborationRequest)
        ).scalar_one()

    def list_pending_for(self, account_id: int, email: str | None) -> list[CollaborationRequest]:
        conditions = [CollaborationRequest.target_account_id == account_id]
        normalized = self._normalize_email(email)
        if normalized is not None:
            conditions.append(func.lower(CollaborationRequest.target_email) == normalized)
        statement = (
            select(CollaborationRequest)
            .where(CollaborationRequest.status == RequestStatus.PENDING, or_(*conditions))
            .order_by(CollaborationRequest.created_at.desc(), CollaborationRequest.id.desc())
        )
        return list(self._session.execute(statement).scalars())

    def resolve(self, request_id: int, status: RequestStatus, **values: Any) -> bool:
        """Move a PENDING request to ``status``.

        The update is conditional on the row still being PENDING; ``False``
        means another caller resolved it first.
        """

        statement = (
            update(CollaborationRequest)
            .where(
                CollaborationRequest.id == request_id,
                CollaborationRequest.status == RequestStatus.PENDING,
            )
            .values(status=status, updated_at=utcnow(), **values)
            .execution_options(synchronize_session=False)
        )
        if self._session.execute(statement).rowcount != 1:
            return False
        self._session.get(CollaborationRequest, request_id, populate_existing=True)
        return True

    def claim_pending_for_email(self, account_id: int, email: str | None) -> int:
        normalized = self._normalize_email(email)
        if normalized is None:
            return 0
        statement = (
            update(CollaborationRequest)
            .where(
                CollaborationRequest.status == RequestStatus.PENDING,
                CollaborationRequest.target_account_id.is_(None),
                func.lower(CollaborationRequest.target_email) == normalized,
            )
            .values(target_account_id=account_id, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(statement).rowcount
