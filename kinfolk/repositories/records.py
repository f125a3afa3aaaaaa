"""Data access for the four record tables."""
from __future__ import annotations

from typing import Iterable

from sqlalchemy import delete, select

from kinfolk.models import ItemShare, RecordMixin, RecordType, model_for

from .base import BaseRepository


class RecordsRepository(BaseRepository):
    """Typed access to todos, health entries, notes and financial entries."""

    def get(self, record_type: RecordType, record_id: int) -> RecordMixin | None:
        return self._session.get(model_for(record_type), record_id)

    def list_for_people(
        self, record_type: RecordType, person_ids: Iterable[int]
    ) -> list[RecordMixin]:
        ids = set(person_ids)
        if not ids:
            return []
        model = model_for(record_type)
        statement = select(model).where(model.person_id.in_(ids))
        return list(self._session.execute(statement).scalars())

    def list_by_ids(
        self, record_type: RecordType, record_ids: Iterable[int]
    ) -> list[RecordMixin]:
        ids = set(record_ids)
        if not ids:
            return []
        model = model_for(record_type)
        statement = select(model).where(model.id.in_(ids))
        return list(self._session.execute(statement).scalars())

    def add(self, record: RecordMixin) -> RecordMixin:
        return self._add(record)

    def delete(self, record: RecordMixin) -> None:
        self._session.execute(
            delete(ItemShare)
            .where(
                ItemShare.record_type == record.record_type,
                ItemShare.record_id == record.id,
            )
            .execution_options(synchronize_session=False)
        )
        self._session.delete(record)
        self._session.flush()
