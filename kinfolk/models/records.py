"""Records attached to people: todos, health entries, notes and finances."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Type

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from .base import ID_TYPE, Base, utcnow


class RecordType(str, Enum):
    """Discriminator used by item shares to reference a record table."""

    TODO = "TODO"
    HEALTH = "HEALTH"
    NOTE = "NOTE"
    FINANCE = "FINANCE"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class HealthEntryType(str, Enum):
    CHECKUP = "CHECKUP"
    MEDICATION = "MEDICATION"
    VACCINE = "VACCINE"
    OTHER = "OTHER"


class FinancialEntryType(str, Enum):
    OWED = "OWED"
    LENT = "LENT"
    GIFT = "GIFT"
    EXPENSE = "EXPENSE"


class RecordMixin:
    """Columns shared by every record table.

    Authorship is permanent: ``created_by_account_id`` drives attribution for
    viewers who did not write the record.
    """

    record_type: ClassVar[RecordType]

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    @declared_attr
    def person_id(cls) -> Mapped[int]:
        return mapped_column(
            ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True
        )

    @declared_attr
    def created_by_account_id(cls) -> Mapped[int]:
        return mapped_column(ForeignKey("account.id"), nullable=False, index=True)


class Task(RecordMixin, Base):
    __tablename__ = "todos"
    record_type = RecordType.TODO

    due_date: Mapped[dt.date | None] = mapped_column(Date)
    description: Mapped[str | None] = mapped_column(Text)
    is_completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    priority: Mapped[TaskPriority] = mapped_column(
        SQLEnum(TaskPriority, native_enum=False),
        nullable=False,
        default=TaskPriority.MEDIUM,
    )


class HealthEntry(RecordMixin, Base):
    __tablename__ = "health_records"
    record_type = RecordType.HEALTH

    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    type: Mapped[HealthEntryType] = mapped_column(
        SQLEnum(HealthEntryType, native_enum=False),
        nullable=False,
        default=HealthEntryType.OTHER,
    )
    notes: Mapped[str | None] = mapped_column(Text)


class Note(RecordMixin, Base):
    __tablename__ = "notes"
    record_type = RecordType.NOTE

    content: Mapped[str | None] = mapped_column(Text)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class FinancialEntry(RecordMixin, Base):
    __tablename__ = "financial_records"
    record_type = RecordType.FINANCE

    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[FinancialEntryType] = mapped_column(
        SQLEnum(FinancialEntryType, native_enum=False),
        nullable=False,
        default=FinancialEntryType.EXPENSE,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)


RECORD_MODELS: dict[RecordType, Type[RecordMixin]] = {
    RecordType.TODO: Task,
    RecordType.HEALTH: HealthEntry,
    RecordType.NOTE: Note,
    RecordType.FINANCE: FinancialEntry,
}


def model_for(record_type: RecordType | str) -> Type[RecordMixin]:
    """Return the ORM class storing records of ``record_type``."""

    return RECORD_MODELS[RecordType(record_type)]
