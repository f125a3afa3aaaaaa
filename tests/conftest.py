"""Shared fixtures: an in-memory database and factories for accounts and people."""
from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from sqlalchemy import event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from kinfolk.db import get_sessionmaker
from kinfolk.models import Account, Base, Person, SharingPreference


@pytest.fixture()
def session() -> Iterator[Session]:
    """Provide an in-memory database session for each test."""

    factory = get_sessionmaker(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    engine = factory.kw["bind"]

    # pysqlite needs transactions emitted explicitly for SAVEPOINT to work.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(connection) -> None:
        connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    with factory() as session:
        yield session
    engine.dispose()


@pytest.fixture()
def make_account(session: Session) -> Callable[..., Account]:
    def _make(email: str, display_name: str | None = None, **fields: object) -> Account:
        account = Account(email=email, display_name=display_name, **fields)
        session.add(account)
        session.commit()
        return account

    return _make


@pytest.fixture()
def make_person(session: Session) -> Callable[..., Person]:
    def _make(
        owner: Account,
        name: str,
        *,
        email: str | None = None,
        relation: str = "",
        sharing_preference: SharingPreference = SharingPreference.ASK_EVERY_TIME,
        **fields: object,
    ) -> Person:
        person = Person(
            owner_account_id=owner.id,
            name=name,
            email=email,
            relation=relation,
            sharing_preference=sharing_preference,
            **fields,
        )
        session.add(person)
        session.commit()
        return person

    return _make


@pytest.fixture()
def alice(make_account) -> Account:
    return make_account("alice@example.com", "Alice")


@pytest.fixture()
def bob(make_account) -> Account:
    return make_account("b@x.com", "Bob")


@pytest.fixture()
def carol(make_account) -> Account:
    return make_account("carol@example.com", "Carol")
