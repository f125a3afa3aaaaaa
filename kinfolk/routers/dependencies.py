"""Request-scoped dependencies shared by the API routers."""
from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from kinfolk.core.logger import get_logger
from kinfolk.core.security import AuthenticatedAccount, get_authenticated_account
from kinfolk.db.session import get_default_sessionmaker
from kinfolk.models import Account
from kinfolk.repositories import AccountsRepository
from kinfolk.services import (
    CollaborationService,
    PeopleService,
    PersonViewComposer,
    RecordsService,
    SharingService,
)

LOGGER = get_logger(__name__)


def get_db_session() -> Generator[Session, None, None]:
    """Yield a database session for the request lifecycle."""

    session = get_default_sessionmaker()()
    try:
        yield session
    finally:
        session.close()


def get_current_account(
    principal: AuthenticatedAccount = Depends(get_authenticated_account),
    session: Session = Depends(get_db_session),
) -> Account:
    """Load the account behind the request."""

    account = AccountsRepository(session).get(principal.account_id)
    if account is None:
        LOGGER.info("Token names an unknown account", extra={"account_id": principal.account_id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown account")
    return account


def get_people_service(session: Session = Depends(get_db_session)) -> PeopleService:
    return PeopleService(session)


def get_person_view_composer(session: Session = Depends(get_db_session)) -> PersonViewComposer:
    return PersonViewComposer(session)


def get_sharing_service(session: Session = Depends(get_db_session)) -> SharingService:
    return SharingService(session)


def get_records_service(session: Session = Depends(get_db_session)) -> RecordsService:
    return RecordsService(session)


def get_collaboration_service(
    session: Session = Depends(get_db_session),
) -> CollaborationService:
    return CollaborationService(session)
