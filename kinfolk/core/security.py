"""JWT helpers identifying the account behind a request."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import jwt
from fastapi import HTTPException, Request, status
from jwt import ExpiredSignatureError, InvalidTokenError

from kinfolk.core.config import AuthSettings, get_settings
from kinfolk.core.logger import get_logger

LOGGER = get_logger(__name__)

DEV_ACCOUNT_HEADER = "X-Account-Id"


class AuthenticationError(Exception):
    """Raised when authentication or token validation fails."""


@dataclass(frozen=True, slots=True)
class AuthenticatedAccount:
    """Representation of the authenticated principal."""

    account_id: int
    email: str | None = None


class SecurityProvider:
    """Issue and verify JWT access tokens carrying an account id."""

    def __init__(self, settings: AuthSettings) -> None:
        self._settings = settings

    @property
    def cookie_name(self) -> str:
        return "access_token"

    @property
    def is_enabled(self) -> bool:
        return self._settings.enabled

    def create_access_token(self, account: AuthenticatedAccount) -> str:
        """Create a signed JWT for the authenticated account."""

        now = datetime.now(tz=timezone.utc)
        expires = now + timedelta(minutes=self._settings.access_token_expire_minutes)
        payload: dict[str, object] = {
            "sub": str(account.account_id),
            "iat": int(now.timestamp()),
            "exp": int(expires.timestamp()),
        }
        if account.email is not None:
            payload["email"] = account.email
        return jwt.encode(payload, self._settings.secret_key, algorithm=self._settings.algorithm)

    def decode_token(self, token: str) -> AuthenticatedAccount:
        """Decode a JWT and return the corresponding ``AuthenticatedAccount``."""

        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError as exc:
            raise AuthenticationError("Token expired") from exc
        except InvalidTokenError as exc:
            raise AuthenticationError("Invalid token") from exc

        subject = payload.get("sub")
        try:
            account_id = int(subject)
        except (TypeError, ValueError) as exc:
            raise AuthenticationError("Token subject claim invalid") from exc

        email = payload.get("email")
        return AuthenticatedAccount(
            account_id=account_id,
            email=email if isinstance(email, str) else None,
        )


@lru_cache(maxsize=1)
def get_security_provider() -> SecurityProvider:
    """Return a cached security provider instance."""

    return SecurityProvider(get_settings().auth)


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value:
        return value.strip()
    return None


def get_authenticated_account(request: Request) -> AuthenticatedAccount:
    """Resolve the principal from the bearer token (or cookie) of ``request``."""

    security = get_security_provider()
    if not security.is_enabled:
        raw_id = request.headers.get(DEV_ACCOUNT_HEADER)
        if raw_id is None or not raw_id.isdigit():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"{DEV_ACCOUNT_HEADER} header required",
            )
        return AuthenticatedAccount(account_id=int(raw_id))

    token = _bearer_token(request) or request.cookies.get(security.cookie_name)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    try:
        return security.decode_token(token)
    except AuthenticationError as exc:
        LOGGER.info("Failed to decode access token", extra={"reason": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)
        ) from exc


__all__ = [
    "AuthenticatedAccount",
    "AuthenticationError",
    "SecurityProvider",
    "get_authenticated_account",
    "get_security_provider",
]
