"""Configuration for the kinfolk service, loaded from the environment."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_FALSE_VALUES = {"0", "false", "False", "no"}


@dataclass(slots=True)
class DatabaseSettings:
    """Connection details for the relational store."""

    driver: str
    host: str
    port: int
    user: str
    password: str
    name: str
    url_override: str | None = None

    @property
    def sqlalchemy_url(self) -> str:
        """Build a SQLAlchemy compatible URL."""

        if self.url_override:
            return self.url_override
        if self.password:
            credentials = f"{self.user}:{self.password}"
        else:
            credentials = self.user
        return f"{self.driver}://{credentials}@{self.host}:{self.port}/{self.name}"


@dataclass(slots=True)
class AuthSettings:
    """Access token settings loaded from environment variables."""

    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    enabled: bool = True


@dataclass(slots=True)
class InviteSettings:
    """Where shareable invite links point to."""

    base_url: str
    path_prefix: str = "/invite"

    def url_for(self, token: str) -> str:
        return f"{self.base_url.rstrip('/')}{self.path_prefix}/{token}"


@dataclass(slots=True)
class Settings:
    """Top-level application configuration container."""

    database: DatabaseSettings
    auth: AuthSettings
    invites: InviteSettings
    sqlalchemy_echo: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration values from environment variables."""

        def _get_env(name: str, default: str) -> str:
            return os.getenv(name, default)

        db = DatabaseSettings(
            driver=_get_env("DB_DRIVER", "mysql+pymysql"),
            host=_get_env("DB_HOST", "127.0.0.1"),
            port=int(_get_env("DB_PORT", "3306")),
            user=_get_env("DB_USER", "kinfolk"),
            password=_get_env("DB_PASSWORD", "kinfolk"),
            name=_get_env("DB_NAME", "kinfolk"),
            url_override=os.getenv("DATABASE_URL") or None,
        )
        auth = AuthSettings(
            secret_key=_get_env("JWT_SECRET_KEY", "change-me"),
            algorithm=_get_env("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(_get_env("JWT_EXPIRE_MINUTES", "120")),
            enabled=_get_env("AUTH_ENABLED", "1") not in _FALSE_VALUES,
        )
        invites = InviteSettings(base_url=_get_env("INVITE_BASE_URL", "http://localhost:8000"))
        echo_flag = _get_env("SQLALCHEMY_ECHO", "0")
        return cls(
            database=db,
            auth=auth,
            invites=invites,
            sqlalchemy_echo=echo_flag not in _FALSE_VALUES,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    settings = Settings.from_env()

    # Import locally to avoid circular dependencies during module import time.
    from .logger import get_logger

    logger = get_logger(__name__)
    logger.debug(
        "Settings initialised",
        extra={
            "sqlalchemy_echo": settings.sqlalchemy_echo,
            "database": {
                "driver": settings.database.driver,
                "host": settings.database.host,
                "port": settings.database.port,
                "name": settings.database.name,
                "user": settings.database.user,
                "override": settings.database.url_override is not None,
            },
            "auth": {
                "token_ttl": settings.auth.access_token_expire_minutes,
                "enabled": settings.auth.enabled,
            },
            "invite_base_url": settings.invites.base_url,
        },
    )
    return settings
