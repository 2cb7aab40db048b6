"""Application settings loaded from the environment."""
from __future__ import annotations

import os
import warnings
from dataclasses import dataclass, replace

from dotenv import load_dotenv

DEFAULT_ORIGINS = (
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
)


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name)
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Config:
    """Immutable settings passed to ``create_app``.

    Flask copies every upper-case attribute into ``app.config``; nothing reads
    the environment after the app has been built.
    """

    SECRET_KEY: str = "insecure-dev-key-change-me"
    TOKEN_LIFETIME_SECONDS: int = 24 * 60 * 60
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///shootic.db"
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    CORS_ORIGINS: tuple[str, ...] = DEFAULT_ORIGINS
    BUSINESS_HOURS_START: int = 9
    BUSINESS_HOURS_END: int = 18
    SLOT_INTERVAL_MINUTES: int = 60
    # Python weekday numbers (Monday=0).
    WEEKEND_DAYS: tuple[int, ...] = (5, 6)
    # When false, only a super admin (or the very first account) may register admins.
    REGISTRATION_OPEN: bool = True
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    TESTING: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        secret = os.getenv("SECRET_KEY") or os.getenv("JWT_SECRET")
        if not secret:
            warnings.warn(
                "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION",
                RuntimeWarning,
                stacklevel=2,
            )
            secret = cls.SECRET_KEY

        weekend = _list_env("WEEKEND_DAYS", ())
        return cls(
            SECRET_KEY=secret,
            TOKEN_LIFETIME_SECONDS=_int_env("TOKEN_LIFETIME_SECONDS", cls.TOKEN_LIFETIME_SECONDS),
            SQLALCHEMY_DATABASE_URI=os.getenv("DATABASE_URL", cls.SQLALCHEMY_DATABASE_URI),
            CORS_ORIGINS=_list_env("ALLOWED_ORIGINS", DEFAULT_ORIGINS),
            BUSINESS_HOURS_START=_int_env("BUSINESS_HOURS_START", cls.BUSINESS_HOURS_START),
            BUSINESS_HOURS_END=_int_env("BUSINESS_HOURS_END", cls.BUSINESS_HOURS_END),
            SLOT_INTERVAL_MINUTES=_int_env("SLOT_INTERVAL_MINUTES", cls.SLOT_INTERVAL_MINUTES),
            WEEKEND_DAYS=tuple(int(day) for day in weekend) if weekend else cls.WEEKEND_DAYS,
            LOG_LEVEL=os.getenv("LOG_LEVEL", cls.LOG_LEVEL).upper(),
            REGISTRATION_OPEN=os.getenv("REGISTRATION_OPEN", "1") in {"1", "true", "True"},
            DEBUG=os.getenv("FLASK_DEBUG", "0") in {"1", "true", "True"},
        )

    def with_overrides(self, **overrides: object) -> "Config":
        return replace(self, **overrides)


@dataclass(frozen=True)
class TestingConfig(Config):
    SECRET_KEY: str = "test-secret-key"
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///:memory:"
    TESTING: bool = True
    LOG_LEVEL: str = "WARNING"
