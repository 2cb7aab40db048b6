"""Tests for environment-driven settings and the app factory."""
from __future__ import annotations

import pytest

from shootic import create_app
from shootic.config import Config, TestingConfig
from shootic.tokens import InvalidToken


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "SECRET_KEY",
        "JWT_SECRET",
        "DATABASE_URL",
        "ALLOWED_ORIGINS",
        "WEEKEND_DAYS",
        "BUSINESS_HOURS_START",
        "TOKEN_LIFETIME_SECONDS",
        "REGISTRATION_OPEN",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_from_env_reads_overrides(clean_env) -> None:
    clean_env.setenv("SECRET_KEY", "from-env")
    clean_env.setenv("DATABASE_URL", "sqlite:///other.db")
    clean_env.setenv("ALLOWED_ORIGINS", "https://shootic.example, https://admin.shootic.example")
    clean_env.setenv("WEEKEND_DAYS", "6")
    clean_env.setenv("BUSINESS_HOURS_START", "10")
    clean_env.setenv("TOKEN_LIFETIME_SECONDS", "3600")
    clean_env.setenv("REGISTRATION_OPEN", "0")
    clean_env.setenv("LOG_LEVEL", "debug")

    config = Config.from_env()

    assert config.SECRET_KEY == "from-env"
    assert config.SQLALCHEMY_DATABASE_URI == "sqlite:///other.db"
    assert config.CORS_ORIGINS == ("https://shootic.example", "https://admin.shootic.example")
    assert config.WEEKEND_DAYS == (6,)
    assert config.BUSINESS_HOURS_START == 10
    assert config.BUSINESS_HOURS_END == 18
    assert config.TOKEN_LIFETIME_SECONDS == 3600
    assert config.REGISTRATION_OPEN is False
    assert config.LOG_LEVEL == "DEBUG"


def test_jwt_secret_is_accepted(clean_env) -> None:
    clean_env.setenv("JWT_SECRET", "legacy-name")

    assert Config.from_env().SECRET_KEY == "legacy-name"


def test_missing_secret_warns(clean_env) -> None:
    with pytest.warns(RuntimeWarning):
        config = Config.from_env()

    assert config.SECRET_KEY == Config.SECRET_KEY


def test_config_is_immutable() -> None:
    config = TestingConfig()

    with pytest.raises(AttributeError):
        config.SECRET_KEY = "changed"
    assert config.with_overrides(BUSINESS_HOURS_END=20).BUSINESS_HOURS_END == 20


def test_create_app_accepts_mapping() -> None:
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "mapping-secret",
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    })

    assert app.config["SECRET_KEY"] == "mapping-secret"
    assert app.config["BUSINESS_HOURS_START"] == 9
    assert app.extensions["token_service"].lifetime_seconds == 86400


def test_each_app_signs_with_its_own_secret() -> None:
    first = create_app(TestingConfig().with_overrides(SECRET_KEY="one"))
    second = create_app(TestingConfig().with_overrides(SECRET_KEY="two"))

    token = first.extensions["token_service"].issue(1, "a@example.com", "admin").token

    with pytest.raises(InvalidToken):
        second.extensions["token_service"].verify(token)
