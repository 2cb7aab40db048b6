"""Signed, time-limited session tokens for staff accounts."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from flask import current_app
from itsdangerous import BadData, SignatureExpired, URLSafeTimedSerializer

TOKEN_SALT = "admin-auth-token"


class InvalidToken(Exception):
    """Token signature or format is wrong."""


class TokenExpired(Exception):
    """Token was valid but its lifetime has passed."""


class TokenClaims(NamedTuple):
    admin_id: int
    email: str
    role: str


class IssuedToken(NamedTuple):
    token: str
    expires_at: datetime


class TokenService:
    """Issue and verify bearer tokens carrying admin identity and role.

    The signing key and lifetime are fixed at construction; one instance is
    built per app from its configuration.
    """

    def __init__(self, secret_key: str, lifetime_seconds: int = 24 * 60 * 60):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._lifetime = int(lifetime_seconds)
        self._serializer = URLSafeTimedSerializer(secret_key, salt=TOKEN_SALT)

    @property
    def lifetime_seconds(self) -> int:
        return self._lifetime

    def issue(self, admin_id: int, email: str, role: str) -> IssuedToken:
        issued_at = datetime.now(timezone.utc)
        expires_at = issued_at + timedelta(seconds=self._lifetime)
        token = self._serializer.dumps({
            "admin_id": admin_id,
            "email": email,
            "role": role,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        })
        return IssuedToken(token=token, expires_at=expires_at)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = self._serializer.loads(token, max_age=self._lifetime)
        except SignatureExpired as exc:
            raise TokenExpired("Token expired") from exc
        except BadData as exc:
            raise InvalidToken("Invalid token") from exc

        try:
            return TokenClaims(
                admin_id=int(payload["admin_id"]),
                email=str(payload["email"]),
                role=str(payload["role"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidToken("Invalid token") from exc


def get_token_service() -> TokenService:
    return current_app.extensions["token_service"]
