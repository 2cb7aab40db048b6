"""Bearer-token authentication and role gating for staff endpoints."""
from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from .errors import Forbidden, Unauthorized
from .extensions import db
from .models import Admin
from .tokens import InvalidToken, TokenExpired, get_token_service

STAFF_ROLES = ("admin", "super_admin")


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _resolve_admin(token: str) -> Admin:
    try:
        claims = get_token_service().verify(token)
    except TokenExpired as exc:
        raise Unauthorized("Token expired") from exc
    except InvalidToken as exc:
        raise Unauthorized("Invalid token") from exc

    # Tokens cannot be revoked, so a deactivated account is caught here.
    admin = db.session.get(Admin, claims.admin_id)
    if admin is None or not admin.is_active:
        raise Unauthorized("Invalid or inactive admin account")
    return admin


def _attach(admin: Admin | None) -> None:
    g.admin = admin
    g.admin_id = admin.admin_id if admin else None
    g.admin_role = admin.role if admin else None


def authenticate() -> Admin:
    """Resolve the acting admin from the request or raise ``Unauthorized``."""
    token = _bearer_token()
    if token is None:
        raise Unauthorized("Access token required")
    admin = _resolve_admin(token)
    _attach(admin)
    return admin


def require_auth(*roles: str):
    """Decorator: the caller must hold a valid token and one of ``roles``.

    With no roles given, any staff role is accepted.
    """
    allowed = roles or STAFF_ROLES

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            admin = authenticate()
            if admin.role not in allowed:
                current_app.logger.warning(
                    "Admin %s with role %s denied access to %s", admin.admin_id, admin.role, request.path
                )
                raise Forbidden("Insufficient permissions")
            return view(*args, **kwargs)

        return wrapped

    return decorator


def optional_auth(view):
    """Attach the admin when a usable token is sent; never fail the request."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        admin = None
        token = _bearer_token()
        if token is not None:
            try:
                admin = _resolve_admin(token)
            except Unauthorized:
                admin = None
        _attach(admin)
        return view(*args, **kwargs)

    return wrapped


def current_admin() -> Admin | None:
    return g.get("admin")


def current_admin_id() -> int | None:
    return g.get("admin_id")
