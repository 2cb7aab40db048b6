"""Staff account registration, login and management."""
from __future__ import annotations

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from .errors import Conflict, InternalError, NotFound, Unauthorized, ValidationError
from .extensions import db
from .filters import AdminFilter, paginate
from .models import (Admin, Booking, BookingNote, Contact, ContactNote,
                     utc_now)
from .tokens import IssuedToken, get_token_service
from .validators import MIN_PASSWORD_LENGTH, normalize_email

INVALID_CREDENTIALS = "Invalid credentials"

# Compared against when the email is unknown so both failure paths hash once.
_DUMMY_HASH = generate_password_hash("shootic-placeholder-password")


def _commit(failure: str) -> None:
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict("Admin with this email already exists") from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure, exc_info=exc)
        raise InternalError(failure) from exc


def find_by_email(email: str) -> Admin | None:
    return Admin.query.filter(func.lower(Admin.email) == normalize_email(email)).first()


def get_admin(admin_id: int) -> Admin:
    admin = db.session.get(Admin, admin_id)
    if admin is None:
        raise NotFound("Admin not found")
    return admin


def issue_token(admin: Admin) -> IssuedToken:
    return get_token_service().issue(admin.admin_id, admin.email, admin.role)


def register(
    name: str,
    email: str,
    password: str,
    role: str = "admin",
    permissions: list[str] | None = None,
    phone: str | None = None,
) -> tuple[Admin, IssuedToken]:
    email = normalize_email(email)
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "password", "message": f"password must be at least {MIN_PASSWORD_LENGTH} characters long"}],
        )
    if find_by_email(email) is not None:
        raise Conflict("Admin with this email already exists")

    admin = Admin(
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        role=role or "admin",
        permissions=list(permissions or []),
        phone=phone,
    )
    db.session.add(admin)
    _commit("Failed to register admin")

    current_app.logger.info("Registered admin %s with role %s", admin.admin_id, admin.role)
    return admin, issue_token(admin)


def login(email: str, password: str) -> tuple[Admin, IssuedToken]:
    admin = find_by_email(email)
    if admin is None:
        check_password_hash(_DUMMY_HASH, password or "")
        current_app.logger.info("Failed login for %s", normalize_email(email))
        raise Unauthorized(INVALID_CREDENTIALS)

    if not check_password_hash(admin.password_hash, password or ""):
        current_app.logger.info("Failed login for %s", admin.email)
        raise Unauthorized(INVALID_CREDENTIALS)

    if not admin.is_active:
        raise Unauthorized("Account is deactivated")

    admin.last_login_at = utc_now()
    _commit("Failed to update last login timestamp")
    return admin, issue_token(admin)


def change_password(admin_id: int, current_password: str, new_password: str) -> None:
    admin = get_admin(admin_id)
    if not check_password_hash(admin.password_hash, current_password or ""):
        raise ValidationError("Current password is incorrect")
    if len(new_password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            "Validation failed",
            errors=[{"field": "newPassword", "message": f"newPassword must be at least {MIN_PASSWORD_LENGTH} characters long"}],
        )

    admin.password_hash = generate_password_hash(new_password)
    _commit("Failed to change password")
    current_app.logger.info("Admin %s changed password", admin.admin_id)


def update_profile(
    admin_id: int,
    name: str | None = None,
    phone: str | None = None,
    profile_image: str | None = None,
) -> Admin:
    admin = get_admin(admin_id)
    if name:
        admin.name = name
    if phone:
        admin.phone = phone
    if profile_image:
        admin.profile_image = profile_image
    _commit("Failed to update profile")
    return admin


def list_admins(filters: AdminFilter, page: int = 1, limit: int = 10) -> tuple[list[Admin], dict[str, int]]:
    query = filters.apply(Admin.query).order_by(Admin.created_at.desc())
    return paginate(query, page, limit)


def update_admin(admin_id: int, updates: dict[str, object]) -> Admin:
    """Apply super-admin edits; email changes keep the uniqueness check."""
    admin = get_admin(admin_id)

    new_email = updates.get("email")
    if new_email and new_email != admin.email:
        existing = find_by_email(str(new_email))
        if existing is not None and existing.admin_id != admin.admin_id:
            raise Conflict("Admin with this email already exists")

    for field in ("name", "email", "role", "is_active", "permissions", "phone"):
        if field in updates:
            setattr(admin, field, updates[field])

    _commit("Failed to update admin")
    current_app.logger.info("Admin %s updated (%s)", admin.admin_id, ", ".join(sorted(updates)))
    return admin


def _detach_references(admin_id: int) -> None:
    Booking.query.filter(Booking.photographer_id == admin_id).update(
        {Booking.photographer_id: None}, synchronize_session=False
    )
    BookingNote.query.filter(BookingNote.created_by_id == admin_id).update(
        {BookingNote.created_by_id: None}, synchronize_session=False
    )
    ContactNote.query.filter(ContactNote.created_by_id == admin_id).update(
        {ContactNote.created_by_id: None}, synchronize_session=False
    )
    for column in (Contact.assigned_to_id, Contact.read_by_id, Contact.response_sent_by_id):
        Contact.query.filter(column == admin_id).update({column: None}, synchronize_session=False)


def delete_admin(admin_id: int, acting_admin_id: int) -> None:
    admin = get_admin(admin_id)
    if admin.admin_id == acting_admin_id:
        raise ValidationError("Cannot delete your own account")

    _detach_references(admin.admin_id)
    db.session.delete(admin)
    _commit("Failed to delete admin")
    current_app.logger.info("Admin %s deleted by %s", admin_id, acting_admin_id)
