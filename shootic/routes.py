"""Public and authentication HTTP routes for the Shootic backend."""
from __future__ import annotations

from flask import Blueprint, Flask, current_app, jsonify, request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import bookings, contacts, credentials
from .auth import current_admin, optional_auth, require_auth
from .availability import business_hours, list_available_slots
from .errors import Forbidden, InternalError, ValidationError
from .extensions import db
from .models import Admin
from .validators import (PayloadReader, booking_fields, contact_fields,
                         parse_date, registration_fields)

bp = Blueprint("api", __name__)


def respond(data=None, message: str | None = None, status: int = 200, **extra):
    """Wrap ``data`` in the ``{success, message, data}`` envelope."""
    body: dict[str, object] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def _token_payload(admin, issued) -> dict[str, object]:
    return {
        "token": issued.token,
        "expiresAt": issued.expires_at.isoformat(),
        "admin": admin.to_dict(),
    }


def register_routes(app: Flask) -> None:
    from .routes_admin import bp_admin

    app.register_blueprint(bp)
    app.register_blueprint(bp_admin)


@bp.get("/health")
def health_check() -> tuple[dict[str, object], int]:
    """
    Expose a simple uptime check endpoint.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy and running.
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
    """
    return jsonify({"status": "ok"}), 200


@bp.get("/db-health")
def database_health() -> tuple[dict[str, object], int]:
    """Check connectivity to the configured database.
    ---
    tags:
      - Health
    responses:
      200:
        description: Database connection is ok.
      500:
        description: Database connection failed.
    """
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        current_app.logger.exception("Database connectivity check failed", exc_info=exc)
        return jsonify({"database": "unavailable"}), 500

    return jsonify({"database": "ok"}), 200


@bp.post("/auth/register")
@optional_auth
def register_admin() -> tuple[dict[str, object], int]:
    """Create a staff account and return a signed token.
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name, email, password]
          properties:
            name:
              type: string
            email:
              type: string
            password:
              type: string
              minLength: 6
            role:
              type: string
              enum: [admin, super_admin]
            phone:
              type: string
            permissions:
              type: array
              items:
                type: string
    responses:
      201:
        description: Account created, token issued.
      400:
        description: Validation failure or email already registered.
      403:
        description: Caller may not create an account with the requested role.
    """
    fields = registration_fields(request.get_json(silent=True))

    caller = current_admin()
    bootstrap = db.session.query(Admin.admin_id).first() is None
    if caller is None and not bootstrap and not current_app.config.get("REGISTRATION_OPEN", True):
        raise Forbidden("Registration is closed")
    if fields["role"] == "super_admin" and not bootstrap:
        if caller is None or caller.role != "super_admin":
            raise Forbidden("Only a super admin can create super admin accounts")

    admin, issued = credentials.register(
        fields["name"],
        fields["email"],
        fields["password"],
        role=fields["role"],
        permissions=fields["permissions"],
        phone=fields["phone"],
    )
    return respond(_token_payload(admin, issued), "Admin registered successfully", 201)


@bp.post("/auth/login")
def login() -> tuple[dict[str, object], int]:
    """Authenticate with email and password.
    ---
    tags:
      - Auth
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password]
          properties:
            email:
              type: string
            password:
              type: string
    responses:
      200:
        description: Login succeeded, token issued.
      400:
        description: Missing email or password.
      401:
        description: Invalid credentials or deactivated account.
    """
    payload = request.get_json(silent=True) or {}
    reader = PayloadReader(payload)
    email = reader.text("email", required=True)
    reader.text("password", required=True)
    reader.raise_if_invalid()

    admin, issued = credentials.login(email, str(payload["password"]))
    current_app.logger.info("Admin %s logged in", admin.admin_id)
    return respond(_token_payload(admin, issued), "Login successful")


@bp.get("/auth/me")
@require_auth()
def me() -> tuple[dict[str, object], int]:
    return respond(current_admin().to_dict())


@bp.post("/auth/logout")
@require_auth()
def logout() -> tuple[dict[str, object], int]:
    # Tokens are stateless; the client simply discards its copy.
    return respond(message="Logged out successfully")


@bp.get("/bookings/available-slots")
def available_slots() -> tuple[dict[str, object], int]:
    """List the open booking slots for one day.
    ---
    tags:
      - Bookings
    parameters:
      - name: date
        in: query
        type: string
        format: date
        required: true
        description: Day to inspect, YYYY-MM-DD
    responses:
      200:
        description: Open slots in chronological order; empty on weekends.
      400:
        description: Missing or malformed date.
    """
    raw = request.args.get("date")
    if not raw:
        raise ValidationError("Date is required", errors=[{"field": "date", "message": "date is required"}])
    try:
        target = parse_date(raw)
    except ValueError as exc:
        raise ValidationError(str(exc), errors=[{"field": "date", "message": str(exc)}]) from exc

    try:
        slots = list_available_slots(target)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Failed to load bookings for %s", target, exc_info=exc)
        raise InternalError("Failed to get available slots") from exc

    return respond({
        "date": target.isoformat(),
        "availableSlots": slots,
        "businessHours": business_hours(),
    })


@bp.post("/bookings")
@optional_auth
def create_booking() -> tuple[dict[str, object], int]:
    """Book a photography session.
    ---
    tags:
      - Bookings
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [customerName, customerEmail, customerPhone, serviceType,
                     package, date, time, duration, location, price]
    responses:
      201:
        description: Booking created with status pending.
      400:
        description: Validation failure or the slot is already taken.
    """
    payload = request.get_json(silent=True)
    fields = booking_fields(payload)

    # Only staff may pre-assign a photographer; anonymous callers have it ignored.
    if current_admin() is not None:
        reader = PayloadReader(payload)
        photographer_id = reader.integer("photographerId", minimum=1)
        reader.raise_if_invalid()
        if photographer_id is not None:
            fields["photographer"] = bookings.get_photographer(photographer_id)

    booking = bookings.create_booking(fields)
    return respond(booking.to_dict(), "Booking created successfully", 201)


@bp.post("/contact")
def submit_contact() -> tuple[dict[str, object], int]:
    """Submit the public contact form.
    ---
    tags:
      - Contacts
    responses:
      201:
        description: Message stored; priority derived from its text.
      400:
        description: Validation failure.
    """
    fields = contact_fields(request.get_json(silent=True))
    contact = contacts.create_contact(
        fields,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
        referrer=request.headers.get("Referer"),
    )
    return respond(contact.to_dict(), "Message sent successfully. We'll get back to you soon!", 201)
