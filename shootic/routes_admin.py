"""Staff-only routes: dashboard, bookings, contacts and account management."""
from __future__ import annotations

from flask import Blueprint, request

from . import bookings, contacts, credentials, stats
from .auth import current_admin, current_admin_id, require_auth
from .errors import ValidationError
from .filters import AdminFilter, BookingFilter, ContactFilter, page_args
from .models import Admin, Booking, Contact, utc_now
from .routes import respond
from .validators import (PayloadReader, admin_updates, booking_fields,
                         booking_status, contact_updates, reschedule_fields)

bp_admin = Blueprint("api_admin", __name__)


def _page() -> tuple[int, int]:
    try:
        return page_args(request.args)
    except ValueError as exc:
        raise ValidationError("page and limit must be integers") from exc


def _filters(filter_cls):
    try:
        return filter_cls.from_args(request.args)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def _body() -> dict:
    return request.get_json(silent=True) or {}


def _today():
    return utc_now().date()


# DASHBOARD
@bp_admin.get("/admin/dashboard")
@require_auth()
def dashboard() -> tuple[dict[str, object], int]:
    """Headline numbers, revenue, recent activity and six-month trends.
    ---
    tags:
      - Dashboard
    security:
      - Bearer: []
    responses:
      200:
        description: Dashboard aggregates
      401:
        description: Missing or invalid token
    """
    data = stats.dashboard(Booking.query.all(), Contact.query.all(), _today())
    return respond(data)


@bp_admin.get("/admin/stats")
@require_auth()
def overall_stats() -> tuple[dict[str, object], int]:
    today = _today()
    return respond({
        "bookings": stats.booking_overview(Booking.query.all(), today),
        "contacts": stats.contact_overview(Contact.query.all(), today),
        "admins": stats.admin_overview(Admin.query.all()),
    })


# PROFILE
@bp_admin.get("/admin/profile")
@require_auth()
def get_profile() -> tuple[dict[str, object], int]:
    return respond(current_admin().to_dict())


@bp_admin.put("/admin/profile")
@require_auth()
def update_profile() -> tuple[dict[str, object], int]:
    reader = PayloadReader(_body())
    name = reader.text("name")
    phone = reader.text("phone")
    profile_image = reader.text("profileImage")
    reader.raise_if_invalid()

    admin = credentials.update_profile(current_admin_id(), name=name, phone=phone, profile_image=profile_image)
    return respond(admin.to_dict(), "Profile updated successfully")


@bp_admin.put("/admin/change-password")
@require_auth()
def change_password() -> tuple[dict[str, object], int]:
    """Change the caller's password.
    ---
    tags:
      - Profile
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [currentPassword, newPassword]
          properties:
            currentPassword:
              type: string
            newPassword:
              type: string
              minLength: 6
    responses:
      200:
        description: Password changed
      400:
        description: Current password incorrect or new password too short
    """
    payload = _body()
    reader = PayloadReader(payload)
    reader.text("currentPassword", required=True)
    reader.text("newPassword", required=True)
    reader.raise_if_invalid()

    credentials.change_password(
        current_admin_id(), str(payload["currentPassword"]), str(payload["newPassword"])
    )
    return respond(message="Password changed successfully")


@bp_admin.post("/admin/logout")
@require_auth()
def logout() -> tuple[dict[str, object], int]:
    return respond(message="Logged out successfully")


# ADMIN MANAGEMENT
@bp_admin.get("/admin/admins")
@require_auth("super_admin")
def list_admins() -> tuple[dict[str, object], int]:
    page, limit = _page()
    admins, pagination = credentials.list_admins(_filters(AdminFilter), page, limit)
    return respond({"admins": [a.to_dict() for a in admins], "pagination": pagination})


@bp_admin.get("/admin/admins/<int:admin_id>")
@require_auth("super_admin")
def get_admin(admin_id: int) -> tuple[dict[str, object], int]:
    return respond(credentials.get_admin(admin_id).to_dict())


@bp_admin.put("/admin/admins/<int:admin_id>")
@require_auth("super_admin")
def update_admin(admin_id: int) -> tuple[dict[str, object], int]:
    admin = credentials.update_admin(admin_id, admin_updates(_body()))
    return respond(admin.to_dict(), "Admin updated successfully")


@bp_admin.delete("/admin/admins/<int:admin_id>")
@require_auth("super_admin")
def delete_admin(admin_id: int) -> tuple[dict[str, object], int]:
    credentials.delete_admin(admin_id, current_admin_id())
    return respond(message="Admin deleted successfully")


# BOOKINGS
@bp_admin.get("/admin/bookings")
@require_auth()
def list_bookings() -> tuple[dict[str, object], int]:
    """List bookings with filters and pagination.
    ---
    tags:
      - Bookings
    parameters:
      - name: status
        in: query
        type: string
      - name: serviceType
        in: query
        type: string
      - name: dateFrom
        in: query
        type: string
        format: date
      - name: dateTo
        in: query
        type: string
        format: date
      - name: search
        in: query
        type: string
        description: Matches customer name, email or phone
      - name: page
        in: query
        type: integer
        default: 1
      - name: limit
        in: query
        type: integer
        default: 10
        maximum: 100
    responses:
      200:
        description: Bookings with pagination metadata
      400:
        description: Invalid parameters
    """
    page, limit = _page()
    items, pagination = bookings.list_bookings(_filters(BookingFilter), page, limit)
    return respond({"bookings": [b.to_dict() for b in items], "pagination": pagination})


@bp_admin.get("/admin/bookings/stats/overview")
@require_auth()
def booking_stats() -> tuple[dict[str, object], int]:
    return respond(stats.booking_overview(Booking.query.all(), _today()))


@bp_admin.get("/admin/bookings/<int:booking_id>")
@require_auth()
def get_booking(booking_id: int) -> tuple[dict[str, object], int]:
    return respond(bookings.get_booking(booking_id).to_dict())


@bp_admin.put("/admin/bookings/<int:booking_id>")
@require_auth()
def update_booking(booking_id: int) -> tuple[dict[str, object], int]:
    payload = _body()
    fields = booking_fields(payload, partial=True)
    reader = PayloadReader(payload)
    photographer_id = reader.integer("photographerId", minimum=1)
    reader.raise_if_invalid()

    booking = bookings.update_booking(booking_id, fields, photographer_id=photographer_id)
    return respond(booking.to_dict(), "Booking updated successfully")


@bp_admin.delete("/admin/bookings/<int:booking_id>")
@require_auth()
def delete_booking(booking_id: int) -> tuple[dict[str, object], int]:
    bookings.delete_booking(booking_id)
    return respond(message="Booking deleted successfully")


@bp_admin.patch("/admin/bookings/<int:booking_id>/status")
@bp_admin.patch("/bookings/<int:booking_id>/status")
@require_auth()
def update_booking_status(booking_id: int) -> tuple[dict[str, object], int]:
    """Move a booking through its status lifecycle.
    ---
    tags:
      - Bookings
    parameters:
      - name: booking_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status:
              type: string
              enum: [pending, confirmed, in_progress, completed, cancelled, rescheduled]
            cancellationReason:
              type: string
    responses:
      200:
        description: Status updated
      400:
        description: Unknown status or transition not allowed
      404:
        description: Booking not found
    """
    status, reason = booking_status(_body())
    booking = bookings.change_status(booking_id, status, reason)
    return respond(booking.to_dict(), "Booking status updated successfully")


@bp_admin.patch("/admin/bookings/<int:booking_id>/assign-photographer")
@require_auth()
def assign_photographer(booking_id: int) -> tuple[dict[str, object], int]:
    reader = PayloadReader(_body())
    photographer_id = reader.integer("photographerId", required=True, minimum=1)
    reader.raise_if_invalid()

    booking = bookings.assign_photographer(booking_id, photographer_id)
    return respond(booking.to_dict(), "Photographer assigned successfully")


@bp_admin.post("/admin/bookings/<int:booking_id>/notes")
@require_auth()
def add_booking_note(booking_id: int) -> tuple[dict[str, object], int]:
    note = bookings.add_note(booking_id, _body().get("content"), current_admin_id())
    return respond(note.to_dict(), "Note added successfully", 201)


@bp_admin.patch("/admin/bookings/<int:booking_id>/reschedule")
@bp_admin.patch("/bookings/<int:booking_id>/reschedule")
@require_auth()
def reschedule_booking(booking_id: int) -> tuple[dict[str, object], int]:
    """Move a booking to a new slot, keeping the original as history.
    ---
    tags:
      - Bookings
    parameters:
      - name: booking_id
        in: path
        type: integer
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [newDate, newTime]
          properties:
            newDate:
              type: string
              format: date
            newTime:
              type: string
              example: "14:00"
            reason:
              type: string
    responses:
      200:
        description: Original marked rescheduled, new pending booking created
      400:
        description: Validation failure or the new slot is taken
      404:
        description: Booking not found
    """
    new_date, new_time, reason = reschedule_fields(_body())
    original, successor = bookings.reschedule(booking_id, new_date, new_time, reason)
    return respond(
        {"originalBooking": original.to_dict(), "newBooking": successor.to_dict()},
        "Booking rescheduled successfully",
    )


# CONTACTS
@bp_admin.get("/admin/contacts")
@require_auth()
def list_contacts() -> tuple[dict[str, object], int]:
    page, limit = _page()
    items, pagination = contacts.list_contacts(_filters(ContactFilter), page, limit)
    return respond({"contacts": [c.to_dict() for c in items], "pagination": pagination})


@bp_admin.get("/admin/contacts/stats/overview")
@require_auth()
def contact_stats() -> tuple[dict[str, object], int]:
    return respond(stats.contact_overview(Contact.query.all(), _today()))


@bp_admin.get("/admin/contacts/unread")
@require_auth()
def unread_contacts() -> tuple[dict[str, object], int]:
    _, limit = _page()
    return respond([c.to_dict() for c in contacts.unread_contacts(limit)])


@bp_admin.get("/admin/contacts/follow-up")
@require_auth()
def follow_up_contacts() -> tuple[dict[str, object], int]:
    _, limit = _page()
    return respond([c.to_dict() for c in contacts.follow_up_contacts(limit)])


@bp_admin.patch("/admin/contacts/bulk-update")
@require_auth()
def bulk_update_contacts() -> tuple[dict[str, object], int]:
    """Apply the same status, priority, assignee or tags to many contacts.
    ---
    tags:
      - Contacts
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [contactIds, updates]
          properties:
            contactIds:
              type: array
              items:
                type: integer
            updates:
              type: object
    responses:
      200:
        description: Number of contacts changed
      400:
        description: Missing ids or invalid update values
    """
    payload = _body()
    ids = payload.get("contactIds")
    if not isinstance(ids, list) or not all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
        raise ValidationError(
            "Contact IDs are required",
            errors=[{"field": "contactIds", "message": "contactIds must be a list of integers"}],
        )
    modified = contacts.bulk_update(ids, contact_updates(payload.get("updates")), current_admin_id())
    return respond({"modifiedCount": modified}, f"{modified} contacts updated successfully")


@bp_admin.get("/admin/contacts/<int:contact_id>")
@require_auth()
def get_contact(contact_id: int) -> tuple[dict[str, object], int]:
    return respond(contacts.get_contact(contact_id, viewer_id=current_admin_id()).to_dict())


@bp_admin.put("/admin/contacts/<int:contact_id>")
@require_auth()
def update_contact(contact_id: int) -> tuple[dict[str, object], int]:
    contact = contacts.update_contact(contact_id, contact_updates(_body()), current_admin_id())
    return respond(contact.to_dict(), "Contact updated successfully")


@bp_admin.delete("/admin/contacts/<int:contact_id>")
@require_auth()
def delete_contact(contact_id: int) -> tuple[dict[str, object], int]:
    contacts.delete_contact(contact_id)
    return respond(message="Contact deleted successfully")


@bp_admin.patch("/admin/contacts/<int:contact_id>/mark-read")
@bp_admin.patch("/contact/<int:contact_id>/mark-read")
@require_auth()
def mark_contact_read(contact_id: int) -> tuple[dict[str, object], int]:
    contact = contacts.mark_as_read(contact_id, current_admin_id())
    return respond(contact.to_dict(), "Contact marked as read")


@bp_admin.patch("/admin/contacts/<int:contact_id>/mark-replied")
@bp_admin.patch("/contact/<int:contact_id>/mark-replied")
@require_auth()
def mark_contact_replied(contact_id: int) -> tuple[dict[str, object], int]:
    contact = contacts.mark_as_replied(contact_id, current_admin_id())
    return respond(contact.to_dict(), "Contact marked as replied")


@bp_admin.patch("/admin/contacts/<int:contact_id>/assign")
@bp_admin.patch("/contact/<int:contact_id>/assign")
@require_auth()
def assign_contact(contact_id: int) -> tuple[dict[str, object], int]:
    reader = PayloadReader(_body())
    admin_id = reader.integer("assignedTo", required=True, minimum=1)
    reader.raise_if_invalid()

    contact = contacts.assign(contact_id, admin_id)
    return respond(contact.to_dict(), "Contact assigned successfully")


@bp_admin.post("/admin/contacts/<int:contact_id>/notes")
@require_auth()
def add_contact_note(contact_id: int) -> tuple[dict[str, object], int]:
    note = contacts.add_note(contact_id, _body().get("content"), current_admin_id())
    return respond(note.to_dict(), "Note added successfully", 201)
