"""Booking lifecycle: creation, edits, status changes and rescheduling."""
from __future__ import annotations

from datetime import date

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from .availability import check_conflict
from .errors import Conflict, InternalError, NotFound, ValidationError
from .extensions import db
from .filters import BookingFilter, paginate
from .models import Admin, Booking, BookingNote

SLOT_TAKEN = "Time slot is already booked for this date"
NEW_SLOT_TAKEN = "Time slot is already booked for the new date"
DEFAULT_RESCHEDULE_REASON = "Rescheduled by admin"

TERMINAL_STATUSES = frozenset({"completed", "cancelled", "rescheduled"})

# Forward path of a live booking; cancel/reschedule are added for every non-terminal state.
_FORWARD = {
    "pending": "confirmed",
    "confirmed": "in_progress",
    "in_progress": "completed",
}

ALLOWED_TRANSITIONS = {
    status: frozenset({nxt, "cancelled", "rescheduled"}) for status, nxt in _FORWARD.items()
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def _commit(failure: str, conflict_message: str = SLOT_TAKEN) -> None:
    """Commit the unit of work; the partial unique index surfaces as ``Conflict``."""
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.warning("Slot conflict rejected by storage: %s", exc.orig)
        raise Conflict(conflict_message) from exc
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure, exc_info=exc)
        raise InternalError(failure) from exc


def get_booking(booking_id: int) -> Booking:
    booking = (
        Booking.query.options(joinedload(Booking.photographer))
        .filter(Booking.booking_id == booking_id)
        .first()
    )
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def list_bookings(filters: BookingFilter, page: int = 1, limit: int = 10):
    query = filters.apply(Booking.query.options(joinedload(Booking.photographer)))
    query = query.order_by(Booking.booking_date.desc(), Booking.created_at.desc())
    return paginate(query, page, limit)


def create_booking(fields: dict[str, object]) -> Booking:
    """Insert a pending booking after checking its (date, time) is free."""
    if check_conflict(fields["booking_date"], fields["booking_time"]):
        current_app.logger.warning(
            "Booking rejected, slot %s %s taken", fields["booking_date"], fields["booking_time"]
        )
        raise Conflict(SLOT_TAKEN)

    booking = Booking(**fields)
    booking.status = "pending"
    db.session.add(booking)
    _commit("Failed to create booking")

    current_app.logger.info(
        "Booking %s created for %s %s", booking.booking_id, booking.booking_date, booking.booking_time
    )
    return booking


def update_booking(booking_id: int, fields: dict[str, object], photographer_id: int | None = None) -> Booking:
    booking = get_booking(booking_id)

    new_date = fields.get("booking_date", booking.booking_date)
    new_time = fields.get("booking_time", booking.booking_time)
    moved = new_date != booking.booking_date or new_time != booking.booking_time
    if moved and booking.status != "cancelled" and check_conflict(new_date, new_time, booking.booking_id):
        raise Conflict(SLOT_TAKEN)

    if photographer_id is not None:
        booking.photographer = get_photographer(photographer_id)

    for field, value in fields.items():
        setattr(booking, field, value)

    _commit("Failed to update booking")
    return booking


def change_status(booking_id: int, status: str, cancellation_reason: str | None = None) -> Booking:
    booking = get_booking(booking_id)
    if booking.status == status:
        return booking

    if not can_transition(booking.status, status):
        raise ValidationError(f"Cannot change booking status from '{booking.status}' to '{status}'")
    # A rescheduled booking always has a successor; only reschedule() creates one.
    if status == "rescheduled":
        raise ValidationError("Use the reschedule endpoint to reschedule a booking")

    previous = booking.status
    booking.status = status
    if status == "cancelled" and cancellation_reason:
        booking.cancellation_reason = cancellation_reason

    _commit("Failed to update status")
    current_app.logger.info("Booking %s status %s -> %s", booking.booking_id, previous, status)
    return booking


def reschedule(
    booking_id: int,
    new_date: date,
    new_time: str,
    reason: str | None = None,
) -> tuple[Booking, Booking]:
    """Close ``booking_id`` as rescheduled and open a linked pending successor.

    Both rows are written in one commit; on any failure neither changes.
    """
    booking = get_booking(booking_id)
    if booking.status in TERMINAL_STATUSES:
        raise ValidationError(f"Cannot reschedule a booking with status '{booking.status}'")

    if check_conflict(new_date, new_time, exclude_booking_id=booking.booking_id):
        current_app.logger.warning(
            "Reschedule of booking %s rejected, slot %s %s taken", booking.booking_id, new_date, new_time
        )
        raise Conflict(NEW_SLOT_TAKEN)

    successor = booking.copy_for_reschedule(new_date, new_time)
    booking.status = "rescheduled"
    booking.cancellation_reason = reason or DEFAULT_RESCHEDULE_REASON
    db.session.add(successor)
    _commit("Failed to reschedule booking", conflict_message=NEW_SLOT_TAKEN)

    current_app.logger.info(
        "Booking %s rescheduled to %s (%s %s)", booking.booking_id, successor.booking_id, new_date, new_time
    )
    return booking, successor


def get_photographer(admin_id: int) -> Admin:
    photographer = db.session.get(Admin, admin_id)
    if photographer is None:
        raise NotFound("Photographer not found")
    return photographer


def assign_photographer(booking_id: int, photographer_id: int) -> Booking:
    photographer = get_photographer(photographer_id)
    booking = get_booking(booking_id)
    booking.photographer = photographer
    _commit("Failed to assign photographer")
    return booking


def add_note(booking_id: int, content: str, author_id: int | None) -> BookingNote:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError(
            "Validation failed", errors=[{"field": "content", "message": "content is required"}]
        )
    booking = get_booking(booking_id)
    note = BookingNote(booking=booking, content=content.strip(), created_by_id=author_id)
    db.session.add(note)
    _commit("Failed to add note")
    return note


def delete_booking(booking_id: int) -> None:
    booking = get_booking(booking_id)
    Booking.query.filter(Booking.rescheduled_from_id == booking.booking_id).update(
        {Booking.rescheduled_from_id: None}, synchronize_session=False
    )
    db.session.delete(booking)
    _commit("Failed to delete booking")
    current_app.logger.info("Booking %s deleted", booking_id)
