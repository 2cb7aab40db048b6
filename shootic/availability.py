"""Bookable slot generation and double-booking detection."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from flask import current_app

from .models import Booking

# Statuses whose bookings no longer hold their slot.
RELEASED_STATUSES = ("cancelled",)


class SlotHolder(Protocol):
    booking_time: str
    duration_hours: int


def time_to_minutes(label: str) -> int:
    hours, minutes = label.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_label(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def generate_slots(start_hour: int, end_hour: int, interval_minutes: int) -> list[str]:
    """Every slot start from ``start_hour`` up to (not including) ``end_hour``."""
    if interval_minutes <= 0:
        raise ValueError("interval_minutes must be positive")
    return [
        minutes_to_label(minute)
        for minute in range(start_hour * 60, end_hour * 60, interval_minutes)
    ]


def free_slots(all_slots: Iterable[str], bookings: Iterable[SlotHolder]) -> list[str]:
    """Drop slots whose start falls inside ``[start, start + duration)`` of a booking."""
    windows = []
    for booking in bookings:
        start = time_to_minutes(booking.booking_time)
        windows.append((start, start + max(int(booking.duration_hours or 1), 1) * 60))

    available = []
    for slot in all_slots:
        minute = time_to_minutes(slot)
        if not any(start <= minute < end for start, end in windows):
            available.append(slot)
    return available


def is_weekend(target_date: date, weekend_days: Iterable[int] | None = None) -> bool:
    if weekend_days is None:
        weekend_days = current_app.config["WEEKEND_DAYS"]
    return target_date.weekday() in tuple(weekend_days)


def business_hours() -> dict[str, int]:
    config = current_app.config
    return {
        "start": config["BUSINESS_HOURS_START"],
        "end": config["BUSINESS_HOURS_END"],
        "interval": config["SLOT_INTERVAL_MINUTES"],
    }


def active_bookings_on(target_date: date) -> list[Booking]:
    return (
        Booking.query.filter(
            Booking.booking_date == target_date,
            Booking.status.notin_(RELEASED_STATUSES),
        )
        .order_by(Booking.booking_time.asc())
        .all()
    )


def list_available_slots(target_date: date) -> list[str]:
    """Open slots for ``target_date`` in chronological order; empty on weekends."""
    if is_weekend(target_date):
        return []

    hours = business_hours()
    all_slots = generate_slots(hours["start"], hours["end"], hours["interval"])
    return free_slots(all_slots, active_bookings_on(target_date))


def check_conflict(target_date: date, time: str, exclude_booking_id: int | None = None) -> bool:
    """True when a live booking already sits at exactly ``target_date`` and ``time``."""
    query = Booking.query.filter(
        Booking.booking_date == target_date,
        Booking.booking_time == time,
        Booking.status.notin_(RELEASED_STATUSES),
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.booking_id != exclude_booking_id)
    return query.first() is not None
