"""Tests for slot generation, available-slot listing and conflict detection."""
from __future__ import annotations

from types import SimpleNamespace

from conftest import MONDAY, SATURDAY, make_booking

from shootic.availability import (check_conflict, free_slots, generate_slots,
                                  is_weekend, list_available_slots)

ALL_DAY = ["09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00"]


def test_generate_slots_business_hours() -> None:
    assert generate_slots(9, 18, 60) == ALL_DAY


def test_generate_slots_half_hour_interval() -> None:
    assert generate_slots(9, 11, 30) == ["09:00", "09:30", "10:00", "10:30"]


def test_free_slots_removes_duration_window() -> None:
    bookings = [SimpleNamespace(booking_time="10:00", duration_hours=2)]

    assert free_slots(ALL_DAY, bookings) == ["09:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00"]


def test_free_slots_off_grid_booking_blocks_following_slot() -> None:
    bookings = [SimpleNamespace(booking_time="09:30", duration_hours=1)]

    assert free_slots(["09:00", "10:00", "11:00"], bookings) == ["09:00", "11:00"]


def test_free_slots_without_bookings_is_identity() -> None:
    assert free_slots(ALL_DAY, []) == ALL_DAY


def test_is_weekend_uses_configured_days(app) -> None:
    assert is_weekend(SATURDAY)
    assert not is_weekend(MONDAY)
    assert not is_weekend(SATURDAY, weekend_days=(6,))


def test_weekend_has_no_slots(app) -> None:
    assert list_available_slots(SATURDAY) == []


def test_empty_weekday_lists_every_slot(app) -> None:
    assert list_available_slots(MONDAY) == ALL_DAY


def test_booked_window_removed_and_order_kept(app) -> None:
    make_booking(booking_time="15:00")
    make_booking(booking_time="10:00", duration_hours=2)

    assert list_available_slots(MONDAY) == ["09:00", "12:00", "13:00", "14:00", "16:00", "17:00"]


def test_cancelled_booking_releases_slot(app) -> None:
    make_booking(booking_time="10:00", status="cancelled")

    assert "10:00" in list_available_slots(MONDAY)


def test_rescheduled_booking_still_holds_slot(app) -> None:
    make_booking(booking_time="10:00", status="rescheduled")

    assert "10:00" not in list_available_slots(MONDAY)


def test_check_conflict_is_exact_match(app) -> None:
    booking = make_booking(booking_time="10:00", duration_hours=2)

    assert check_conflict(MONDAY, "10:00")
    # The write path compares start times only, unlike the slot listing.
    assert not check_conflict(MONDAY, "11:00")
    assert not check_conflict(MONDAY, "10:00", exclude_booking_id=booking.booking_id)


def test_check_conflict_ignores_cancelled(app) -> None:
    make_booking(booking_time="10:00", status="cancelled")

    assert not check_conflict(MONDAY, "10:00")


def test_available_slots_endpoint(client) -> None:
    response = client.get("/bookings/available-slots?date=2024-04-15")

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["date"] == "2024-04-15"
    assert data["availableSlots"] == ALL_DAY
    assert data["businessHours"] == {"start": 9, "end": 18, "interval": 60}


def test_available_slots_accepts_iso_datetime(client) -> None:
    response = client.get("/bookings/available-slots?date=2024-04-15T00:00:00.000Z")

    assert response.status_code == 200
    assert response.get_json()["data"]["date"] == "2024-04-15"


def test_available_slots_weekend_endpoint(client) -> None:
    response = client.get("/bookings/available-slots?date=2024-04-13")

    assert response.status_code == 200
    assert response.get_json()["data"]["availableSlots"] == []


def test_available_slots_missing_date_400(client) -> None:
    response = client.get("/bookings/available-slots")

    assert response.status_code == 400
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert body["message"] == "Date is required"


def test_available_slots_bad_date_400(client) -> None:
    response = client.get("/bookings/available-slots?date=15-04-2024")

    assert response.status_code == 400
    assert response.get_json()["error"] == "validation_error"
