"""Request payload parsing with field-level error reporting."""
from __future__ import annotations

import re
from datetime import date, datetime

from .errors import ValidationError
from .models import (ADMIN_PERMISSIONS, ADMIN_ROLES, BOOKING_STATUSES,
                     CONTACT_PRIORITIES, CONTACT_SERVICE_TYPES,
                     CONTACT_STATUSES, PACKAGES, PAYMENT_STATUSES,
                     SERVICE_TYPES)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")

MIN_PASSWORD_LENGTH = 6


def parse_date(value) -> date:
    """Parse ``YYYY-MM-DD`` (an ISO datetime is accepted and truncated)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("date must be in YYYY-MM-DD format")
    text = value.strip().replace("Z", "+00:00")
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError("date must be in YYYY-MM-DD format") from exc


def parse_time(value) -> str:
    """Normalise ``H:MM`` / ``HH:MM`` to zero-padded ``HH:MM``."""
    match = TIME_RE.match(str(value or "").strip())
    if not match:
        raise ValueError("time must be in HH:MM format")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError("time must be in HH:MM format")
    return f"{hours:02d}:{minutes:02d}"


def normalize_email(value) -> str:
    return (value or "").strip().lower() if isinstance(value, str) else ""


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value or ""))


class PayloadReader:
    """Pull typed fields out of a JSON body, collecting every problem."""

    def __init__(self, payload: dict | None):
        self.payload = payload if isinstance(payload, dict) else {}
        self.errors: list[dict[str, str]] = []

    def fail(self, field: str, message: str) -> None:
        self.errors.append({"field": field, "message": message})

    def raise_if_invalid(self, message: str = "Validation failed") -> None:
        if self.errors:
            raise ValidationError(message, errors=self.errors)

    def _lookup(self, path: str):
        current = self.payload
        for part in path.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
        return current

    def text(self, path: str, required: bool = False) -> str | None:
        value = self._lookup(path)
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                self.fail(path, f"{path} is required")
            return None
        if not isinstance(value, (str, int, float)):
            self.fail(path, f"{path} must be a string")
            return None
        return str(value).strip()

    def email(self, path: str, required: bool = False) -> str | None:
        value = self.text(path, required=required)
        if value is None:
            return None
        value = value.lower()
        if not is_valid_email(value):
            self.fail(path, "a valid email is required")
            return None
        return value

    def choice(self, path: str, choices: tuple[str, ...], required: bool = False) -> str | None:
        value = self.text(path, required=required)
        if value is None:
            return None
        if value not in choices:
            self.fail(path, f"{path} must be one of: {', '.join(choices)}")
            return None
        return value

    def number(self, path: str, required: bool = False, minimum: float | None = None) -> float | None:
        value = self._lookup(path)
        if value is None or value == "":
            if required:
                self.fail(path, f"{path} is required")
            return None
        if isinstance(value, bool):
            self.fail(path, f"{path} must be numeric")
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            self.fail(path, f"{path} must be numeric")
            return None
        if minimum is not None and number < minimum:
            self.fail(path, f"{path} must be at least {minimum:g}")
            return None
        return number

    def integer(self, path: str, required: bool = False, minimum: int | None = None) -> int | None:
        number = self.number(path, required=required, minimum=minimum)
        if number is None:
            return None
        if not float(number).is_integer():
            self.fail(path, f"{path} must be a whole number")
            return None
        return int(number)

    def date(self, path: str, required: bool = False) -> date | None:
        value = self._lookup(path)
        if value is None or value == "":
            if required:
                self.fail(path, f"{path} is required")
            return None
        try:
            return parse_date(value)
        except ValueError as exc:
            self.fail(path, str(exc))
            return None

    def time(self, path: str, required: bool = False) -> str | None:
        value = self._lookup(path)
        if value is None or value == "":
            if required:
                self.fail(path, f"{path} is required")
            return None
        try:
            return parse_time(value)
        except ValueError as exc:
            self.fail(path, str(exc))
            return None

    def boolean(self, path: str) -> bool | None:
        value = self._lookup(path)
        if value is None:
            return None
        if not isinstance(value, bool):
            self.fail(path, f"{path} must be true or false")
            return None
        return value

    def password(self, path: str) -> str | None:
        value = self._lookup(path)
        if not isinstance(value, str) or not value:
            self.fail(path, f"{path} is required")
            return None
        if len(value) < MIN_PASSWORD_LENGTH:
            self.fail(path, f"{path} must be at least {MIN_PASSWORD_LENGTH} characters long")
            return None
        return value

    def string_list(self, path: str, choices: tuple[str, ...] | None = None) -> list[str] | None:
        value = self._lookup(path)
        if value is None:
            return None
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            self.fail(path, f"{path} must be a list of strings")
            return None
        if choices is not None:
            unknown = [item for item in value if item not in choices]
            if unknown:
                self.fail(path, f"unknown values: {', '.join(unknown)}")
                return None
        return list(dict.fromkeys(value))


def booking_fields(payload: dict | None, partial: bool = False) -> dict[str, object]:
    """Map a booking body onto ``Booking`` column names.

    With ``partial`` every field is optional and only supplied ones are returned.
    """
    reader = PayloadReader(payload)
    required = not partial
    fields = {
        "customer_name": reader.text("customerName", required),
        "customer_email": reader.email("customerEmail", required),
        "customer_phone": reader.text("customerPhone", required),
        "service_type": reader.choice("serviceType", SERVICE_TYPES, required),
        "package": reader.choice("package", PACKAGES, required),
        "booking_date": reader.date("date", required),
        "booking_time": reader.time("time", required),
        "duration_hours": reader.integer("duration", required, minimum=1),
        "location_address": reader.text("location.address", required),
        "location_city": reader.text("location.city", required),
        "location_state": reader.text("location.state", required),
        "location_zip": reader.text("location.zipCode", required),
        "price_amount": reader.number("price.amount", required, minimum=0),
        "price_currency": reader.text("price.currency"),
        "price_discount": reader.number("price.discount", minimum=0),
        "number_of_people": reader.integer("numberOfPeople", minimum=1),
        "special_requirements": reader.text("specialRequirements"),
    }
    if partial:
        fields["payment_status"] = reader.choice("paymentStatus", PAYMENT_STATUSES)
    reader.raise_if_invalid()

    if fields["price_currency"]:
        fields["price_currency"] = str(fields["price_currency"]).upper()[:3]
    return {key: value for key, value in fields.items() if value is not None}


def booking_status(payload: dict | None) -> tuple[str, str | None]:
    reader = PayloadReader(payload)
    status = reader.choice("status", BOOKING_STATUSES, required=True)
    reason = reader.text("cancellationReason")
    reader.raise_if_invalid()
    return status, reason


def reschedule_fields(payload: dict | None) -> tuple[date, str, str | None]:
    reader = PayloadReader(payload)
    new_date = reader.date("newDate", required=True)
    new_time = reader.time("newTime", required=True)
    reason = reader.text("reason")
    reader.raise_if_invalid()
    return new_date, new_time, reason


def contact_fields(payload: dict | None) -> dict[str, object]:
    reader = PayloadReader(payload)
    fields = {
        "name": reader.text("name", required=True),
        "email": reader.email("email", required=True),
        "phone": reader.text("phone"),
        "subject": reader.text("subject", required=True),
        "message": reader.text("message", required=True),
        "service_type": reader.choice("serviceType", CONTACT_SERVICE_TYPES),
    }
    reader.raise_if_invalid()
    return {key: value for key, value in fields.items() if value is not None}


def contact_updates(payload: dict | None) -> dict[str, object]:
    reader = PayloadReader(payload)
    fields = {
        "status": reader.choice("status", CONTACT_STATUSES),
        "priority": reader.choice("priority", CONTACT_PRIORITIES),
        "assigned_to_id": reader.integer("assignedTo"),
        "follow_up_date": reader.date("followUpDate"),
        "tags": reader.string_list("tags"),
    }
    reader.raise_if_invalid()
    if fields["follow_up_date"] is not None:
        fields["follow_up_date"] = datetime.combine(fields["follow_up_date"], datetime.min.time())
    return {key: value for key, value in fields.items() if value is not None}


def registration_fields(payload: dict | None) -> dict[str, object]:
    reader = PayloadReader(payload)
    fields = {
        "name": reader.text("name", required=True),
        "email": reader.email("email", required=True),
        "password": reader.password("password"),
        "role": reader.choice("role", ADMIN_ROLES) or "admin",
        "phone": reader.text("phone"),
        "permissions": reader.string_list("permissions", ADMIN_PERMISSIONS) or [],
    }
    reader.raise_if_invalid()
    return fields


def admin_updates(payload: dict | None) -> dict[str, object]:
    reader = PayloadReader(payload)
    fields = {
        "name": reader.text("name"),
        "email": reader.email("email"),
        "role": reader.choice("role", ADMIN_ROLES),
        "is_active": reader.boolean("isActive"),
        "permissions": reader.string_list("permissions", ADMIN_PERMISSIONS),
        "phone": reader.text("phone"),
    }
    reader.raise_if_invalid()
    return {key: value for key, value in fields.items() if value is not None}

