"""Reporting aggregates computed from record snapshots.

Every function here takes plain sequences of records (ORM instances or any
object exposing the same attributes) and returns JSON-ready dicts, so the
numbers can be checked without a database.
"""
from __future__ import annotations

from collections import OrderedDict
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Sequence

# Rows whose revenue is not counted: cancelled ones never happen and
# rescheduled ones are carried by their successor.
NON_REVENUE_STATUSES = frozenset({"cancelled", "rescheduled"})
UPCOMING_STATUSES = frozenset({"pending", "confirmed"})
BOOKING_STATUS_KEYS = ("pending", "confirmed", "in_progress", "completed", "cancelled", "rescheduled")


def _naive_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _day(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _naive_utc(value).date()
    return value


def _amount(booking) -> float:
    return float(getattr(booking, "price_amount", 0) or 0) - float(getattr(booking, "price_discount", 0) or 0)


def _revenue(bookings: Iterable) -> float:
    return round(sum(_amount(b) for b in bookings if b.status not in NON_REVENUE_STATUSES), 2)


def month_start(day: date, offset: int = 0) -> date:
    """First day of the month ``offset`` months away from ``day``'s month."""
    index = day.year * 12 + (day.month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def _in_range(value, start: date, end: date) -> bool:
    day = _day(value)
    return day is not None and start <= day < end


def group_count(records: Iterable, attribute: str) -> list[dict[str, object]]:
    counts: dict[object, int] = {}
    for record in records:
        key = getattr(record, attribute)
        counts[key] = counts.get(key, 0) + 1
    return [{"group": key, "count": counts[key]} for key in sorted(counts, key=str)]


def group_count_and_revenue(bookings: Iterable, attribute: str) -> list[dict[str, object]]:
    groups: dict[object, dict[str, float]] = {}
    for booking in bookings:
        key = getattr(booking, attribute)
        bucket = groups.setdefault(key, {"count": 0, "revenue": 0.0})
        bucket["count"] += 1
        bucket["revenue"] += _amount(booking)
    return [
        {"group": key, "count": groups[key]["count"], "revenue": round(groups[key]["revenue"], 2)}
        for key in sorted(groups, key=str)
    ]


def booking_overview(bookings: Sequence, today: date) -> dict[str, object]:
    this_month, next_month = month_start(today), month_start(today, 1)
    week_end = today + timedelta(days=7)
    return {
        "totalBookings": len(bookings),
        "monthlyBookings": sum(1 for b in bookings if _in_range(b.booking_date, this_month, next_month)),
        "todayBookings": sum(1 for b in bookings if _day(b.booking_date) == today),
        "upcomingBookings": sum(
            1
            for b in bookings
            if b.status in UPCOMING_STATUSES and today <= _day(b.booking_date) <= week_end
        ),
        "statusStats": group_count_and_revenue(bookings, "status"),
        "serviceStats": group_count_and_revenue(bookings, "service_type"),
    }


def contact_overview(contacts: Sequence, today: date) -> dict[str, object]:
    this_month, next_month = month_start(today), month_start(today, 1)
    return {
        "totalContacts": len(contacts),
        "monthlyContacts": sum(1 for c in contacts if _in_range(c.created_at, this_month, next_month)),
        "unreadContacts": sum(1 for c in contacts if not c.is_read),
        "todayContacts": sum(1 for c in contacts if _day(c.created_at) == today),
        "followUpNeeded": sum(
            1
            for c in contacts
            if c.follow_up_date is not None
            and _day(c.follow_up_date) <= today
            and c.status not in ("closed", "spam")
        ),
        "statusStats": group_count(contacts, "status"),
        "priorityStats": group_count(contacts, "priority"),
        "serviceStats": group_count(contacts, "service_type"),
    }


def admin_overview(admins: Sequence, recent: int = 5) -> dict[str, object]:
    logged_in = [a for a in admins if a.last_login_at is not None]
    logged_in.sort(key=lambda a: _naive_utc(a.last_login_at), reverse=True)
    return {
        "totalAdmins": len(admins),
        "activeAdmins": sum(1 for a in admins if a.is_active),
        "superAdmins": sum(1 for a in admins if a.role == "super_admin"),
        "regularAdmins": sum(1 for a in admins if a.role == "admin"),
        "recentLogins": [
            {
                "name": a.name,
                "email": a.email,
                "lastLogin": _naive_utc(a.last_login_at).isoformat(),
            }
            for a in logged_in[:recent]
        ],
    }


def monthly_trends(bookings: Sequence, today: date, months: int = 6) -> list[dict[str, object]]:
    """Bookings and revenue per creation month, oldest first, ending with ``today``'s month."""
    trends = []
    for offset in range(-(months - 1), 1):
        start, end = month_start(today, offset), month_start(today, offset + 1)
        in_month = [b for b in bookings if _in_range(b.created_at, start, end)]
        trends.append({
            "month": start.strftime("%b %Y"),
            "bookings": len(in_month),
            "revenue": _revenue(in_month),
        })
    return trends


def _booking_summary(booking) -> dict[str, object]:
    return {
        "id": booking.booking_id,
        "customerName": booking.customer_name,
        "serviceType": booking.service_type,
        "package": booking.package,
        "date": _day(booking.booking_date).isoformat(),
        "time": booking.booking_time,
        "amount": _amount(booking),
        "status": booking.status,
    }


def _contact_summary(contact) -> dict[str, object]:
    return {
        "id": contact.contact_id,
        "name": contact.name,
        "email": contact.email,
        "subject": contact.subject,
        "status": contact.status,
        "priority": contact.priority,
    }


def _newest(records: Sequence, limit: int) -> list:
    return sorted(records, key=lambda r: _naive_utc(r.created_at), reverse=True)[:limit]


def dashboard(bookings: Sequence, contacts: Sequence, today: date) -> dict[str, object]:
    this_month = month_start(today)
    last_month = month_start(today, -1)
    year_start = date(today.year, 1, 1)
    tomorrow = today + timedelta(days=1)

    monthly = [b for b in bookings if _in_range(b.created_at, this_month, tomorrow)]
    yearly = [b for b in bookings if _in_range(b.created_at, year_start, tomorrow)]
    previous = [b for b in bookings if _in_range(b.created_at, last_month, this_month)]

    by_status: dict[str, int] = OrderedDict((status, 0) for status in BOOKING_STATUS_KEYS)
    for booking in bookings:
        by_status[booking.status] = by_status.get(booking.status, 0) + 1

    return {
        "overview": {
            "totalBookings": len(bookings),
            "totalRevenue": _revenue(bookings),
            "totalContacts": len(contacts),
            "unreadContacts": sum(1 for c in contacts if not c.is_read),
        },
        "bookingStats": dict(by_status),
        "revenue": {
            "total": _revenue(bookings),
            "monthly": _revenue(monthly),
            "yearly": _revenue(yearly),
        },
        "growth": {
            "monthlyBookings": len(monthly),
            "yearlyBookings": len(yearly),
            "lastMonthBookings": len(previous),
        },
        "recentActivity": {
            "bookings": [_booking_summary(b) for b in _newest(bookings, 5)],
            "contacts": [_contact_summary(c) for c in _newest(contacts, 5)],
        },
        "monthlyTrends": monthly_trends(bookings, today),
    }
