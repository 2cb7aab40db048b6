"""Typed list filters translated into SQLAlchemy criteria."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from sqlalchemy import or_

from .models import Admin, Booking, Contact
from .validators import parse_date

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def page_args(args) -> tuple[int, int]:
    """Read ``page``/``limit`` query args; bad values raise ``ValueError``."""
    page = max(1, int(args.get("page", 1)))
    limit = min(MAX_PAGE_SIZE, max(1, int(args.get("limit", DEFAULT_PAGE_SIZE))))
    return page, limit


def paginate(query, page: int, limit: int):
    total = query.count()
    items = query.limit(limit).offset((page - 1) * limit).all()
    return items, {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit,
    }


def _clean(args, name: str) -> str | None:
    value = (args.get(name) or "").strip()
    return value or None


def _like(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass(frozen=True)
class BookingFilter:
    status: str | None = None
    service_type: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    search: str | None = None

    @classmethod
    def from_args(cls, args) -> "BookingFilter":
        date_from = _clean(args, "dateFrom")
        date_to = _clean(args, "dateTo")
        return cls(
            status=_clean(args, "status"),
            service_type=_clean(args, "serviceType") or _clean(args, "service"),
            date_from=parse_date(date_from) if date_from else None,
            date_to=parse_date(date_to) if date_to else None,
            search=_clean(args, "search"),
        )

    def apply(self, query):
        if self.status:
            query = query.filter(Booking.status == self.status)
        if self.service_type:
            query = query.filter(Booking.service_type == self.service_type)
        if self.date_from:
            query = query.filter(Booking.booking_date >= self.date_from)
        if self.date_to:
            query = query.filter(Booking.booking_date <= self.date_to)
        if self.search:
            pattern = _like(self.search)
            query = query.filter(
                or_(
                    Booking.customer_name.ilike(pattern, escape="\\"),
                    Booking.customer_email.ilike(pattern, escape="\\"),
                    Booking.customer_phone.ilike(pattern, escape="\\"),
                )
            )
        return query


@dataclass(frozen=True)
class ContactFilter:
    status: str | None = None
    priority: str | None = None
    service_type: str | None = None
    unread_only: bool = False
    search: str | None = None

    @classmethod
    def from_args(cls, args) -> "ContactFilter":
        return cls(
            status=_clean(args, "status"),
            priority=_clean(args, "priority"),
            service_type=_clean(args, "serviceType"),
            unread_only=(args.get("unreadOnly") or "").lower() == "true",
            search=_clean(args, "search"),
        )

    def apply(self, query):
        if self.status:
            query = query.filter(Contact.status == self.status)
        if self.priority:
            query = query.filter(Contact.priority == self.priority)
        if self.service_type:
            query = query.filter(Contact.service_type == self.service_type)
        if self.unread_only:
            query = query.filter(Contact.is_read.is_(False))
        if self.search:
            pattern = _like(self.search)
            query = query.filter(
                or_(
                    Contact.name.ilike(pattern, escape="\\"),
                    Contact.email.ilike(pattern, escape="\\"),
                    Contact.subject.ilike(pattern, escape="\\"),
                    Contact.message.ilike(pattern, escape="\\"),
                )
            )
        return query


@dataclass(frozen=True)
class AdminFilter:
    role: str | None = None
    search: str | None = None

    @classmethod
    def from_args(cls, args) -> "AdminFilter":
        return cls(role=_clean(args, "role"), search=_clean(args, "search"))

    def apply(self, query):
        if self.role:
            query = query.filter(Admin.role == self.role)
        if self.search:
            pattern = _like(self.search)
            query = query.filter(
                or_(
                    Admin.name.ilike(pattern, escape="\\"),
                    Admin.email.ilike(pattern, escape="\\"),
                )
            )
        return query
