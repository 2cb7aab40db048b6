"""Database models for the Shootic studio backend."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import text

from .extensions import db


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _iso(value) -> str | None:
    return value.isoformat() if value else None


ADMIN_ROLES = ("admin", "super_admin")
ADMIN_PERMISSIONS = (
    "manage_bookings",
    "manage_contacts",
    "manage_admins",
    "view_analytics",
    "manage_settings",
)

SERVICE_TYPES = (
    "wedding",
    "portrait",
    "event",
    "commercial",
    "family",
    "engagement",
    "maternity",
    "newborn",
    "graduation",
    "corporate",
    "other",
)
PACKAGES = ("basic", "standard", "premium", "custom")
BOOKING_STATUSES = (
    "pending",
    "confirmed",
    "in_progress",
    "completed",
    "cancelled",
    "rescheduled",
)
PAYMENT_STATUSES = ("pending", "partial", "paid", "refunded")

CONTACT_SERVICE_TYPES = SERVICE_TYPES + ("general_inquiry",)
CONTACT_STATUSES = ("new", "read", "replied", "closed", "spam")
CONTACT_PRIORITIES = ("low", "medium", "high", "urgent")


class Admin(db.Model):
    """Staff account allowed into the management endpoints."""

    __tablename__ = "admins"

    admin_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    # Stored lower-cased so the unique constraint is case-insensitive.
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(
        db.Enum(
            *ADMIN_ROLES,
            name="admin_role",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="admin",
        server_default="admin",
    )
    permissions = db.Column(db.JSON, nullable=False, default=list)
    is_active = db.Column(db.Boolean, nullable=False, default=True, server_default="1")
    phone = db.Column(db.String(30))
    profile_image = db.Column(db.String(500))
    last_login_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    def to_dict_basic(self) -> dict[str, object]:
        return {
            "id": self.admin_id,
            "name": self.name,
            "email": self.email,
        }

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.admin_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "permissions": list(self.permissions or []),
            "isActive": bool(self.is_active),
            "phone": self.phone,
            "profileImage": self.profile_image,
            "lastLogin": _iso(self.last_login_at),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Booking(db.Model):
    """A reservation of a studio time slot."""

    __tablename__ = "bookings"
    __table_args__ = (
        # At most one live booking per (date, time); cancelled rows release the slot.
        db.Index(
            "uq_bookings_active_slot",
            "booking_date",
            "booking_time",
            unique=True,
            sqlite_where=text("status != 'cancelled'"),
            postgresql_where=text("status != 'cancelled'"),
        ),
    )

    booking_id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(150), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    customer_phone = db.Column(db.String(30), nullable=False)
    service_type = db.Column(
        db.Enum(*SERVICE_TYPES, name="service_type", native_enum=False, validate_strings=True),
        nullable=False,
    )
    package = db.Column(
        db.Enum(*PACKAGES, name="booking_package", native_enum=False, validate_strings=True),
        nullable=False,
    )
    booking_date = db.Column(db.Date, nullable=False, index=True)
    booking_time = db.Column(db.String(5), nullable=False)  # HH:MM
    duration_hours = db.Column(db.Integer, nullable=False, default=1)

    location_address = db.Column(db.String(255), nullable=False)
    location_city = db.Column(db.String(100), nullable=False)
    location_state = db.Column(db.String(100), nullable=False)
    location_zip = db.Column(db.String(20), nullable=False)

    price_amount = db.Column(db.Float, nullable=False, default=0)
    price_currency = db.Column(db.String(3), nullable=False, default="INR")
    price_discount = db.Column(db.Float, nullable=False, default=0)

    number_of_people = db.Column(db.Integer)
    special_requirements = db.Column(db.Text)

    status = db.Column(
        db.Enum(*BOOKING_STATUSES, name="booking_status", native_enum=False, validate_strings=True),
        nullable=False,
        default="pending",
        server_default="pending",
        index=True,
    )
    payment_status = db.Column(
        db.Enum(*PAYMENT_STATUSES, name="payment_status", native_enum=False, validate_strings=True),
        nullable=False,
        default="pending",
        server_default="pending",
    )
    photographer_id = db.Column(db.Integer, db.ForeignKey("admins.admin_id"), nullable=True)
    cancellation_reason = db.Column(db.Text)
    rescheduled_from_id = db.Column(db.Integer, db.ForeignKey("bookings.booking_id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    photographer = db.relationship("Admin")
    notes = db.relationship(
        "BookingNote",
        back_populates="booking",
        order_by="BookingNote.created_at",
        cascade="all, delete-orphan",
    )

    @property
    def final_amount(self) -> float:
        return (self.price_amount or 0) - (self.price_discount or 0)

    def copy_for_reschedule(self, new_date, new_time: str) -> "Booking":
        """Build a pending successor at a new slot carrying every field and staff note."""
        return Booking(
            customer_name=self.customer_name,
            customer_email=self.customer_email,
            customer_phone=self.customer_phone,
            service_type=self.service_type,
            package=self.package,
            booking_date=new_date,
            booking_time=new_time,
            duration_hours=self.duration_hours,
            location_address=self.location_address,
            location_city=self.location_city,
            location_state=self.location_state,
            location_zip=self.location_zip,
            price_amount=self.price_amount,
            price_currency=self.price_currency,
            price_discount=self.price_discount,
            number_of_people=self.number_of_people,
            special_requirements=self.special_requirements,
            payment_status=self.payment_status,
            photographer_id=self.photographer_id,
            status="pending",
            rescheduled_from_id=self.booking_id,
            notes=[
                BookingNote(
                    content=note.content,
                    created_by_id=note.created_by_id,
                    created_at=note.created_at,
                )
                for note in self.notes
            ],
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.booking_id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "serviceType": self.service_type,
            "package": self.package,
            "date": _iso(self.booking_date),
            "time": self.booking_time,
            "duration": self.duration_hours,
            "location": {
                "address": self.location_address,
                "city": self.location_city,
                "state": self.location_state,
                "zipCode": self.location_zip,
            },
            "price": {
                "amount": self.price_amount,
                "currency": self.price_currency,
                "discount": self.price_discount,
                "final": self.final_amount,
            },
            "numberOfPeople": self.number_of_people,
            "specialRequirements": self.special_requirements,
            "status": self.status,
            "paymentStatus": self.payment_status,
            "photographer": self.photographer.to_dict_basic() if self.photographer else None,
            "cancellationReason": self.cancellation_reason,
            "rescheduledFrom": self.rescheduled_from_id,
            "notes": [note.to_dict() for note in self.notes],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class BookingNote(db.Model):
    """Append-only staff note on a booking."""

    __tablename__ = "booking_notes"

    note_id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.booking_id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey("admins.admin_id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    booking = db.relationship("Booking", back_populates="notes")
    created_by = db.relationship("Admin")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.note_id,
            "content": self.content,
            "createdBy": self.created_by.to_dict_basic() if self.created_by else None,
            "createdAt": _iso(self.created_at),
        }


class Contact(db.Model):
    """Inbound inquiry from the public contact form."""

    __tablename__ = "contacts"

    contact_id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(30))
    subject = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    service_type = db.Column(
        db.Enum(
            *CONTACT_SERVICE_TYPES,
            name="contact_service_type",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="general_inquiry",
    )
    priority = db.Column(
        db.Enum(*CONTACT_PRIORITIES, name="contact_priority", native_enum=False, validate_strings=True),
        nullable=False,
        default="medium",
    )
    status = db.Column(
        db.Enum(*CONTACT_STATUSES, name="contact_status", native_enum=False, validate_strings=True),
        nullable=False,
        default="new",
        server_default="new",
        index=True,
    )
    is_read = db.Column(db.Boolean, nullable=False, default=False, server_default="0")
    read_at = db.Column(db.DateTime)
    read_by_id = db.Column(db.Integer, db.ForeignKey("admins.admin_id"))
    response_sent = db.Column(db.Boolean, nullable=False, default=False, server_default="0")
    response_sent_at = db.Column(db.DateTime)
    response_sent_by_id = db.Column(db.Integer, db.ForeignKey("admins.admin_id"))
    assigned_to_id = db.Column(db.Integer, db.ForeignKey("admins.admin_id"))
    follow_up_date = db.Column(db.DateTime)
    tags = db.Column(db.JSON, nullable=False, default=list)

    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(500))
    referrer = db.Column(db.String(500))

    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    read_by = db.relationship("Admin", foreign_keys=[read_by_id])
    response_sent_by = db.relationship("Admin", foreign_keys=[response_sent_by_id])
    assigned_to = db.relationship("Admin", foreign_keys=[assigned_to_id])
    notes = db.relationship(
        "ContactNote",
        back_populates="contact",
        order_by="ContactNote.created_at",
        cascade="all, delete-orphan",
    )

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.contact_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "subject": self.subject,
            "message": self.message,
            "serviceType": self.service_type,
            "priority": self.priority,
            "status": self.status,
            "isRead": bool(self.is_read),
            "readAt": _iso(self.read_at),
            "readBy": self.read_by.to_dict_basic() if self.read_by else None,
            "responseSent": bool(self.response_sent),
            "responseSentAt": _iso(self.response_sent_at),
            "responseSentBy": self.response_sent_by.to_dict_basic() if self.response_sent_by else None,
            "assignedTo": self.assigned_to.to_dict_basic() if self.assigned_to else None,
            "followUpDate": _iso(self.follow_up_date),
            "tags": list(self.tags or []),
            "notes": [note.to_dict() for note in self.notes],
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class ContactNote(db.Model):
    """Append-only staff note on a contact inquiry."""

    __tablename__ = "contact_notes"

    note_id = db.Column(db.Integer, primary_key=True)
    contact_id = db.Column(db.Integer, db.ForeignKey("contacts.contact_id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey("admins.admin_id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    contact = db.relationship("Contact", back_populates="notes")
    created_by = db.relationship("Admin")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.note_id,
            "content": self.content,
            "createdBy": self.created_by.to_dict_basic() if self.created_by else None,
            "createdAt": _iso(self.created_at),
        }
