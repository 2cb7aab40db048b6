"""Contact-form inbox: intake, triage and audit trail."""
from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from .errors import InternalError, NotFound, ValidationError
from .extensions import db
from .filters import ContactFilter, paginate
from .models import Admin, Contact, ContactNote, utc_now

BULK_UPDATABLE = ("status", "priority", "assigned_to_id", "tags")


def compute_priority(subject: str | None, message: str | None) -> str:
    text = f"{subject or ''} {message or ''}".lower()
    if "urgent" in text:
        return "urgent"
    if "important" in text:
        return "high"
    return "medium"


def _commit(failure: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(failure, exc_info=exc)
        raise InternalError(failure) from exc


def _admin(admin_id: int) -> Admin:
    admin = db.session.get(Admin, admin_id)
    if admin is None:
        raise NotFound("Admin not found")
    return admin


def find_contact(contact_id: int) -> Contact:
    contact = db.session.get(Contact, contact_id)
    if contact is None:
        raise NotFound("Contact not found")
    return contact


def create_contact(
    fields: dict[str, object],
    ip_address: str | None = None,
    user_agent: str | None = None,
    referrer: str | None = None,
) -> Contact:
    contact = Contact(
        **fields,
        priority=compute_priority(fields.get("subject"), fields.get("message")),
        status="new",
        ip_address=ip_address,
        user_agent=user_agent[:500] if user_agent else None,
        referrer=referrer[:500] if referrer else None,
    )
    db.session.add(contact)
    _commit("Failed to send message")
    current_app.logger.info("Contact %s received with priority %s", contact.contact_id, contact.priority)
    return contact


def _record_read(contact: Contact, admin_id: int | None) -> None:
    contact.is_read = True
    contact.read_at = utc_now()
    contact.read_by_id = admin_id
    if contact.status == "new":
        contact.status = "read"


def get_contact(contact_id: int, viewer_id: int | None = None) -> Contact:
    """Fetch a contact; the first staff view marks it read."""
    contact = find_contact(contact_id)
    if viewer_id is not None and not contact.is_read:
        _record_read(contact, viewer_id)
        _commit("Failed to get contact")
    return contact


def mark_as_read(contact_id: int, admin_id: int | None) -> Contact:
    """Idempotent: status never moves backwards; the audit fields track the latest reader."""
    contact = find_contact(contact_id)
    _record_read(contact, admin_id)
    _commit("Failed to mark as read")
    return contact


def mark_as_replied(contact_id: int, admin_id: int | None) -> Contact:
    contact = find_contact(contact_id)
    if not contact.is_read:
        _record_read(contact, admin_id)
    contact.status = "replied"
    contact.response_sent = True
    contact.response_sent_at = utc_now()
    contact.response_sent_by_id = admin_id
    _commit("Failed to mark as replied")
    return contact


def assign(contact_id: int, admin_id: int) -> Contact:
    admin = _admin(admin_id)
    contact = find_contact(contact_id)
    contact.assigned_to = admin
    _commit("Failed to assign contact")
    return contact


def add_note(contact_id: int, content: str, author_id: int | None) -> ContactNote:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError(
            "Validation failed", errors=[{"field": "content", "message": "content is required"}]
        )
    contact = find_contact(contact_id)
    note = ContactNote(contact=contact, content=content.strip(), created_by_id=author_id)
    db.session.add(note)
    _commit("Failed to add note")
    return note


def update_contact(contact_id: int, updates: dict[str, object], admin_id: int | None = None) -> Contact:
    """Apply staff edits; moving the status to read or replied also marks the contact read."""
    contact = find_contact(contact_id)
    if "assigned_to_id" in updates:
        _admin(int(updates["assigned_to_id"]))
    for field, value in updates.items():
        setattr(contact, field, value)
    if contact.status in ("read", "replied") and not contact.is_read:
        _record_read(contact, admin_id)
    _commit("Failed to update contact")
    return contact


def delete_contact(contact_id: int) -> None:
    contact = find_contact(contact_id)
    db.session.delete(contact)
    _commit("Failed to delete contact")


def bulk_update(contact_ids: list[int], updates: dict[str, object], admin_id: int | None = None) -> int:
    if not contact_ids:
        raise ValidationError("Contact IDs are required")
    allowed = {field: value for field, value in updates.items() if field in BULK_UPDATABLE}
    if not allowed:
        return 0
    if "assigned_to_id" in allowed:
        _admin(int(allowed["assigned_to_id"]))

    contacts = Contact.query.filter(Contact.contact_id.in_(contact_ids)).all()
    modified = 0
    for contact in contacts:
        changed = False
        for field, value in allowed.items():
            if getattr(contact, field) != value:
                setattr(contact, field, value)
                changed = True
        if contact.status in ("read", "replied") and not contact.is_read:
            _record_read(contact, admin_id)
            changed = True
        modified += int(changed)
    _commit("Failed to update contacts")
    return modified


def list_contacts(filters: ContactFilter, page: int = 1, limit: int = 10):
    query = filters.apply(Contact.query).order_by(Contact.created_at.desc())
    return paginate(query, page, limit)


def unread_contacts(limit: int = 10) -> list[Contact]:
    return (
        Contact.query.filter(Contact.is_read.is_(False))
        .order_by(Contact.created_at.desc())
        .limit(limit)
        .all()
    )


def follow_up_contacts(limit: int = 10) -> list[Contact]:
    now = utc_now().replace(tzinfo=None)
    return (
        Contact.query.filter(
            Contact.follow_up_date.isnot(None),
            Contact.follow_up_date <= now,
            Contact.status.notin_(("closed", "spam")),
        )
        .order_by(Contact.follow_up_date.asc())
        .limit(limit)
        .all()
    )
