"""Tests for the contact form and the staff inbox."""
from __future__ import annotations

from datetime import datetime

import pytest
from conftest import auth_header, make_admin

from shootic.contacts import compute_priority
from shootic.extensions import db
from shootic.models import Contact

CONTACT = {
    "name": "Ravi Kumar",
    "email": "ravi@example.com",
    "phone": "9000000000",
    "subject": "Wedding in June",
    "message": "Do you cover destination weddings?",
    "serviceType": "wedding",
}


def make_contact(**overrides) -> Contact:
    fields = {
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "subject": "Question",
        "message": "Hello there",
        "service_type": "general_inquiry",
        "priority": "medium",
        "status": "new",
    }
    fields.update(overrides)
    contact = Contact(**fields)
    db.session.add(contact)
    db.session.commit()
    return contact


@pytest.mark.parametrize(
    ("subject", "message", "priority"),
    [
        ("URGENT: need a photographer", "tomorrow", "urgent"),
        ("Booking", "this is urgent please", "urgent"),
        ("Important question", "about pricing", "high"),
        ("Urgent and important", "both words", "urgent"),
        ("Hello", "just browsing", "medium"),
        (None, None, "medium"),
    ],
)
def test_compute_priority(subject, message, priority) -> None:
    assert compute_priority(subject, message) == priority


def test_submit_contact_201(client) -> None:
    response = client.post(
        "/contact",
        json=CONTACT,
        headers={"User-Agent": "pytest-agent", "Referer": "https://shootic.example/contact"},
    )

    assert response.status_code == 201
    data = response.get_json()["data"]
    assert data["status"] == "new"
    assert data["priority"] == "medium"
    assert data["isRead"] is False

    stored = db.session.get(Contact, data["id"])
    assert stored.user_agent == "pytest-agent"
    assert stored.referrer == "https://shootic.example/contact"


def test_submit_urgent_contact_gets_urgent_priority(client) -> None:
    response = client.post("/contact", json={**CONTACT, "message": "This is URGENT, call me"})

    assert response.get_json()["data"]["priority"] == "urgent"


def test_submit_contact_defaults_service_type(client) -> None:
    payload = {key: value for key, value in CONTACT.items() if key != "serviceType"}

    response = client.post("/contact", json=payload)

    assert response.get_json()["data"]["serviceType"] == "general_inquiry"


def test_submit_contact_missing_fields_400(client) -> None:
    response = client.post("/contact", json={"name": "Ravi", "email": "bad"})

    assert response.status_code == 400
    fields = {error["field"] for error in response.get_json()["errors"]}
    assert fields == {"email", "subject", "message"}


def test_viewing_contact_marks_it_read(client, admin, admin_headers) -> None:
    contact = make_contact()

    response = client.get(f"/admin/contacts/{contact.contact_id}", headers=admin_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["isRead"] is True
    assert data["status"] == "read"
    assert data["readBy"]["id"] == admin.admin_id


def test_mark_read_is_idempotent(client, admin_headers) -> None:
    contact = make_contact()

    first = client.patch(f"/admin/contacts/{contact.contact_id}/mark-read", headers=admin_headers)
    second = client.patch(f"/contact/{contact.contact_id}/mark-read", headers=admin_headers)

    assert first.status_code == second.status_code == 200
    assert second.get_json()["data"]["status"] == "read"
    assert second.get_json()["data"]["isRead"] is True


def test_mark_read_never_moves_status_backwards(client, admin_headers) -> None:
    contact = make_contact(status="replied", is_read=True)

    response = client.patch(f"/contact/{contact.contact_id}/mark-read", headers=admin_headers)

    assert response.get_json()["data"]["status"] == "replied"


def test_mark_read_tracks_latest_reader(client, admin_headers) -> None:
    contact = make_contact()
    other = make_admin(email="second@example.com", name="Second Admin")
    client.patch(f"/contact/{contact.contact_id}/mark-read", headers=admin_headers)

    response = client.patch(f"/contact/{contact.contact_id}/mark-read", headers=auth_header(other))

    assert response.get_json()["data"]["readBy"]["id"] == other.admin_id


def test_mark_replied(client, admin, admin_headers) -> None:
    contact = make_contact()

    response = client.patch(f"/contact/{contact.contact_id}/mark-replied", headers=admin_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["status"] == "replied"
    assert data["responseSent"] is True
    assert data["responseSentBy"]["id"] == admin.admin_id
    assert data["isRead"] is True


def test_assign_contact(client, admin, admin_headers) -> None:
    contact = make_contact()

    response = client.patch(
        f"/admin/contacts/{contact.contact_id}/assign",
        json={"assignedTo": admin.admin_id},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["data"]["assignedTo"]["id"] == admin.admin_id


def test_assign_contact_to_missing_admin_404(client, admin_headers) -> None:
    contact = make_contact()

    response = client.patch(
        f"/contact/{contact.contact_id}/assign",
        json={"assignedTo": 999},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.get_json()["message"] == "Admin not found"


def test_missing_contact_404(client, admin_headers) -> None:
    response = client.patch("/contact/999/mark-read", headers=admin_headers)

    assert response.status_code == 404
    assert response.get_json()["message"] == "Contact not found"


def test_update_contact(client, admin_headers) -> None:
    contact = make_contact()

    response = client.put(
        f"/admin/contacts/{contact.contact_id}",
        json={"priority": "high", "tags": ["wedding", "vip"], "followUpDate": "2024-05-01"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["priority"] == "high"
    assert data["tags"] == ["wedding", "vip"]
    assert data["followUpDate"].startswith("2024-05-01")


def test_update_contact_bad_status_400(client, admin_headers) -> None:
    contact = make_contact()

    response = client.put(
        f"/admin/contacts/{contact.contact_id}",
        json={"status": "archived"},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_update_status_to_read_marks_contact_read(client, admin, admin_headers) -> None:
    contact = make_contact()

    response = client.put(
        f"/admin/contacts/{contact.contact_id}",
        json={"status": "read"},
        headers=admin_headers,
    )

    data = response.get_json()["data"]
    assert data["isRead"] is True
    assert data["readBy"]["id"] == admin.admin_id
    assert data["readAt"] is not None
    unread = client.get("/admin/contacts/unread", headers=admin_headers).get_json()["data"]
    assert unread == []


def test_contact_notes(client, admin_headers) -> None:
    contact = make_contact()

    response = client.post(
        f"/admin/contacts/{contact.contact_id}/notes",
        json={"content": "Called back, left voicemail"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    detail = client.get(f"/admin/contacts/{contact.contact_id}", headers=admin_headers).get_json()["data"]
    assert [note["content"] for note in detail["notes"]] == ["Called back, left voicemail"]


def test_delete_contact(client, admin_headers) -> None:
    contact = make_contact()

    response = client.delete(f"/admin/contacts/{contact.contact_id}", headers=admin_headers)

    assert response.status_code == 200
    assert Contact.query.count() == 0


def test_bulk_update_counts_modified(client, admin_headers) -> None:
    first = make_contact()
    second = make_contact(email="other@example.com")
    ids = [first.contact_id, second.contact_id]

    response = client.patch(
        "/admin/contacts/bulk-update",
        json={"contactIds": ids, "updates": {"status": "closed"}},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.get_json()["data"]["modifiedCount"] == 2

    repeat = client.patch(
        "/admin/contacts/bulk-update",
        json={"contactIds": ids, "updates": {"status": "closed"}},
        headers=admin_headers,
    )
    assert repeat.get_json()["data"]["modifiedCount"] == 0


def test_bulk_update_to_replied_marks_contacts_read(client, admin, admin_headers) -> None:
    contact = make_contact()

    response = client.patch(
        "/admin/contacts/bulk-update",
        json={"contactIds": [contact.contact_id], "updates": {"status": "replied"}},
        headers=admin_headers,
    )

    assert response.get_json()["data"]["modifiedCount"] == 1
    db.session.expire_all()
    stored = db.session.get(Contact, contact.contact_id)
    assert stored.is_read is True
    assert stored.read_by_id == admin.admin_id
    assert stored.status == "replied"


def test_bulk_update_ignores_fields_outside_allow_list(client, admin_headers) -> None:
    contact = make_contact()

    response = client.patch(
        "/admin/contacts/bulk-update",
        json={"contactIds": [contact.contact_id], "updates": {"followUpDate": "2024-05-01"}},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.get_json()["data"]["modifiedCount"] == 0
    db.session.expire_all()
    assert db.session.get(Contact, contact.contact_id).follow_up_date is None


def test_bulk_update_requires_ids_400(client, admin_headers) -> None:
    response = client.patch(
        "/admin/contacts/bulk-update",
        json={"contactIds": [], "updates": {"status": "closed"}},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_unread_and_follow_up_lists(client, admin_headers) -> None:
    make_contact(subject="Unread one")
    make_contact(subject="Already read", is_read=True, status="read")
    make_contact(subject="Chase this", is_read=True, status="read", follow_up_date=datetime(2020, 1, 1))
    make_contact(subject="Closed", is_read=True, status="closed", follow_up_date=datetime(2020, 1, 1))

    unread = client.get("/admin/contacts/unread", headers=admin_headers).get_json()["data"]
    follow_up = client.get("/admin/contacts/follow-up", headers=admin_headers).get_json()["data"]

    assert [c["subject"] for c in unread] == ["Unread one"]
    assert [c["subject"] for c in follow_up] == ["Chase this"]


def test_list_contacts_filters(client, admin_headers) -> None:
    make_contact(subject="Maternity shoot", priority="high")
    make_contact(subject="Corporate headshots", is_read=True, status="read")

    unread = client.get("/admin/contacts?unreadOnly=true", headers=admin_headers).get_json()["data"]
    search = client.get("/admin/contacts?search=HEADSHOT", headers=admin_headers).get_json()["data"]
    high = client.get("/admin/contacts?priority=high", headers=admin_headers).get_json()["data"]

    assert [c["subject"] for c in unread["contacts"]] == ["Maternity shoot"]
    assert [c["subject"] for c in search["contacts"]] == ["Corporate headshots"]
    assert high["pagination"]["total"] == 1


def test_contact_stats_overview(client, admin_headers) -> None:
    make_contact()
    make_contact(is_read=True, status="read", priority="urgent")

    response = client.get("/admin/contacts/stats/overview", headers=admin_headers)

    assert response.status_code == 200
    data = response.get_json()["data"]
    assert data["totalContacts"] == 2
    assert data["unreadContacts"] == 1
    assert {row["group"]: row["count"] for row in data["priorityStats"]} == {"medium": 1, "urgent": 1}
