"""pytest configuration: path management, app and account fixtures."""
from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest
from werkzeug.security import generate_password_hash

# Ensure the project root is available on sys.path so tests can import the package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shootic import create_app  # noqa: E402
from shootic.config import TestingConfig  # noqa: E402
from shootic.extensions import db  # noqa: E402
from shootic.models import Admin, Booking  # noqa: E402
from shootic.tokens import get_token_service  # noqa: E402

PASSWORD = "Secret123!"

# 2024-04-15 is a Monday, 2024-04-13 a Saturday.
MONDAY = date(2024, 4, 15)
SATURDAY = date(2024, 4, 13)


@pytest.fixture
def app():
    app = create_app(TestingConfig())
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_admin(
    *,
    email: str = "admin@example.com",
    role: str = "admin",
    password: str = PASSWORD,
    is_active: bool = True,
    name: str = "Studio Admin",
) -> Admin:
    admin = Admin(
        name=name,
        email=email,
        password_hash=generate_password_hash(password),
        role=role,
        permissions=[],
        is_active=is_active,
    )
    db.session.add(admin)
    db.session.commit()
    return admin


def auth_header(admin: Admin) -> dict[str, str]:
    token = get_token_service().issue(admin.admin_id, admin.email, admin.role).token
    return {"Authorization": f"Bearer {token}"}


def make_booking(
    *,
    booking_date: date = MONDAY,
    booking_time: str = "10:00",
    duration_hours: int = 1,
    status: str = "pending",
    price_amount: float = 10000,
    price_discount: float = 0,
    customer_name: str = "Asha Rao",
    service_type: str = "portrait",
    commit: bool = True,
) -> Booking:
    booking = Booking(
        customer_name=customer_name,
        customer_email="asha@example.com",
        customer_phone="9876543210",
        service_type=service_type,
        package="standard",
        booking_date=booking_date,
        booking_time=booking_time,
        duration_hours=duration_hours,
        location_address="12 MG Road",
        location_city="Bengaluru",
        location_state="KA",
        location_zip="560001",
        price_amount=price_amount,
        price_discount=price_discount,
        status=status,
    )
    db.session.add(booking)
    if commit:
        db.session.commit()
    return booking


def booking_payload(**overrides) -> dict[str, object]:
    payload: dict[str, object] = {
        "customerName": "Asha Rao",
        "customerEmail": "asha@example.com",
        "customerPhone": "9876543210",
        "serviceType": "portrait",
        "package": "standard",
        "date": MONDAY.isoformat(),
        "time": "10:00",
        "duration": 2,
        "location": {
            "address": "12 MG Road",
            "city": "Bengaluru",
            "state": "KA",
            "zipCode": "560001",
        },
        "price": {"amount": 15000, "currency": "INR"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def admin(app) -> Admin:
    return make_admin()


@pytest.fixture
def super_admin(app) -> Admin:
    return make_admin(email="owner@example.com", role="super_admin", name="Studio Owner")


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_header(admin)


@pytest.fixture
def super_headers(super_admin) -> dict[str, str]:
    return auth_header(super_admin)
