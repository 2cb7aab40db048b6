"""Create or update a staff account for local development."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from werkzeug.security import generate_password_hash

# Ensure the project root is on sys.path so ``shootic`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from shootic import create_app
from shootic.credentials import find_by_email
from shootic.extensions import db
from shootic.models import ADMIN_ROLES, Admin
from shootic.validators import MIN_PASSWORD_LENGTH, is_valid_email, normalize_email


def seed_admin(email: str, password: str, role: str = "super_admin", name: str | None = None) -> int:
    email = normalize_email(email)
    if not is_valid_email(email):
        print(f"Error: '{email}' is not a valid email address")
        return 1
    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"Error: password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return 1

    app = create_app()
    with app.app_context():
        db.create_all()

        admin = find_by_email(email)
        if admin is None:
            admin = Admin(name=name or "Studio Admin", email=email, role=role, permissions=[])
            db.session.add(admin)
            print(f"Created new {role} account: {email}")
        else:
            if admin.role != role:
                print(f"Updating role from '{admin.role}' to '{role}'")
                admin.role = role
            if name:
                admin.name = name
            admin.is_active = True

        admin.password_hash = generate_password_hash(password)
        db.session.commit()

        print(f"Password for {role} '{email}' has been set successfully.")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or reset a staff account.")
    parser.add_argument("email", help="Account email address")
    parser.add_argument("password", help="Plain-text password to hash and store")
    parser.add_argument(
        "--role",
        choices=list(ADMIN_ROLES),
        default="super_admin",
        help="Account role (default: super_admin)",
    )
    parser.add_argument("--name", help="Display name for a new account")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    sys.exit(seed_admin(args.email, args.password, args.role, args.name))


if __name__ == "__main__":
    main()
