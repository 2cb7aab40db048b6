#!/usr/bin/env python3
"""Create the Shootic tables, including the live-slot unique index."""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from shootic import create_app
from shootic.extensions import db


def init_database():
    app = create_app()
    with app.app_context():
        db.create_all()
        print(f"Database tables initialized at {app.config['SQLALCHEMY_DATABASE_URI']}")


if __name__ == "__main__":
    init_database()
