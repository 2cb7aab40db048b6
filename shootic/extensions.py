"""Shared Flask extensions for the application."""
from __future__ import annotations

from flask_cors import CORS
from flask_sqlalchemy import SQLAlchemy

# SQLAlchemy database instance shared across the app.
db = SQLAlchemy()

# Origins, methods and headers are supplied per app in ``create_app``.
cors = CORS()
