"""Error taxonomy and the JSON envelope returned for failures."""
from __future__ import annotations

from flask import Flask, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db


class APIError(Exception):
    """Base class for failures that are reported to the caller."""

    status_code = 500
    code = "internal_error"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, errors: list[dict[str, str]] | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = errors or []

    def to_dict(self) -> dict[str, object]:
        body: dict[str, object] = {
            "success": False,
            "error": self.code,
            "message": self.message,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(APIError):
    status_code = 400
    code = "validation_error"
    default_message = "Validation failed"


class Unauthorized(APIError):
    status_code = 401
    code = "unauthorized"
    default_message = "Authentication required"


class Forbidden(APIError):
    status_code = 403
    code = "forbidden"
    default_message = "Insufficient permissions"


class NotFound(APIError):
    status_code = 404
    code = "not_found"
    default_message = "Resource not found"


class Conflict(APIError):
    # Conflicts share the 400 status with validation failures; the code tells them apart.
    status_code = 400
    code = "conflict"
    default_message = "Resource already exists"


class InternalError(APIError):
    pass


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(APIError)
    def handle_api_error(exc: APIError):
        if exc.status_code >= 500:
            current_app.logger.error("Request failed: %s", exc.message)
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc: SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Database error", exc_info=exc)
        body = InternalError("Database error").to_dict()
        body["error"] = "database_error"
        return jsonify(body), 500

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return (
            jsonify({
                "success": False,
                "error": (exc.name or "error").lower().replace(" ", "_"),
                "message": exc.description,
            }),
            exc.code or 500,
        )

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        current_app.logger.exception("Unhandled error", exc_info=exc)
        body = InternalError().to_dict()
        if current_app.debug:
            body["detail"] = str(exc)
        return jsonify(body), 500
