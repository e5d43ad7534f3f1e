"""Error types raised by the domain modules and their JSON rendering."""
from __future__ import annotations

from flask import Flask, current_app, jsonify

from .extensions import db


class ApiError(Exception):
    """An error that maps directly onto an HTTP response."""

    status_code = 500
    error = "server_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.error)
        self.message = message or self.error

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class InvalidPayload(ApiError):
    status_code = 400
    error = "invalid_payload"


class InvalidStatus(InvalidPayload):
    error = "invalid_status"


class Unauthenticated(ApiError):
    status_code = 401
    error = "unauthorized"


class Forbidden(ApiError):
    status_code = 403
    error = "forbidden"


class NotFound(ApiError):
    status_code = 404
    error = "not_found"


class ServerMisconfigured(ApiError):
    status_code = 500
    error = "server_error"


class PaymentProviderError(ApiError):
    status_code = 502
    error = "payment_error"


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        if exc.status_code >= 500:
            app.logger.error("%s: %s", exc.error, exc.message)
        return jsonify(exc.to_dict()), exc.status_code


def database_error(message: str, exc: Exception):
    """Roll back the session and answer 500 for a failed write."""
    db.session.rollback()
    current_app.logger.exception(message, exc_info=exc)
    return jsonify({"error": "database_error"}), 500
