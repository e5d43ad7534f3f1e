"""HTTP routes for users, the service catalogue and decorators."""
from __future__ import annotations

from flask import Blueprint, Flask, current_app, g, jsonify, request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from . import catalogue, moderation
from .errors import database_error
from .extensions import db
from .guards import ensure_same_email, require_role, verify_token
from .models import Decorator

bp = Blueprint("api", __name__)


@bp.get("/")
def index():
    return "server running fine"


@bp.get("/health")
def health_check() -> tuple[dict[str, str], int]:
    """
    Expose a simple uptime check endpoint.
    ---
    tags:
      - Health
    responses:
      200:
        description: Service is healthy and running.
    """
    return jsonify({"status": "ok"}), 200


@bp.get("/db-health")
def database_health() -> tuple[dict[str, str], int]:
    """Check connectivity to the configured database."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        current_app.logger.exception("Database connectivity check failed", exc_info=exc)
        return jsonify({"database": "unavailable"}), 500

    return jsonify({"database": "ok"}), 200


# --- Users ---

@bp.post("/users")
def register_user() -> tuple[dict[str, object], int]:
    """Register a user on first sign-in. Repeat calls for an email are no-ops.
    ---
    tags:
      - Users
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            email:
              type: string
            name:
              type: string
            photoURL:
              type: string
          required:
            - email
    responses:
      200:
        description: Insert result, or a message when the user already exists
      400:
        description: Missing email
    """
    payload = request.get_json(silent=True) or {}
    try:
        result = catalogue.register_user(payload)
    except SQLAlchemyError as exc:
        return database_error("Failed to register user", exc)
    return jsonify(result), 200


@bp.get("/users")
@verify_token
@require_role("admin")
def list_users():
    return jsonify(catalogue.list_users()), 200


@bp.get("/users/role/<string:email>")
def get_user_role(email: str):
    """Return the stored role for an email, defaulting to ``user``."""
    return jsonify({"role": catalogue.user_role(email)}), 200


# --- Services ---

@bp.get("/featured-services")
def featured_services():
    return jsonify(catalogue.featured_services()), 200


@bp.get("/all-services")
def all_services():
    """List the catalogue with optional filters.
    ---
    tags:
      - Services
    parameters:
      - name: searchText
        in: query
        type: string
        description: Case-insensitive partial match on the service name
      - name: serviceType
        in: query
        type: string
      - name: minBudget
        in: query
        type: number
      - name: maxBudget
        in: query
        type: number
    responses:
      200:
        description: Matching services
      400:
        description: Non-numeric budget bound
    """
    result = catalogue.search_services(
        search_text=request.args.get("searchText", "").strip() or None,
        service_type=request.args.get("serviceType", "").strip() or None,
        min_budget=request.args.get("minBudget", "").strip() or None,
        max_budget=request.args.get("maxBudget", "").strip() or None,
    )
    return jsonify(result), 200


@bp.get("/services/<int:service_id>")
def get_service(service_id: int):
    return jsonify(catalogue.get_service(service_id).to_dict()), 200


@bp.post("/services")
@verify_token
@require_role("admin")
def create_service():
    payload = request.get_json(silent=True) or {}
    try:
        result = catalogue.create_service(payload, g.identity_email)
    except SQLAlchemyError as exc:
        return database_error("Failed to create service", exc)
    return jsonify(result), 201


@bp.patch("/services/<int:service_id>")
@verify_token
@require_role("admin")
def update_service(service_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        result = catalogue.update_service(service_id, payload)
    except SQLAlchemyError as exc:
        return database_error("Failed to update service", exc)
    return jsonify(result), 200


@bp.delete("/services/<int:service_id>")
@verify_token
@require_role("admin")
def delete_service(service_id: int):
    try:
        result = catalogue.delete_service(service_id)
    except SQLAlchemyError as exc:
        return database_error("Failed to delete service", exc)
    return jsonify(result), 200


# --- Decorators ---

@bp.get("/best-decorators")
def best_decorators():
    return jsonify(moderation.best_decorators()), 200


@bp.get("/available-decorators")
def available_decorators():
    speciality = request.args.get("speciality", "").strip() or None
    return jsonify(moderation.available_decorators(speciality)), 200


@bp.post("/decorators")
@verify_token
def apply_as_decorator():
    """Submit a decorator application for the signed-in user.
    ---
    tags:
      - Decorators
    security:
      - Bearer: []
    responses:
      200:
        description: Insert result, or a message when an application already exists
      400:
        description: Missing name
      401:
        description: Authentication required
      403:
        description: Applying on behalf of another email
    """
    payload = request.get_json(silent=True) or {}
    if payload.get("email"):
        ensure_same_email(payload["email"])
    try:
        result = moderation.apply(payload, g.identity_email)
    except SQLAlchemyError as exc:
        return database_error("Failed to record decorator application", exc)
    return jsonify(result), 200


@bp.get("/decorators")
@verify_token
@require_role("admin")
def list_decorators():
    status = request.args.get("status", "").strip() or None
    return jsonify(moderation.list_applications(status)), 200


@bp.get("/decorators/me")
@verify_token
def my_application():
    decorator = Decorator.query.filter_by(email=g.identity_email).first()
    if decorator is None:
        return jsonify({"error": "not_found", "message": "No application found"}), 404
    return jsonify(decorator.to_dict()), 200


@bp.patch("/decorators/<int:decorator_id>")
@verify_token
@require_role("admin")
def moderate_decorator(decorator_id: int):
    """Apply an admin decision (approved, cancelled, pending or removed)."""
    payload = request.get_json(silent=True) or {}
    try:
        result = moderation.decide(decorator_id, payload.get("status"))
    except SQLAlchemyError as exc:
        return database_error("Failed to update decorator status", exc)
    return jsonify(result), 200


@bp.delete("/decorators/<int:decorator_id>")
@verify_token
@require_role("admin")
def delete_decorator(decorator_id: int):
    try:
        result = moderation.remove(decorator_id)
    except SQLAlchemyError as exc:
        return database_error("Failed to remove decorator", exc)
    return jsonify(result), 200


def register_routes(app: Flask) -> None:
    from .routes_bookings import bp_bookings
    from .routes_payments import bp_payments

    app.register_blueprint(bp)
    app.register_blueprint(bp_bookings)
    app.register_blueprint(bp_payments)
