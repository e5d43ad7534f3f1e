"""User registration and the service catalogue."""
from __future__ import annotations

from .errors import InvalidPayload, NotFound
from .extensions import db
from .models import Service, User, delete_result, insert_result, update_result, utc_now
from .validation import normalize_email, parse_number, require_fields

USER_EXISTS_MESSAGE = "user already exist!"
FEATURED_LIMIT = 8

SERVICE_FIELDS = {
    "serviceName": "service_name",
    "serviceCategory": "service_category",
    "cost": "cost",
    "unit": "unit",
    "description": "description",
    "image": "image",
}


def register_user(payload: dict) -> dict[str, object]:
    email = normalize_email(payload.get("email"))
    if not email:
        raise InvalidPayload("email required")

    if User.query.filter_by(email=email).first():
        return {"message": USER_EXISTS_MESSAGE}

    # Self-registration always starts as a plain user.
    user = User(
        email=email,
        name=payload.get("name") or payload.get("displayName"),
        photo_url=payload.get("photoURL"),
        role="user",
        created_at=utc_now(),
    )
    db.session.add(user)
    db.session.commit()
    return insert_result(user)


def user_role(email: str) -> str:
    user = User.query.filter_by(email=normalize_email(email)).first()
    return user.role if user else "user"


def list_users() -> list[dict[str, object]]:
    return [u.to_dict() for u in User.query.order_by(User.created_at.desc()).all()]


def get_service(service_id: int) -> Service:
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFound("Service not found")
    return service


def featured_services() -> list[dict[str, object]]:
    services = Service.query.order_by(Service.id.asc()).limit(FEATURED_LIMIT).all()
    return [s.to_dict() for s in services]


def _escape_like(value: str) -> str:
    # Match % and _ literally; backslash is the escape character.
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_services(search_text: str | None = None, service_type: str | None = None,
                    min_budget: str | None = None, max_budget: str | None = None) -> list[dict[str, object]]:
    query = Service.query
    if search_text:
        query = query.filter(
            Service.service_name.ilike(f"%{_escape_like(search_text)}%", escape="\\")
        )
    if service_type:
        query = query.filter(Service.service_category == service_type)
    if min_budget:
        query = query.filter(Service.cost >= parse_number(min_budget, "minBudget"))
    if max_budget:
        query = query.filter(Service.cost <= parse_number(max_budget, "maxBudget"))
    return [s.to_dict() for s in query.order_by(Service.id.asc()).all()]


def _service_changes(payload: dict) -> dict[str, object]:
    changes = {}
    for key, attr in SERVICE_FIELDS.items():
        if key in payload:
            changes[attr] = payload[key]
    if "cost" in changes:
        changes["cost"] = parse_number(changes["cost"], "cost")
        if changes["cost"] < 0:
            raise InvalidPayload("cost cannot be negative")
    return changes


def create_service(payload: dict, creator_email: str) -> dict[str, object]:
    require_fields(payload, "serviceName", "cost")
    service = Service(created_by_email=creator_email, **_service_changes(payload))
    db.session.add(service)
    db.session.commit()
    return insert_result(service)


def update_service(service_id: int, payload: dict) -> dict[str, object]:
    service = get_service(service_id)
    changes = _service_changes(payload)
    if "service_name" in changes and not changes["service_name"]:
        raise InvalidPayload("serviceName cannot be empty")

    modified = 0
    for attr, value in changes.items():
        if getattr(service, attr) != value:
            setattr(service, attr, value)
            modified = 1
    db.session.commit()
    return update_result(1, modified)


def delete_service(service_id: int) -> dict[str, object]:
    service = get_service(service_id)
    db.session.delete(service)
    db.session.commit()
    return delete_result(1)
