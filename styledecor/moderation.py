"""Decorator applications and admin moderation decisions."""
from __future__ import annotations

from flask import current_app

from .errors import InvalidStatus, NotFound
from .extensions import db
from .models import DECORATOR_STATUSES, Decorator, User, delete_result, insert_result, update_result, utc_now
from .validation import normalize_email, require_fields

ALREADY_APPLIED_MESSAGE = "already applied"


def apply(payload: dict, identity_email: str) -> dict[str, object]:
    require_fields(payload, "name")
    email = normalize_email(payload.get("email")) or identity_email

    if Decorator.query.filter_by(email=email).first():
        return {"message": ALREADY_APPLIED_MESSAGE}

    specialities = payload.get("specialities") or []
    if isinstance(specialities, str):
        specialities = [item.strip() for item in specialities.split(",")]
    specialities = sorted({str(item).strip() for item in specialities if str(item).strip()})

    decorator = Decorator(
        email=email,
        name=payload["name"],
        phone=payload.get("phone"),
        location=payload.get("location"),
        experience=payload.get("experience"),
        specialities=specialities,
        status="pending",
        applied_at=utc_now(),
    )
    db.session.add(decorator)
    db.session.commit()
    return insert_result(decorator)


def list_applications(status: str | None = None) -> list[dict[str, object]]:
    query = Decorator.query
    if status:
        query = query.filter_by(status=status)
    return [d.to_dict() for d in query.order_by(Decorator.applied_at.desc()).all()]


def _set_user_role(email: str, role: str) -> int:
    user = User.query.filter_by(email=email).first()
    if user is None:
        current_app.logger.warning("No user record for decorator %s; role left unchanged", email)
        return 0
    if user.role == "admin":
        # Never demote or re-role an administrator through moderation.
        return 0
    modified = int(user.role != role)
    user.role = role
    return modified


def remove(decorator_id: int) -> dict[str, object]:
    decorator = db.session.get(Decorator, decorator_id)
    if decorator is None:
        raise NotFound("Decorator not found")

    modified = _set_user_role(decorator.email, "user")
    db.session.delete(decorator)
    db.session.commit()
    current_app.logger.info("Removed decorator %s", decorator.email)
    return {"deleteDecorator": delete_result(1), "userRole": update_result(1, modified)}


def decide(decorator_id: int, status: object) -> dict[str, object]:
    if status not in DECORATOR_STATUSES:
        raise InvalidStatus(f"status must be one of: {', '.join(DECORATOR_STATUSES)}")
    if status == "removed":
        return remove(decorator_id)

    decorator = db.session.get(Decorator, decorator_id)
    if decorator is None:
        raise NotFound("Decorator not found")

    decorator.status = status
    role_modified = 0
    if status == "approved":
        decorator.work_status = "available"
        role_modified = _set_user_role(decorator.email, "decorator")

    db.session.commit()
    current_app.logger.info("Decorator %s moved to %s", decorator.email, status)
    return {"modifyDecorator": update_result(1, 1), "userRole": update_result(1, role_modified)}


def best_decorators(limit: int = 6) -> list[dict[str, object]]:
    decorators = (
        Decorator.query.filter_by(status="approved")
        .order_by(Decorator.applied_at.asc())
        .limit(limit)
        .all()
    )
    return [d.to_dict() for d in decorators]


def available_decorators(speciality: str | None = None) -> list[dict[str, object]]:
    decorators = (
        Decorator.query.filter_by(status="approved", work_status="available")
        .order_by(Decorator.applied_at.asc())
        .all()
    )
    if speciality:
        needle = speciality.strip().lower()
        decorators = [
            d for d in decorators
            if any(needle in item.lower() for item in (d.specialities or []))
        ]
    return [d.to_dict() for d in decorators]
