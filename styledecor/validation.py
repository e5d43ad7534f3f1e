"""Small helpers for pulling and checking values out of JSON payloads."""
from __future__ import annotations

from .errors import InvalidPayload


def normalize_email(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value or None


def require_fields(payload: dict, *fields: str) -> None:
    missing = [field for field in fields if payload.get(field) in (None, "")]
    if missing:
        raise InvalidPayload(f"{', '.join(missing)} required")


def parse_number(value: object, field: str) -> float:
    if isinstance(value, bool):
        raise InvalidPayload(f"{field} must be a number")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidPayload(f"{field} must be a number") from exc


def parse_id(value: object, field: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidPayload(f"{field} must be an integer id") from exc
