"""Booking lifecycle: creation, scoped listings, edits, decorator assignment,
status changes and the aggregate views built on top of bookings.

Functions here return JSON-ready payloads and leave error rendering to the
``ApiError`` handlers. Multi-record transitions (assignment, status resets)
are flushed in a single session commit.
"""
from __future__ import annotations

from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from .errors import Forbidden, InvalidPayload, NotFound
from .extensions import db
from .guards import ensure_same_email
from .models import (Booking, Decorator, Service, delete_result, insert_result,
                     update_result, utc_now)
from .validation import normalize_email, parse_id, parse_number, require_fields

DUPLICATE_BOOKING_MESSAGE = "This service already booked at same time!"

PENDING = "pending"
DECORATOR_ASSIGNED = "decorator assigned"
TERMINAL_STATUSES = ("completed", "cancelled")

# Wire name -> column, for the fields a customer or admin may edit.
EDITABLE_FIELDS = {
    "serviceType": "service_type",
    "date": "date",
    "time": "time",
    "notes": "notes",
    "location": "location",
    "totalUnit": "total_unit",
    "totalCost": "total_cost",
}
NUMERIC_FIELDS = {"totalUnit", "totalCost"}


def today_iso() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def get_booking(booking_id: int) -> Booking:
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def find_duplicate(customer_email: str, service_id: int, date: str, time: str,
                   exclude_id: int | None = None) -> Booking | None:
    query = Booking.query.filter_by(
        customer_email=customer_email,
        service_id=service_id,
        date=date,
        time=time,
    )
    if exclude_id is not None:
        query = query.filter(Booking.id != exclude_id)
    return query.first()


def create_booking(payload: dict, identity_email: str) -> dict[str, object]:
    require_fields(payload, "serviceId", "date", "time")
    customer_email = normalize_email(payload.get("customerEmail")) or identity_email
    ensure_same_email(customer_email)

    service_id = parse_id(payload.get("serviceId"), "serviceId")
    service = db.session.get(Service, service_id)
    if service is None:
        raise NotFound("Service not found")

    date = str(payload["date"]).strip()
    time = str(payload["time"]).strip()

    if find_duplicate(customer_email, service_id, date, time):
        current_app.logger.info("Duplicate booking for %s on %s %s", customer_email, date, time)
        return {"message": DUPLICATE_BOOKING_MESSAGE}

    total_unit = (
        parse_number(payload["totalUnit"], "totalUnit")
        if payload.get("totalUnit") is not None
        else None
    )
    if payload.get("totalCost") is not None:
        total_cost = parse_number(payload["totalCost"], "totalCost")
    else:
        total_cost = service.cost * (total_unit or 1)

    booking = Booking(
        customer_email=customer_email,
        customer_name=payload.get("customerName"),
        service_id=service_id,
        service_name=payload.get("serviceName") or service.service_name,
        service_type=payload.get("serviceType") or service.service_category,
        date=date,
        time=time,
        location=payload.get("location"),
        notes=payload.get("notes"),
        total_unit=total_unit,
        total_cost=total_cost,
        status=PENDING,
        payment_status="unpaid",
        ordered_at=utc_now(),
    )
    db.session.add(booking)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost the race against an identical concurrent request.
        db.session.rollback()
        return {"message": DUPLICATE_BOOKING_MESSAGE}

    return insert_result(booking)


def list_customer_bookings(customer_email: str | None) -> list[dict[str, object]]:
    query = Booking.query
    if customer_email:
        query = query.filter_by(customer_email=customer_email)
    bookings = query.order_by(Booking.ordered_at.desc(), Booking.id.desc()).all()
    return [booking.to_dict() for booking in bookings]


def list_decorator_bookings(decorator_email: str, status: str | None = None) -> list[dict[str, object]]:
    query = Booking.query.filter_by(decorator_email=decorator_email)
    if status:
        query = query.filter_by(status=status)
    bookings = query.order_by(Booking.ordered_at.desc(), Booking.id.desc()).all()
    return [booking.to_dict() for booking in bookings]


def list_today_schedule(decorator_email: str) -> list[dict[str, object]]:
    bookings = (
        Booking.query.filter_by(
            decorator_email=decorator_email,
            payment_status="paid",
            date=today_iso(),
        )
        .order_by(Booking.time.asc())
        .all()
    )
    return [booking.to_dict() for booking in bookings]


def edit_booking(booking_id: int, payload: dict) -> dict[str, object]:
    """Apply a partial update: only fields present in ``payload`` are written."""
    booking = get_booking(booking_id)
    ensure_same_email(booking.customer_email)

    changes: dict[str, object] = {}
    for key, attr in EDITABLE_FIELDS.items():
        if key not in payload:
            continue
        value = payload[key]
        if key in NUMERIC_FIELDS and value is not None:
            value = parse_number(value, key)
        changes[attr] = value

    if "date" in changes or "time" in changes:
        date = changes.get("date", booking.date)
        time = changes.get("time", booking.time)
        if not date or not time:
            raise InvalidPayload("date and time cannot be empty")
        if find_duplicate(booking.customer_email, booking.service_id, date, time, exclude_id=booking.id):
            return {"message": DUPLICATE_BOOKING_MESSAGE}

    modified = 0
    for attr, value in changes.items():
        if getattr(booking, attr) != value:
            setattr(booking, attr, value)
            modified = 1

    db.session.commit()
    return update_result(1, modified)


def _release_if_idle(decorator_id: int | None) -> bool:
    """Mark a decorator available again once no active booking references it."""
    if decorator_id is None:
        return False
    decorator = db.session.get(Decorator, decorator_id)
    if decorator is None or decorator.work_status != "assigned":
        return False

    active = Booking.query.filter(
        Booking.decorator_id == decorator_id,
        Booking.status.not_in(TERMINAL_STATUSES),
    ).count()
    if active:
        return False

    decorator.work_status = "available"
    return True


def assign_decorator(booking_id: int, payload: dict) -> dict[str, object]:
    require_fields(payload, "decoratorId")
    booking = get_booking(booking_id)
    decorator = db.session.get(Decorator, parse_id(payload["decoratorId"], "decoratorId"))
    if decorator is None:
        raise NotFound("Decorator not found")
    if decorator.status != "approved":
        raise InvalidPayload("Only approved decorators can be assigned")

    previous_id = booking.decorator_id
    booking.decorator_id = decorator.id
    booking.decorator_name = payload.get("decoratorName") or decorator.name
    booking.decorator_email = normalize_email(payload.get("decoratorEmail")) or decorator.email
    booking.status = DECORATOR_ASSIGNED
    decorator.work_status = "assigned"

    if previous_id != decorator.id:
        _release_if_idle(previous_id)

    db.session.commit()
    current_app.logger.info("Assigned decorator %s to booking %s", decorator.email, booking.id)
    return {
        "modifyBooking": update_result(1, 1),
        "modifyDecorator": update_result(1, 1),
    }


def change_status(booking_id: int, status: object, decorator_email: str) -> dict[str, object]:
    if not isinstance(status, str) or not status.strip():
        raise InvalidPayload("status required")
    status = status.strip()

    booking = get_booking(booking_id)
    if (booking.decorator_email or "").lower() != decorator_email.lower():
        raise Forbidden("Booking is not assigned to you")

    decorator_id = booking.decorator_id
    booking.status = status
    if status == PENDING:
        booking.decorator_id = None
        booking.decorator_name = None
        booking.decorator_email = None

    released = False
    if status == PENDING or status in TERMINAL_STATUSES:
        released = _release_if_idle(decorator_id)

    db.session.commit()
    return {**update_result(1, 1), "decoratorReleased": released}


def delete_booking(booking_id: int) -> dict[str, object]:
    booking = get_booking(booking_id)
    ensure_same_email(booking.customer_email)
    db.session.delete(booking)
    db.session.commit()
    return delete_result(1)


def decorator_earnings(decorator_email: str) -> dict[str, object]:
    total, count = (
        db.session.query(
            func.coalesce(func.sum(Booking.total_cost), 0),
            func.count(Booking.id),
        )
        .filter(
            Booking.decorator_email == decorator_email,
            Booking.payment_status == "paid",
            Booking.status == "completed",
        )
        .one()
    )
    return {
        "decoratorEmail": decorator_email,
        "totalEarnings": float(total or 0),
        "completedCount": int(count or 0),
    }


def admin_analytics() -> dict[str, object]:
    total_income = (
        db.session.query(func.coalesce(func.sum(Booking.total_cost), 0))
        .filter(Booking.payment_status == "paid")
        .scalar()
    )
    total_bookings = db.session.query(func.count(Booking.id)).scalar()
    per_service = (
        db.session.query(Booking.service_name, func.count(Booking.id))
        .group_by(Booking.service_name)
        .order_by(func.count(Booking.id).desc(), Booking.service_name)
        .all()
    )
    return {
        "totalIncome": float(total_income or 0),
        "totalBookings": int(total_bookings or 0),
        "bookingsPerService": [
            {"serviceName": name, "count": count} for name, count in per_service
        ],
    }
