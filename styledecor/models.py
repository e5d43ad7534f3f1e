"""Database models for the StyleDecor backend."""
from __future__ import annotations

from datetime import datetime, timezone

from .extensions import db


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


USER_ROLES = ("user", "decorator", "admin")
DECORATOR_STATUSES = ("pending", "approved", "cancelled", "removed")
WORK_STATUSES = ("available", "assigned")


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(150))
    photo_url = db.Column(db.String(500))
    role = db.Column(
        db.Enum(
            *USER_ROLES,
            name="user_role",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="user",
        server_default="user",
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "_id": self.id,
            "email": self.email,
            "name": self.name,
            "photoURL": self.photo_url,
            "role": self.role,
            "createdAt": _iso(self.created_at),
        }


class Service(db.Model):
    """Catalogue item offered to customers."""

    __tablename__ = "services"

    id = db.Column(db.Integer, primary_key=True)
    service_name = db.Column(db.String(200), nullable=False)
    service_category = db.Column(db.String(100))
    cost = db.Column(db.Float, nullable=False)
    unit = db.Column(db.String(50))
    description = db.Column(db.Text)
    image = db.Column(db.String(500))
    created_by_email = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "_id": self.id,
            "serviceName": self.service_name,
            "serviceCategory": self.service_category,
            "cost": self.cost,
            "unit": self.unit,
            "description": self.description,
            "image": self.image,
            "createdByEmail": self.created_by_email,
            "createdAt": _iso(self.created_at),
        }


class Decorator(db.Model):
    """Contractor profile created by self-application."""

    __tablename__ = "decorators"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(150))
    phone = db.Column(db.String(30))
    location = db.Column(db.String(255))
    experience = db.Column(db.String(100))
    specialities = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(
        db.Enum(
            *DECORATOR_STATUSES,
            name="decorator_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=False,
        default="pending",
        server_default="pending",
    )
    # Null until the application is approved.
    work_status = db.Column(
        db.Enum(
            *WORK_STATUSES,
            name="decorator_work_status",
            native_enum=False,
            validate_strings=True,
        ),
        nullable=True,
    )
    applied_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "_id": self.id,
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "location": self.location,
            "experience": self.experience,
            "specialities": list(self.specialities or []),
            "status": self.status,
            "workStatus": self.work_status,
            "applied_at": _iso(self.applied_at),
        }


class Booking(db.Model):
    """A customer's order for a service on a given date and time."""

    __tablename__ = "bookings"
    __table_args__ = (
        db.UniqueConstraint(
            "customer_email", "service_id", "date", "time", name="uq_booking_slot"
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    customer_name = db.Column(db.String(150))
    # References are plain columns: deleting a service or decorator never cascades.
    service_id = db.Column(db.Integer, nullable=False)
    service_name = db.Column(db.String(200))
    service_type = db.Column(db.String(100))
    decorator_id = db.Column(db.Integer, nullable=True)
    decorator_name = db.Column(db.String(150), nullable=True)
    decorator_email = db.Column(db.String(255), nullable=True, index=True)
    date = db.Column(db.String(10), nullable=False)
    time = db.Column(db.String(8), nullable=False)
    location = db.Column(db.String(255))
    notes = db.Column(db.Text)
    total_unit = db.Column(db.Float)
    total_cost = db.Column(db.Float, nullable=False, default=0)
    status = db.Column(db.String(50), nullable=False, default="pending")
    payment_status = db.Column(db.String(20), nullable=False, default="unpaid")
    tracking_id = db.Column(db.String(32), nullable=True)
    transaction_id = db.Column(db.String(255), nullable=True)
    ordered_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "_id": self.id,
            "customerEmail": self.customer_email,
            "customerName": self.customer_name,
            "serviceId": self.service_id,
            "serviceName": self.service_name,
            "serviceType": self.service_type,
            "decoratorId": self.decorator_id,
            "decoratorName": self.decorator_name,
            "decoratorEmail": self.decorator_email,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "notes": self.notes,
            "totalUnit": self.total_unit,
            "totalCost": self.total_cost,
            "status": self.status,
            "paymentStatus": self.payment_status,
            "trackingId": self.tracking_id,
            "transactionId": self.transaction_id,
            "orderedAt": _iso(self.ordered_at),
        }


class Payment(db.Model):
    """Settlement receipt, written once per Stripe payment intent and booking."""

    __tablename__ = "payments"

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.String(255), unique=True, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    currency = db.Column(db.String(10), nullable=False)
    customer_email = db.Column(db.String(255), nullable=False, index=True)
    booking_id = db.Column(db.Integer, unique=True, nullable=False)
    service_name = db.Column(db.String(200))
    payment_status = db.Column(db.String(20), nullable=False)
    tracking_id = db.Column(db.String(32), nullable=False)
    paid_at = db.Column(db.DateTime, nullable=False, default=utc_now)

    def to_dict(self) -> dict[str, object]:
        return {
            "_id": self.id,
            "transactionId": self.transaction_id,
            "amount": self.amount,
            "currency": self.currency,
            "customerEmail": self.customer_email,
            "bookingId": self.booking_id,
            "serviceName": self.service_name,
            "paymentStatus": self.payment_status,
            "trackingId": self.tracking_id,
            "paidAt": _iso(self.paid_at),
        }


def insert_result(record: db.Model) -> dict[str, object]:
    return {"acknowledged": True, "insertedId": record.id}


def update_result(matched: int, modified: int) -> dict[str, object]:
    return {"acknowledged": True, "matchedCount": matched, "modifiedCount": modified}


def delete_result(deleted: int) -> dict[str, object]:
    return {"acknowledged": True, "deletedCount": deleted}
