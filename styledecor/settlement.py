"""Stripe Checkout integration and idempotent payment settlement."""
from __future__ import annotations

import secrets
from datetime import datetime, timezone

import stripe
from flask import current_app
from sqlalchemy.exc import IntegrityError

from .errors import InvalidPayload, NotFound, PaymentProviderError, ServerMisconfigured
from .extensions import db
from .guards import ensure_same_email
from .models import Booking, Payment, insert_result, update_result, utc_now
from .validation import normalize_email, parse_id, parse_number, require_fields

ALREADY_PAID_MESSAGE = "payment already exist"


def generate_tracking_id(now: datetime | None = None) -> str:
    """Return ``SD-YYYYMMDD-XXXXXXXX`` using the UTC settlement date."""
    now = now or datetime.now(timezone.utc)
    return f"SD-{now.astimezone(timezone.utc):%Y%m%d}-{secrets.token_hex(4).upper()}"


def to_minor_units(cost: float) -> int:
    # int() truncates toward zero.
    return int(cost * 100)


def _configure_stripe() -> None:
    stripe_key = current_app.config.get("STRIPE_SECRET_KEY")
    if not stripe_key:
        current_app.logger.warning("Stripe secret key not configured")
        raise ServerMisconfigured("Payments are not currently available. Please contact support.")
    stripe.api_key = stripe_key


def find_payment(transaction_id: str | None) -> Payment | None:
    return Payment.query.filter_by(transaction_id=transaction_id).first()


def _already_paid(payment: Payment | Booking) -> dict[str, object]:
    return {
        "message": ALREADY_PAID_MESSAGE,
        "transactionId": payment.transaction_id,
        "trackingId": payment.tracking_id,
    }


def start_checkout(payload: dict) -> dict[str, object]:
    require_fields(payload, "serviceCost", "serviceName", "bookingId")
    cost = parse_number(payload["serviceCost"], "serviceCost")
    amount = to_minor_units(cost)
    if amount <= 0:
        raise InvalidPayload("serviceCost must be positive")

    booking_id = parse_id(payload["bookingId"], "bookingId")
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    ensure_same_email(booking.customer_email)
    if booking.payment_status == "paid":
        current_app.logger.info("Checkout requested for already paid booking %s", booking_id)
        return _already_paid(booking)

    site = current_app.config["SITE_DOMAIN"].rstrip("/")

    _configure_stripe()
    try:
        session = stripe.checkout.Session.create(
            mode="payment",
            line_items=[
                {
                    "price_data": {
                        "currency": current_app.config.get("CHECKOUT_CURRENCY", "usd"),
                        "unit_amount": amount,
                        "product_data": {"name": payload["serviceName"]},
                    },
                    "quantity": 1,
                }
            ],
            customer_email=normalize_email(payload.get("customerEmail")),
            metadata={
                "bookingId": str(booking_id),
                "serviceName": payload["serviceName"],
            },
            success_url=f"{site}/dashboard/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{site}/dashboard/payment-cancelled",
        )
    except stripe.StripeError as exc:
        current_app.logger.exception("Stripe API error while creating checkout session", exc_info=exc)
        raise PaymentProviderError("An error occurred while processing the payment.") from exc

    return {"url": session.url}


def _retrieve_session(session_id: str):
    _configure_stripe()
    try:
        return stripe.checkout.Session.retrieve(session_id)
    except stripe.StripeError as exc:
        current_app.logger.exception("Stripe API error while retrieving checkout session", exc_info=exc)
        raise PaymentProviderError("Failed to retrieve checkout session") from exc


def settle_checkout(session_id: str | None) -> dict[str, object]:
    """Record a paid checkout session exactly once per payment intent.

    A booking is settled at most once: a paid session for a booking that
    already carries another transaction leaves the booking untouched and
    answers with the receipt it already has.
    """
    if not session_id:
        raise InvalidPayload("session_id required")

    session = _retrieve_session(session_id)
    transaction_id = session.payment_intent

    existing = find_payment(transaction_id)
    if existing:
        return _already_paid(existing)

    if session.payment_status != "paid":
        current_app.logger.info("Checkout session %s not paid: %s", session_id, session.payment_status)
        return {"success": False}

    metadata = session.metadata or {}
    booking_id = parse_id(metadata.get("bookingId"), "bookingId")
    booking = db.session.get(Booking, booking_id)
    if booking is None:
        raise NotFound("Booking not found")
    if booking.payment_status == "paid":
        current_app.logger.warning(
            "Booking %s already paid by %s; ignoring payment_intent %s",
            booking_id, booking.transaction_id, transaction_id,
        )
        return _already_paid(booking)

    tracking_id = generate_tracking_id()
    booking.payment_status = "paid"
    booking.tracking_id = tracking_id
    booking.transaction_id = transaction_id

    payment = Payment(
        transaction_id=transaction_id,
        amount=session.amount_total / 100,
        currency=session.currency,
        customer_email=normalize_email(session.customer_email) or booking.customer_email,
        booking_id=booking.id,
        service_name=metadata.get("serviceName") or booking.service_name,
        payment_status=session.payment_status,
        tracking_id=tracking_id,
        paid_at=utc_now(),
    )
    db.session.add(payment)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning("Duplicate settlement attempt for payment_intent %s", transaction_id)
        existing = find_payment(transaction_id) or Payment.query.filter_by(booking_id=booking_id).first()
        if existing is None:
            raise
        return _already_paid(existing)

    current_app.logger.info("Settled booking %s with tracking id %s", booking.id, tracking_id)
    return {
        "success": True,
        "transactionId": transaction_id,
        "trackingId": tracking_id,
        "modifyBooking": update_result(1, 1),
        "paymentInfo": insert_result(payment),
    }


def payment_history(customer_email: str) -> list[dict[str, object]]:
    payments = (
        Payment.query.filter_by(customer_email=customer_email)
        .order_by(Payment.paid_at.desc(), Payment.id.desc())
        .all()
    )
    return [payment.to_dict() for payment in payments]
