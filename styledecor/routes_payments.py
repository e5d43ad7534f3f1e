"""Payment routes: Stripe Checkout start, settlement and receipts."""
from __future__ import annotations

from flask import Blueprint, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from . import settlement
from .errors import database_error
from .guards import ensure_same_email, verify_token
from .validation import normalize_email

bp_payments = Blueprint("payments", __name__)


@bp_payments.post("/payment-checkout-session")
@verify_token
def create_checkout_session() -> tuple[dict[str, object], int]:
    """Start a hosted Stripe Checkout session for a booking.
    ---
    tags:
      - Payments
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            serviceCost:
              type: number
            serviceName:
              type: string
            bookingId:
              type: integer
            customerEmail:
              type: string
          required:
            - serviceCost
            - serviceName
            - bookingId
    responses:
      200:
        description: Redirect URL of the hosted checkout page, or a message when the booking is already paid
      400:
        description: Invalid payload
      401:
        description: Authentication required
      403:
        description: Not the booking owner or an admin
      404:
        description: Booking not found
      500:
        description: Payments not configured
      502:
        description: Stripe API error
    """
    payload = request.get_json(silent=True) or {}
    if payload.get("customerEmail"):
        ensure_same_email(payload["customerEmail"])
    else:
        payload["customerEmail"] = g.identity_email
    return jsonify(settlement.start_checkout(payload)), 200


@bp_payments.patch("/payment-success")
@verify_token
def payment_success():
    """Settle a checkout session by id. Safe to call more than once."""
    session_id = request.args.get("session_id", "").strip() or None
    try:
        result = settlement.settle_checkout(session_id)
    except SQLAlchemyError as exc:
        return database_error("Failed to record payment", exc)
    return jsonify(result), 200


@bp_payments.get("/payment-history")
@verify_token
def payment_history():
    email = normalize_email(request.args.get("email")) or g.identity_email
    ensure_same_email(email)
    return jsonify(settlement.payment_history(email)), 200
