"""Booking routes: customer CRUD, decorator views and admin analytics."""
from __future__ import annotations

from flask import Blueprint, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from . import bookings
from .errors import Forbidden, database_error
from .guards import ensure_same_email, is_admin, require_role, verify_token
from .validation import normalize_email

bp_bookings = Blueprint("bookings", __name__)


def _decorator_email_arg() -> str:
    email = normalize_email(request.args.get("decoratorEmail")) or g.identity_email
    ensure_same_email(email)
    return email


@bp_bookings.post("/bookings")
@verify_token
def create_booking() -> tuple[dict[str, object], int]:
    """Create a booking for the signed-in customer.
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          properties:
            customerEmail:
              type: string
            serviceId:
              type: integer
            date:
              type: string
              example: "2026-12-24"
            time:
              type: string
              example: "18:30"
            location:
              type: string
            notes:
              type: string
            totalUnit:
              type: number
            totalCost:
              type: number
          required:
            - serviceId
            - date
            - time
    responses:
      200:
        description: Insert result, or a message when the same slot is already booked
      400:
        description: Invalid payload
      401:
        description: Authentication required
      403:
        description: Booking on behalf of another customer
      404:
        description: Service not found
    """
    payload = request.get_json(silent=True) or {}
    try:
        result = bookings.create_booking(payload, g.identity_email)
    except SQLAlchemyError as exc:
        return database_error("Failed to create booking", exc)
    return jsonify(result), 200


@bp_bookings.get("/bookings")
@verify_token
def list_bookings():
    """List bookings, newest first. Without ``email`` only admins may list everything."""
    email = normalize_email(request.args.get("email"))
    if email:
        ensure_same_email(email)
    elif not is_admin(g.identity_email):
        raise Forbidden("forbidden access")
    return jsonify(bookings.list_customer_bookings(email)), 200


@bp_bookings.get("/bookings/<int:booking_id>")
@verify_token
def get_booking(booking_id: int):
    booking = bookings.get_booking(booking_id)
    if (booking.decorator_email or "") != g.identity_email:
        ensure_same_email(booking.customer_email)
    return jsonify(booking.to_dict()), 200


@bp_bookings.get("/bookings/decorator")
@verify_token
@require_role("decorator")
def decorator_bookings():
    status = request.args.get("status", "").strip() or None
    return jsonify(bookings.list_decorator_bookings(_decorator_email_arg(), status)), 200


@bp_bookings.get("/bookings/decorator/today")
@verify_token
@require_role("decorator")
def decorator_today():
    """Paid bookings scheduled for today (UTC), earliest first."""
    return jsonify(bookings.list_today_schedule(_decorator_email_arg())), 200


@bp_bookings.get("/bookings/decorator/earnings")
@verify_token
@require_role("decorator")
def decorator_earnings():
    return jsonify(bookings.decorator_earnings(_decorator_email_arg())), 200


@bp_bookings.patch("/bookings-update/<int:booking_id>")
@verify_token
def update_booking(booking_id: int):
    """Partially update a booking. Only keys present in the body are written.
    ---
    tags:
      - Bookings
    security:
      - Bearer: []
    responses:
      200:
        description: Update result, or a message when the new slot is already booked
      403:
        description: Not the booking owner or an admin
      404:
        description: Booking not found
    """
    payload = request.get_json(silent=True) or {}
    try:
        result = bookings.edit_booking(booking_id, payload)
    except SQLAlchemyError as exc:
        return database_error("Failed to update booking", exc)
    return jsonify(result), 200


@bp_bookings.delete("/bookings-delete/<int:booking_id>")
@verify_token
def delete_booking(booking_id: int):
    try:
        result = bookings.delete_booking(booking_id)
    except SQLAlchemyError as exc:
        return database_error("Failed to delete booking", exc)
    return jsonify(result), 200


@bp_bookings.patch("/bookings/<int:booking_id>/assign")
@verify_token
@require_role("admin")
def assign_decorator(booking_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        result = bookings.assign_decorator(booking_id, payload)
    except SQLAlchemyError as exc:
        return database_error("Failed to assign decorator", exc)
    return jsonify(result), 200


@bp_bookings.patch("/bookings/<int:booking_id>/status")
@verify_token
@require_role("decorator")
def update_booking_status(booking_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        result = bookings.change_status(booking_id, payload.get("status"), g.identity_email)
    except SQLAlchemyError as exc:
        return database_error("Failed to update booking status", exc)
    return jsonify(result), 200


@bp_bookings.get("/admin/analytics")
@verify_token
@require_role("admin")
def analytics():
    return jsonify(bookings.admin_analytics()), 200
