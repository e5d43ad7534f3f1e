"""Authorization guards applied to views as stacked decorators.

``verify_token`` establishes who is calling; ``require_role`` then maps that
identity onto a stored role. The role lookup hits the database on every
request.
"""
from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import current_app, g, request

from .errors import Forbidden, Unauthenticated
from .models import User


def _bearer_token() -> str:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise Unauthenticated("Authentication required. Please log in to continue.")
    token = auth_header[7:].strip()
    if not token:
        raise Unauthenticated("Authentication required. Please log in to continue.")
    return token


def authenticate() -> str:
    verifier = current_app.extensions["identity_verifier"]
    email = verifier.verify(_bearer_token())
    g.identity_email = email
    return email


def verify_token(view: Callable) -> Callable:
    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate()
        return view(*args, **kwargs)

    return wrapper


def require_role(*roles: str) -> Callable[[Callable], Callable]:
    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            email = g.get("identity_email") or authenticate()
            user = User.query.filter_by(email=email).first()
            if user is None or user.role not in roles:
                current_app.logger.info("Denied %s access to %s", email, request.path)
                raise Forbidden("forbidden access")
            g.current_user = user
            return view(*args, **kwargs)

        return wrapper

    return decorator


def is_admin(email: str) -> bool:
    return User.query.filter_by(email=email, role="admin").first() is not None


def ensure_same_email(email: str | None) -> None:
    """Reject acting on another identity's records unless the caller is an admin."""
    caller = g.identity_email
    if email and email.strip().lower() == caller.lower():
        return
    if is_admin(caller):
        return
    raise Forbidden("forbidden access")
