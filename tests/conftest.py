"""pytest configuration: path management and shared app fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the project root is available on sys.path so tests can import the app package.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from styledecor import create_app  # noqa: E402
from styledecor.config import TestingConfig  # noqa: E402
from styledecor.extensions import db  # noqa: E402
from styledecor.models import Booking, Decorator, Service, User  # noqa: E402


@pytest.fixture
def app():
    flask_app = create_app(TestingConfig)
    with flask_app.app_context():
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Return a callable producing an Authorization header for an email."""

    def _headers(email: str) -> dict[str, str]:
        token = app.extensions["identity_verifier"].issue(email)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_user(app):
    def _make(email: str, role: str = "user", name: str = "Test User") -> int:
        with app.app_context():
            user = User(email=email, name=name, role=role)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture
def make_service(app):
    def _make(name: str = "Wedding Stage", category: str = "wedding", cost: float = 100.0) -> int:
        with app.app_context():
            service = Service(service_name=name, service_category=category, cost=cost, unit="per event")
            db.session.add(service)
            db.session.commit()
            return service.id

    return _make


@pytest.fixture
def make_decorator(app):
    def _make(email: str, status: str = "approved", work_status: str | None = "available",
              specialities: list[str] | None = None, name: str = "Dana Decorator") -> int:
        with app.app_context():
            decorator = Decorator(
                email=email,
                name=name,
                status=status,
                work_status=work_status,
                specialities=specialities or ["wedding"],
            )
            db.session.add(decorator)
            db.session.commit()
            return decorator.id

    return _make


@pytest.fixture
def make_booking(app):
    def _make(customer_email: str, service_id: int, **fields) -> int:
        values = {
            "date": "2026-12-24",
            "time": "18:00",
            "service_name": "Wedding Stage",
            "total_cost": 100.0,
        }
        values.update(fields)
        with app.app_context():
            booking = Booking(customer_email=customer_email, service_id=service_id, **values)
            db.session.add(booking)
            db.session.commit()
            return booking.id

    return _make
