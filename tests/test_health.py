"""Smoke tests for the health endpoints."""
from __future__ import annotations

from styledecor import create_app


def test_health_endpoint() -> None:
    app = create_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:"})
    client = app.test_client()

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json == {"status": "ok"}


def test_root_reports_running(client) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert response.get_data(as_text=True) == "server running fine"


def test_db_health(client) -> None:
    response = client.get("/db-health")

    assert response.status_code == 200
    assert response.json == {"database": "ok"}
