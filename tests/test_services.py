"""Tests for the service catalogue endpoints."""
from __future__ import annotations

from styledecor.extensions import db
from styledecor.models import Service


def _seed_catalogue(make_service) -> dict[str, int]:
    return {
        "stage": make_service("Wedding Stage Decoration", "wedding", 1500.0),
        "balloons": make_service("Birthday Balloon Setup", "birthday", 120.0),
        "lights": make_service("Garden Wedding Lights", "wedding", 300.0),
    }


def test_all_services_filters(client, make_service) -> None:
    _seed_catalogue(make_service)

    by_text = client.get("/all-services?searchText=WEDDING").get_json()
    assert {s["serviceName"] for s in by_text} == {
        "Wedding Stage Decoration",
        "Garden Wedding Lights",
    }

    by_type = client.get("/all-services?serviceType=birthday").get_json()
    assert [s["serviceName"] for s in by_type] == ["Birthday Balloon Setup"]

    by_budget = client.get("/all-services?minBudget=120&maxBudget=300").get_json()
    assert {s["cost"] for s in by_budget} == {120.0, 300.0}


def test_search_text_wildcards_match_literally(client, make_service) -> None:
    make_service("50% Off Party Pack", "birthday", 80.0)
    make_service("500 Candle Evening", "wedding", 400.0)
    make_service("Kids_Corner Setup", "birthday", 90.0)
    make_service("Kids Corner Deluxe", "birthday", 150.0)

    percent = client.get("/all-services?searchText=50%25").get_json()
    assert [s["serviceName"] for s in percent] == ["50% Off Party Pack"]

    underscore = client.get("/all-services?searchText=kids_").get_json()
    assert [s["serviceName"] for s in underscore] == ["Kids_Corner Setup"]


def test_all_services_rejects_non_numeric_budget(client) -> None:
    response = client.get("/all-services?minBudget=cheap")

    assert response.status_code == 400
    assert response.get_json()["error"] == "invalid_payload"


def test_featured_services_limited_to_eight(client, make_service) -> None:
    for index in range(10):
        make_service(f"Service {index}", "home", 10.0 + index)

    response = client.get("/featured-services")

    assert response.status_code == 200
    assert len(response.get_json()) == 8


def test_get_service_not_found(client) -> None:
    response = client.get("/services/999")

    assert response.status_code == 404
    assert response.get_json()["error"] == "not_found"


def test_admin_service_crud(app, client, make_user, auth_headers) -> None:
    make_user("admin@example.com", role="admin")
    headers = auth_headers("admin@example.com")

    created = client.post(
        "/services",
        json={"serviceName": "Office Styling", "serviceCategory": "office", "cost": "600", "unit": "per event"},
        headers=headers,
    )
    assert created.status_code == 201
    service_id = created.get_json()["insertedId"]

    # Partial update leaves untouched fields alone.
    updated = client.patch(f"/services/{service_id}", json={"cost": 650}, headers=headers)
    assert updated.status_code == 200
    assert updated.get_json()["modifiedCount"] == 1

    with app.app_context():
        service = db.session.get(Service, service_id)
        assert service.cost == 650.0
        assert service.service_category == "office"
        assert service.unit == "per event"
        assert service.created_by_email == "admin@example.com"

    deleted = client.delete(f"/services/{service_id}", headers=headers)
    assert deleted.get_json()["deletedCount"] == 1
    assert client.get(f"/services/{service_id}").status_code == 404


def test_service_management_requires_admin(client, make_user, auth_headers) -> None:
    make_user("casey@example.com")
    payload = {"serviceName": "Office Styling", "cost": 600}

    assert client.post("/services", json=payload).status_code == 401
    response = client.post("/services", json=payload, headers=auth_headers("casey@example.com"))
    assert response.status_code == 403
    assert response.get_json()["error"] == "forbidden"


def test_create_service_validates_payload(client, make_user, auth_headers) -> None:
    make_user("admin@example.com", role="admin")
    headers = auth_headers("admin@example.com")

    missing = client.post("/services", json={"serviceName": "No Cost"}, headers=headers)
    assert missing.status_code == 400

    bad_cost = client.post("/services", json={"serviceName": "Bad", "cost": "abc"}, headers=headers)
    assert bad_cost.status_code == 400
