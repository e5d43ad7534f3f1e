"""Tests for decorator earnings and admin analytics aggregations."""
from __future__ import annotations

DECORATOR = "dana@example.com"
CUSTOMER = "casey@example.com"


def test_earnings_without_matches_are_zero(client, make_user, auth_headers) -> None:
    make_user(DECORATOR, role="decorator")

    response = client.get("/bookings/decorator/earnings", headers=auth_headers(DECORATOR))

    assert response.status_code == 200
    assert response.get_json() == {
        "decoratorEmail": DECORATOR,
        "totalEarnings": 0.0,
        "completedCount": 0,
    }


def test_earnings_count_only_paid_completed(client, make_user, make_service, make_booking, auth_headers) -> None:
    make_user(DECORATOR, role="decorator")
    service_id = make_service()
    make_booking(CUSTOMER, service_id, time="09:00", decorator_email=DECORATOR,
                 status="completed", payment_status="paid", total_cost=250.0)
    make_booking(CUSTOMER, service_id, time="10:00", decorator_email=DECORATOR,
                 status="completed", payment_status="paid", total_cost=150.0)
    make_booking(CUSTOMER, service_id, time="11:00", decorator_email=DECORATOR,
                 status="completed", payment_status="unpaid", total_cost=999.0)
    make_booking(CUSTOMER, service_id, time="12:00", decorator_email=DECORATOR,
                 status="decorator assigned", payment_status="paid", total_cost=999.0)

    body = client.get("/bookings/decorator/earnings", headers=auth_headers(DECORATOR)).get_json()

    assert body["totalEarnings"] == 400.0
    assert body["completedCount"] == 2


def test_earnings_require_decorator_role(client, make_user, auth_headers) -> None:
    make_user(CUSTOMER)

    response = client.get("/bookings/decorator/earnings", headers=auth_headers(CUSTOMER))

    assert response.status_code == 403


def test_admin_analytics(client, make_user, make_service, make_booking, auth_headers) -> None:
    make_user("admin@example.com", role="admin")
    service_id = make_service()
    make_booking(CUSTOMER, service_id, time="09:00", service_name="Wedding Stage",
                 payment_status="paid", total_cost=300.0)
    make_booking(CUSTOMER, service_id, time="10:00", service_name="Wedding Stage",
                 payment_status="unpaid", total_cost=300.0)
    make_booking(CUSTOMER, service_id, time="11:00", service_name="Balloon Setup",
                 payment_status="paid", total_cost=120.0)

    response = client.get("/admin/analytics", headers=auth_headers("admin@example.com"))

    assert response.status_code == 200
    body = response.get_json()
    assert body["totalIncome"] == 420.0
    assert body["totalBookings"] == 3
    assert body["bookingsPerService"] == [
        {"serviceName": "Wedding Stage", "count": 2},
        {"serviceName": "Balloon Setup", "count": 1},
    ]


def test_admin_analytics_empty(client, make_user, auth_headers) -> None:
    make_user("admin@example.com", role="admin")

    body = client.get("/admin/analytics", headers=auth_headers("admin@example.com")).get_json()

    assert body == {"totalIncome": 0.0, "totalBookings": 0, "bookingsPerService": []}
