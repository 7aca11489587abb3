"""
Integration tests for host blocks, the month calendar and monthly stats.
"""

from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

HOST = {"X-User-Id": "host-1"}


@pytest.mark.integration
def test_block_lifecycle(client: TestClient, property_id: int) -> None:
    created = client.post(
        f"/properties/{property_id}/blocks",
        json={"check_in": "2025-01-01", "check_out": "2025-01-10", "reason": "owner stay"},
        headers=HOST,
    )
    assert created.status_code == 201
    assert created.json()["reason"] == "owner stay"

    split = client.delete(
        f"/properties/{property_id}/blocks",
        params={"check_in": "2025-01-04", "check_out": "2025-01-06"},
        headers=HOST,
    )
    assert split.status_code == 200
    assert [(b["check_in"], b["check_out"]) for b in split.json()["blocks"]] == [
        ("2025-01-01", "2025-01-04"),
        ("2025-01-06", "2025-01-10"),
    ]

    listed = client.get(f"/properties/{property_id}/blocks", headers=HOST)
    assert len(listed.json()["blocks"]) == 2


@pytest.mark.integration
def test_block_requires_host(client: TestClient, property_id: int) -> None:
    payload = {"check_in": "2025-01-01", "check_out": "2025-01-03"}

    assert client.post(f"/properties/{property_id}/blocks", json=payload).status_code == 401
    assert (
        client.post(
            f"/properties/{property_id}/blocks",
            json=payload,
            headers={"X-User-Id": "guest-1"},
        ).status_code
        == 404
    )


@pytest.mark.integration
def test_block_over_booking_conflicts(client: TestClient, property_id: int) -> None:
    client.post(
        "/bookings",
        json={
            "property_id": property_id,
            "check_in": "2025-01-10",
            "check_out": "2025-01-15",
            "guests": 2,
        },
        headers={"X-User-Id": "guest-1"},
    )

    response = client.post(
        f"/properties/{property_id}/blocks",
        json={"check_in": "2025-01-12", "check_out": "2025-01-13"},
        headers=HOST,
    )

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "conflict"


@pytest.mark.integration
def test_unblocking_unblocked_dates_is_not_found(client: TestClient, property_id: int) -> None:
    response = client.delete(
        f"/properties/{property_id}/blocks",
        params={"check_in": "2025-01-04", "check_out": "2025-01-06"},
        headers=HOST,
    )

    assert response.status_code == 404


@pytest.mark.integration
def test_calendar_month(client: TestClient, property_id: int) -> None:
    client.post(
        f"/properties/{property_id}/blocks",
        json={"check_in": "2025-01-20", "check_out": "2025-01-22", "reason": "maintenance"},
        headers=HOST,
    )

    response = client.get(
        f"/properties/{property_id}/calendar", params={"year": 2025, "month": 1}, headers=HOST
    )

    assert response.status_code == 200
    data = response.json()
    assert data["property_id"] == property_id
    assert len(data["days"]) == 42
    assert data["days"][0]["date"] == "2024-12-29"

    by_date = {day["date"]: day for day in data["days"]}
    assert by_date["2025-01-20"]["status"] == "blocked"
    assert by_date["2025-01-20"]["block_reason"] == "maintenance"
    assert by_date["2025-01-19"]["status"] == "available"
    assert by_date["2025-01-19"]["is_available"] is True
    assert Decimal(by_date["2025-01-19"]["price"]) == Decimal("500")


@pytest.mark.integration
def test_calendar_rejects_invalid_month(client: TestClient, property_id: int) -> None:
    response = client.get(
        f"/properties/{property_id}/calendar", params={"year": 2025, "month": 13}, headers=HOST
    )

    assert response.status_code == 422


@pytest.mark.integration
def test_monthly_stats(client: TestClient, property_id: int) -> None:
    booking_id = client.post(
        "/bookings",
        json={
            "property_id": property_id,
            "check_in": "2025-01-10",
            "check_out": "2025-01-15",
            "guests": 2,
        },
        headers={"X-User-Id": "guest-1"},
    ).json()["id"]
    client.post(f"/bookings/{booking_id}/confirm", headers=HOST)

    response = client.get(
        f"/properties/{property_id}/stats", params={"year": 2025, "month": 1}, headers=HOST
    )

    assert response.status_code == 200
    data = response.json()
    assert data["booking_count"] == 1
    assert data["booked_nights"] == 5
    assert data["days_in_month"] == 31
    assert Decimal(data["total_earnings"]) == Decimal("3100")
    assert Decimal(data["occupancy_rate"]) == Decimal("16.1")
    missing = client.get("/properties/404/stats", params={"year": 2025, "month": 1}, headers=HOST)
    assert missing.status_code == 404


@pytest.mark.integration
@pytest.mark.parametrize("path", ["blocks", "calendar", "stats"])
def test_calendar_views_are_host_only(client: TestClient, property_id: int, path: str) -> None:
    url = f"/properties/{property_id}/{path}"
    params = {"year": 2025, "month": 1}

    assert client.get(url, params=params).status_code == 401
    assert client.get(url, params=params, headers={"X-User-Id": "guest-1"}).status_code == 404
    assert client.get(url, params=params, headers=HOST).status_code == 200
