"""
Shared fixtures for the booking engine tests.

booking_engine.config refuses to import without DATABASE_URL and ALLOWED_ORIGINS,
so both are set before any test module imports the package. Integration tests
never touch that default database: each gets its own SQLite file.
"""

from __future__ import annotations

import os
from datetime import date, time
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Generator

os.environ.setdefault("DATABASE_URL", "sqlite:///./booking_engine_test.db")
os.environ.setdefault("ALLOWED_ORIGINS", "*")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from sqlalchemy.engine import Engine

from booking_engine.db.engine import build_engine
from booking_engine.db.writers.properties import upsert_property
from booking_engine.models.base import Base
from booking_engine.models.blocks import BlockedRange  # noqa: F401
from booking_engine.models.bookings import Booking  # noqa: F401
from booking_engine.models.properties import Property  # noqa: F401

# Fixed reference day used wherever "today" matters
TODAY = date(2024, 12, 1)

HOST_ID = "host-1"
GUEST_ID = "guest-1"


def property_data(**overrides: Any) -> dict[str, Any]:
    """Catalog values for a test property: 500 AED/night, 100 cleaning, 15% fee, 5% tax."""
    data: dict[str, Any] = {
        "host_id": HOST_ID,
        "title": "Marina View Apartment",
        "max_guests": 4,
        "is_active": True,
        "base_price": Decimal("500.00"),
        "cleaning_fee": Decimal("100.00"),
        "security_deposit": Decimal("1000.00"),
        "service_fee_rate": Decimal("0.15"),
        "tax_rate": Decimal("0.05"),
        "currency": "AED",
        "min_stay_nights": 1,
        "max_stay_nights": 30,
        "advance_booking_days": None,
        "check_in_time": time(15, 0),
        "check_out_time": time(11, 0),
        "instant_book_enabled": False,
    }
    data.update(overrides)
    return data


@pytest.fixture
def test_engine(tmp_path: Path) -> Generator[Engine, None, None]:
    """A fresh SQLite database file with all tables created."""
    engine = build_engine(f"sqlite:///{tmp_path / 'booking_engine.db'}")
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def make_property(test_engine: Engine) -> Callable[..., int]:
    """Factory that upserts a property and returns its ID."""

    def _make(property_id: int = 1, **overrides: Any) -> int:
        with test_engine.begin() as conn:
            upsert_property(conn, property_id, property_data(**overrides))
        return property_id

    return _make


@pytest.fixture
def property_id(make_property: Callable[..., int]) -> int:
    """A default active property (ID 1) requiring host approval."""
    return make_property()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def client(test_engine: Engine) -> Generator[Any, None, None]:
    """TestClient for the app, wired to the test database and the fixed TODAY."""
    from fastapi.testclient import TestClient

    from booking_engine.dependencies import get_db_engine, get_today
    from booking_engine.main import app

    app.dependency_overrides[get_db_engine] = lambda: test_engine
    app.dependency_overrides[get_today] = lambda: TODAY

    yield TestClient(app)

    app.dependency_overrides.clear()
