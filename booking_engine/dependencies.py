"""
FastAPI dependency injection providers.

Dependencies can be overridden in tests using app.dependency_overrides, making
it easy to point routes at a throwaway database or pin the current day.
"""

from __future__ import annotations

from datetime import date
from typing import Generator

from fastapi import Header, HTTPException, status
from sqlalchemy.engine import Engine

from booking_engine.db.engine import engine
from booking_engine.utils.datetime import utc_today


def get_db_engine() -> Generator[Engine, None, None]:
    """
    Provide database engine for dependency injection.

    Yields:
        Engine: SQLAlchemy database engine

    Testing Example:
        >>> app.dependency_overrides[get_db_engine] = lambda: sqlite_engine
        >>> client = TestClient(app)
    """
    yield engine


def get_today() -> date:
    """
    Provide the reference day for date policy checks.

    Override in tests to make past-date and advance-booking rules deterministic.
    """
    return utc_today()


def get_current_user_id(x_user_id: str | None = Header(None)) -> str:
    """
    Return the caller's user ID as supplied by the identity provider.

    The upstream gateway authenticates the request and forwards the opaque ID in
    the X-User-Id header; the engine trusts it as-is.

    Raises:
        HTTPException: 401 if the header is missing
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
        )
    return x_user_id
