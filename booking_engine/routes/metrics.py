"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP booking_engine_bookings_created_total Bookings created
        # TYPE booking_engine_bookings_created_total counter
        booking_engine_bookings_created_total{status="pending"} 3.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Expose availability, booking and calendar-lock metrics in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
