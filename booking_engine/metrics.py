"""
Prometheus metrics for availability checks, booking writes and calendar locking.

This module defines all Prometheus metrics used throughout the application for
observability and monitoring. Metrics are exposed via the /metrics endpoint for
scraping by Prometheus.

Example:
    >>> from booking_engine.metrics import bookings_created
    >>> bookings_created.labels(status="PENDING").inc()
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

# =============================================================================
# Availability Metrics
# =============================================================================

availability_checks = Counter(
    "booking_engine_availability_checks_total",
    "Total availability checks by outcome",
    ["result"],
)
"""
Counter for availability checks.

Labels:
    result: "available" or the error code that rejected the range
"""

# =============================================================================
# Booking Metrics
# =============================================================================

bookings_created = Counter(
    "booking_engine_bookings_created_total",
    "Total bookings created, by initial status",
    ["status"],
)

booking_rejections = Counter(
    "booking_engine_booking_rejections_total",
    "Total createBooking calls rejected, by error code",
    ["code"],
)
"""
Counter for rejected booking requests.

Labels:
    code: Engine error code (e.g. date_conflict, stay_length, calendar_busy)
"""

booking_transitions = Counter(
    "booking_engine_booking_transitions_total",
    "Total booking status transitions",
    ["from_status", "to_status"],
)

idempotent_replays = Counter(
    "booking_engine_idempotent_replays_total",
    "Total createBooking calls answered from an existing idempotency key",
)

# =============================================================================
# Block Metrics
# =============================================================================

block_mutations = Counter(
    "booking_engine_block_mutations_total",
    "Total host block mutations",
    ["operation", "status"],
)
"""
Counter for host block changes.

Labels:
    operation: add or remove
    status: success or the error code
"""

# =============================================================================
# Calendar Lock Metrics
# =============================================================================

calendar_lock_wait = Histogram(
    "booking_engine_calendar_lock_wait_seconds",
    "Time spent waiting for a property's calendar lock",
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)

calendar_lock_hold = Histogram(
    "booking_engine_calendar_lock_hold_seconds",
    "Time a property's calendar lock was held by a write",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, float("inf")),
)
"""
Histogram for calendar lock hold time.

Labels:
    operation: create_booking, confirm_booking, cancel_booking, complete_booking,
               add_block, remove_block
"""
