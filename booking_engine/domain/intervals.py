"""
Half-open date intervals over calendar days.

A ``DateInterval`` covers ``[start, end)``: the check-in day is included and the
check-out day is not, so a stay ending on the 10th and one starting on the 10th
do not overlap. Malformed intervals are rejected at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterator

from booking_engine.errors import InvalidIntervalError


@dataclass(frozen=True, order=True)
class DateInterval:
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.end <= self.start:
            raise InvalidIntervalError(self.start, self.end)

    @property
    def nights(self) -> int:
        return (self.end - self.start).days

    def days(self) -> Iterator[date]:
        """Yield every covered day (i.e. each night's date)."""
        for offset in range(self.nights):
            yield self.start + timedelta(days=offset)

    def to_dict(self) -> dict[str, str]:
        return {"check_in": self.start.isoformat(), "check_out": self.end.isoformat()}


def overlaps(a: DateInterval, b: DateInterval) -> bool:
    return a.start < b.end and b.start < a.end


def nights(a: DateInterval) -> int:
    return a.nights


def contains_day(a: DateInterval, day: date) -> bool:
    return a.start <= day < a.end


def contains(outer: DateInterval, inner: DateInterval) -> bool:
    return outer.start <= inner.start and inner.end <= outer.end


def adjacent_or_overlapping(a: DateInterval, b: DateInterval) -> bool:
    """True when the two ranges touch or share a day and could be merged."""
    return a.start <= b.end and b.start <= a.end


def merge(a: DateInterval, b: DateInterval) -> DateInterval:
    return DateInterval(min(a.start, b.start), max(a.end, b.end))


def intersection(a: DateInterval, b: DateInterval) -> DateInterval | None:
    if not overlaps(a, b):
        return None
    return DateInterval(max(a.start, b.start), min(a.end, b.end))


def subtract(a: DateInterval, b: DateInterval) -> list[DateInterval]:
    """
    Remove ``b`` from ``a``.

    Returns zero, one or two intervals: the part of ``a`` before ``b`` and the
    part after it.
    """
    if not overlaps(a, b):
        return [a]
    remainder = []
    if a.start < b.start:
        remainder.append(DateInterval(a.start, b.start))
    if b.end < a.end:
        remainder.append(DateInterval(b.end, a.end))
    return remainder
