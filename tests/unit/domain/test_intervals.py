"""
Unit tests for half-open date intervals.
"""

from __future__ import annotations

from datetime import date

import pytest

from booking_engine.domain.intervals import (
    DateInterval,
    adjacent_or_overlapping,
    contains,
    contains_day,
    intersection,
    merge,
    nights,
    overlaps,
    subtract,
)
from booking_engine.errors import InvalidIntervalError


def d(day: int, month: int = 1) -> date:
    return date(2025, month, day)


@pytest.mark.unit
def test_interval_rejects_zero_night_range() -> None:
    """Test that start == end is rejected at construction."""
    with pytest.raises(InvalidIntervalError) as exc_info:
        DateInterval(d(10), d(10))

    assert exc_info.value.details == {"check_in": "2025-01-10", "check_out": "2025-01-10"}


@pytest.mark.unit
def test_interval_rejects_inverted_range() -> None:
    with pytest.raises(InvalidIntervalError):
        DateInterval(d(12), d(10))


@pytest.mark.unit
def test_nights_counts_days_between_start_and_end() -> None:
    """Test that Jan 10 -> Jan 15 is five nights, across a month boundary too."""
    assert nights(DateInterval(d(10), d(15))) == 5
    assert DateInterval(d(30), d(2, month=2)).nights == 3


@pytest.mark.unit
def test_days_yields_each_night_but_not_checkout_day() -> None:
    interval = DateInterval(d(30), d(2, month=2))

    assert list(interval.days()) == [d(30), d(31), d(1, month=2)]


@pytest.mark.unit
def test_back_to_back_stays_do_not_overlap() -> None:
    """Test that a stay ending on the 15th and one starting on the 15th can coexist."""
    first = DateInterval(d(10), d(15))
    second = DateInterval(d(15), d(18))

    assert not overlaps(first, second)
    assert not overlaps(second, first)
    assert adjacent_or_overlapping(first, second)


@pytest.mark.unit
def test_overlap_is_symmetric_for_shared_night() -> None:
    first = DateInterval(d(10), d(15))
    second = DateInterval(d(14), d(20))

    assert overlaps(first, second)
    assert overlaps(second, first)


@pytest.mark.unit
def test_overlap_when_one_range_contains_the_other() -> None:
    outer = DateInterval(d(1), d(31))
    inner = DateInterval(d(10), d(11))

    assert overlaps(outer, inner)
    assert contains(outer, inner)
    assert not contains(inner, outer)


@pytest.mark.unit
def test_contains_day_excludes_checkout_day() -> None:
    interval = DateInterval(d(10), d(15))

    assert contains_day(interval, d(10))
    assert contains_day(interval, d(14))
    assert not contains_day(interval, d(15))
    assert not contains_day(interval, d(9))


@pytest.mark.unit
def test_ranges_with_a_gap_are_not_adjacent() -> None:
    assert not adjacent_or_overlapping(DateInterval(d(1), d(5)), DateInterval(d(6), d(8)))


@pytest.mark.unit
def test_merge_spans_both_ranges() -> None:
    merged = merge(DateInterval(d(10), d(15)), DateInterval(d(15), d(20)))

    assert merged == DateInterval(d(10), d(20))


@pytest.mark.unit
def test_intersection_returns_shared_nights_or_none() -> None:
    a = DateInterval(d(10), d(20))

    assert intersection(a, DateInterval(d(15), d(25))) == DateInterval(d(15), d(20))
    assert intersection(a, DateInterval(d(20), d(25))) is None


@pytest.mark.unit
def test_subtract_middle_splits_in_two() -> None:
    """Test that unblocking the middle of a range leaves the days on either side."""
    pieces = subtract(DateInterval(d(1), d(10)), DateInterval(d(4), d(6)))

    assert pieces == [DateInterval(d(1), d(4)), DateInterval(d(6), d(10))]


@pytest.mark.unit
def test_subtract_edges_and_whole() -> None:
    block = DateInterval(d(1), d(10))

    assert subtract(block, DateInterval(d(1), d(3))) == [DateInterval(d(3), d(10))]
    assert subtract(block, DateInterval(d(8), d(10))) == [DateInterval(d(1), d(8))]
    assert subtract(block, block) == []
    assert subtract(block, DateInterval(d(12), d(14))) == [block]


@pytest.mark.unit
def test_to_dict_uses_iso_dates() -> None:
    assert DateInterval(d(10), d(15)).to_dict() == {
        "check_in": "2025-01-10",
        "check_out": "2025-01-15",
    }
