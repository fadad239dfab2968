import pytest
from datetime import date

from resourcehub.engine.weeks import (
    bucket_start,
    iter_days,
    ranges_overlap,
    week_end,
    week_start,
    weeks_between,
)


def test_week_start_rolls_back_to_monday():
    assert week_start(date(2024, 1, 1)) == date(2024, 1, 1)  # Monday
    assert week_start(date(2024, 1, 7)) == date(2024, 1, 1)  # Sunday
    assert week_start(date(2024, 1, 10)) == date(2024, 1, 8)
    assert week_end(date(2024, 1, 3)) == date(2024, 1, 7)


def test_single_day_touches_one_week():
    assert weeks_between(date(2024, 1, 1), date(2024, 1, 1)) == [date(2024, 1, 1)]


def test_sunday_to_monday_touches_two_weeks():
    assert weeks_between(date(2024, 1, 7), date(2024, 1, 8)) == [
        date(2024, 1, 1),
        date(2024, 1, 8),
    ]


def test_weeks_between_spans_year_boundary():
    weeks = weeks_between(date(2023, 12, 28), date(2024, 1, 10))
    assert weeks == [date(2023, 12, 25), date(2024, 1, 1), date(2024, 1, 8)]


def test_weeks_between_inverted_range_is_empty():
    assert weeks_between(date(2024, 1, 10), date(2024, 1, 1)) == []


def test_ranges_overlap_is_inclusive():
    assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 7), date(2024, 1, 7), date(2024, 1, 9))
    assert not ranges_overlap(date(2024, 1, 1), date(2024, 1, 6), date(2024, 1, 7), date(2024, 1, 9))


@pytest.mark.parametrize("granularity,expected", [
    ("daily", date(2024, 2, 15)),
    ("weekly", date(2024, 2, 12)),
    ("monthly", date(2024, 2, 1)),
])
def test_bucket_start(granularity, expected):
    assert bucket_start(date(2024, 2, 15), granularity) == expected


def test_bucket_start_rejects_unknown_granularity():
    with pytest.raises(ValueError):
        bucket_start(date(2024, 2, 15), "hourly")


def test_iter_days_inclusive():
    days = list(iter_days(date(2024, 2, 27), date(2024, 3, 1)))
    assert days == [date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
