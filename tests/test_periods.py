from __future__ import annotations

from datetime import date

import pytest

from growth_report.aggregate.periods import (
    comparison_periods,
    reference_start,
    scoring_periods,
    shift_reference,
)


def test_weekly_periods_are_seven_day_blocks() -> None:
    periods = comparison_periods(date(2024, 6, 2), "weekly", 4)
    assert periods[0].start == date(2024, 6, 2)
    assert periods[0].end == date(2024, 6, 8)
    assert periods[1].start == date(2024, 5, 26)
    assert periods[1].end == date(2024, 6, 1)
    assert periods[0].label == "02/06 - 08/06"
    assert len(periods) == 4


def test_monthly_periods_follow_calendar_months() -> None:
    periods = comparison_periods(date(2024, 3, 1), "monthly", 3)
    assert (periods[0].start, periods[0].end) == (date(2024, 3, 1), date(2024, 3, 31))
    assert (periods[1].start, periods[1].end) == (date(2024, 2, 1), date(2024, 2, 29))
    assert (periods[2].start, periods[2].end) == (date(2024, 1, 1), date(2024, 1, 31))
    assert periods[0].label == "03/2024"


def test_monthly_periods_cross_year_boundary() -> None:
    periods = comparison_periods(date(2024, 1, 15), "monthly", 2)
    assert periods[1].start == date(2023, 12, 1)
    assert periods[1].end == date(2023, 12, 31)


@pytest.mark.parametrize("granularity", ["weekly", "monthly"])
def test_periods_strictly_descending_and_contiguous(granularity: str) -> None:
    periods = comparison_periods(date(2024, 3, 10), granularity, 6)
    for newer, older in zip(periods, periods[1:]):
        assert newer.start > older.end
        assert (newer.start - older.end).days == 1
        assert older.start <= older.end


def test_comparison_needs_two_periods() -> None:
    with pytest.raises(ValueError):
        comparison_periods(date(2024, 6, 2), "weekly", 1)


def test_reference_start_parsing() -> None:
    assert reference_start("2024-06-02", "weekly") == date(2024, 6, 2)
    assert reference_start("2024-03", "monthly") == date(2024, 3, 1)
    assert reference_start("2024-03-17", "monthly") == date(2024, 3, 1)
    assert reference_start("", "weekly") is None
    assert reference_start(None, "monthly") is None
    assert reference_start("2024-13", "monthly") is None


def test_scoring_periods_are_shifted_by_maturation_lag() -> None:
    assert shift_reference(date(2024, 6, 2), "weekly") == date(2024, 5, 19)
    assert shift_reference(date(2024, 3, 1), "monthly") == date(2024, 2, 1)
    assert shift_reference(date(2024, 6, 2), "weekly", days=7) == date(2024, 5, 26)

    weekly = scoring_periods(date(2024, 6, 2), "weekly", 2)
    assert (weekly[0].start, weekly[0].end) == (date(2024, 5, 19), date(2024, 5, 25))
    monthly = scoring_periods(date(2024, 3, 1), "monthly", 2)
    assert (monthly[0].start, monthly[0].end) == (date(2024, 2, 1), date(2024, 2, 29))
