"""Comparison period calculator.

Weekly periods are 7-day blocks starting at the reference date; monthly
periods are calendar months. The sequence is most-recent first and every
period ends the day before the next-more-recent one starts.

Lead scoring uses a second, independent sequence whose reference is shifted
back (14 days weekly, 1 month monthly) so scores have time to mature.
"""
from __future__ import annotations

import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Optional

from growth_report.models import Granularity, Period

log = logging.getLogger(__name__)

SCORING_LAG_DAYS = 14
SCORING_LAG_MONTHS = 1


def _add_months(day: date, months: int) -> date:
    """Move `day` by whole months, clamping to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def _weekly_label(start: date, end: date) -> str:
    return f"{start:%d/%m} - {end:%d/%m}"


def reference_start(value: Optional[str], granularity: Granularity) -> Optional[date]:
    """Turn the caller's reference string into the current period's start.

    Weekly mode expects an ISO day (`2024-06-02`); monthly mode expects a
    year-month (`2024-03`) and also accepts an ISO day, using its month.
    Returns None when the reference is absent or malformed.
    """
    if value is None or not str(value).strip():
        return None
    text = str(value).strip()
    try:
        if granularity == "weekly":
            return date.fromisoformat(text[:10])
        if len(text) == 7:
            return datetime.strptime(text, "%Y-%m").date()
        return date.fromisoformat(text[:10]).replace(day=1)
    except ValueError:
        log.warning("Unusable reference date %r for %s periods", text, granularity)
        return None


def comparison_periods(start: date, granularity: Granularity, count: int = 4) -> list[Period]:
    """Return `count` periods, most recent first, anchored at `start`.

    Args:
        start: Reference date. For monthly granularity any day of the month
            selects that month.
        granularity: `weekly` or `monthly`.
        count: Number of periods (at least 2 for a current/previous comparison).

    Raises:
        ValueError: if `count` is below 2 or the granularity is unknown.
    """
    if count < 2:
        raise ValueError("at least two periods are needed for a comparison")

    periods: list[Period] = []
    if granularity == "weekly":
        for i in range(count):
            p_start = start - timedelta(days=7 * i)
            p_end = p_start + timedelta(days=6)
            periods.append(Period(label=_weekly_label(p_start, p_end), start=p_start, end=p_end))
    elif granularity == "monthly":
        first = start.replace(day=1)
        for i in range(count):
            p_start = _add_months(first, -i)
            last = calendar.monthrange(p_start.year, p_start.month)[1]
            p_end = p_start.replace(day=last)
            periods.append(Period(label=f"{p_start:%m/%Y}", start=p_start, end=p_end))
    else:
        raise ValueError(f"unknown granularity: {granularity!r}")
    return periods


def shift_reference(
    start: date,
    granularity: Granularity,
    days: int = SCORING_LAG_DAYS,
    months: int = SCORING_LAG_MONTHS,
) -> date:
    """Shift a reference date backwards: `days` in weekly mode, `months` in monthly mode."""
    if granularity == "weekly":
        return start - timedelta(days=days)
    return _add_months(start.replace(day=1), -months)


def scoring_periods(start: date, granularity: Granularity, count: int = 4) -> list[Period]:
    """Return the maturation-lagged periods used by the lead-scoring pipeline."""
    return comparison_periods(shift_reference(start, granularity), granularity, count)
