"""Field parsers for localized export values.

Every parser is total: malformed or empty input yields a neutral value
(`None` for dates, 0 for numbers) instead of raising, so one bad field never
aborts an aggregation.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from statistics import median
from typing import Any, Iterable, Mapping, Optional, Sequence

from growth_report.models import ScoreStats

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")
_LEADING_FLOAT_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)")
_MONEY_STRIP_RE = re.compile(r"[^0-9,.\-]")

_LOCAL_DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y")
_EMAIL_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d-%m-%Y", "%d/%m/%Y")


def _date_part(value: Any) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    # drop time-of-day suffix ("03/06/2024 14:22:10", "2024-06-03T10:00")
    return re.split(r"[ T]", text, maxsplit=1)[0]


def _parse_with(text: str, formats: Sequence[str]) -> Optional[date]:
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def parse_local_date(value: Any) -> Optional[date]:
    """Parse a day/month/year date used by signup and transaction exports."""
    text = _date_part(value)
    if not text:
        return None
    return _parse_with(text, _LOCAL_DATE_FORMATS)


def parse_email_platform_date(value: Any) -> Optional[date]:
    """Parse the email platform's sending date.

    The platform exports ISO dates (optionally with a time) but older exports
    use day-first dates, so ISO is tried first.
    """
    text = _date_part(value)
    if not text:
        return None
    return _parse_with(text, _EMAIL_DATE_FORMATS)


def parse_money(value: Any) -> float:
    """Parse `R$ 1.234,56` style amounts; non-numeric input is 0."""
    if value is None:
        return 0.0
    text = _MONEY_STRIP_RE.sub("", str(value))
    text = text.replace(".", "").replace(",", ".")
    try:
        return float(text)
    except ValueError:
        return 0.0


def parse_percent_rate(value: Any) -> float:
    """Parse `45,3%` style rates into a 0-100 number; non-numeric input is 0."""
    if value is None:
        return 0.0
    text = re.sub(r"\s", "", str(value)).replace("%", "")
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    match = _LEADING_FLOAT_RE.match(text)
    return float(match.group(0)) if match else 0.0


def parse_count(value: Any) -> int:
    """Parse an integer count that may use `.` as thousands separator.

    Dots are only treated as grouping when no comma is present; parsing
    stops at the first non-digit, so `1,5` reads as 1.
    """
    if value is None:
        return 0
    text = re.sub(r"\s", "", str(value))
    if "." in text and "," not in text:
        text = text.replace(".", "")
    match = _LEADING_INT_RE.match(text)
    return int(match.group(0)) if match else 0


def parse_score(value: Any) -> Optional[float]:
    """Parse a lead score with comma decimal separator.

    An empty score counts as 0; a score that does not start with a number
    cannot be placed in any bucket and returns None.
    """
    if value is None:
        return 0.0
    text = str(value).strip()
    if not text:
        return 0.0
    match = _LEADING_FLOAT_RE.match(text.replace(",", ".", 1))
    return float(match.group(0)) if match else None


def round_cents(value: float) -> float:
    """Round to two decimals with halves going up (10.125 -> 10.13)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def mean_and_median(numbers: Iterable[float]) -> ScoreStats:
    """Return mean and median rounded half up to two decimals; empty input is (0, 0)."""
    values = sorted(float(n) for n in numbers)
    if not values:
        return ScoreStats(mean=0.0, median=0.0)
    return ScoreStats(
        mean=round_cents(sum(values) / len(values)),
        median=round_cents(median(values)),
    )


def resolve_field(record: Optional[Mapping[str, Any]], candidate_keys: Sequence[str]) -> Optional[Any]:
    """Return the value of the first candidate key that is present and non-empty."""
    if not record:
        return None
    for key in candidate_keys:
        value = record.get(key)
        if value is None or value == "":
            continue
        if isinstance(value, float) and value != value:
            continue
        return value
    return None
