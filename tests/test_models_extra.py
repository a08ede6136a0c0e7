from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from growth_report.models import AggregatedRow, Period, RawTransactionRecord, RawUserRecord


def test_period_rejects_inverted_bounds() -> None:
    with pytest.raises(ValidationError):
        Period(label="x", start=date(2024, 6, 8), end=date(2024, 6, 2))


def test_period_days_are_inclusive() -> None:
    p = Period(label="w", start=date(2024, 6, 2), end=date(2024, 6, 8))
    days = p.days()
    assert len(days) == 7
    assert days[0] == date(2024, 6, 2)
    assert days[-1] == date(2024, 6, 8)
    assert p.contains(date(2024, 6, 8))
    assert not p.contains(date(2024, 6, 9))
    assert not p.contains(None)


def test_aggregated_row_daily_must_sum_to_total() -> None:
    AggregatedRow(name="a", total=3, prev=1, daily=[1, 0, 2])
    with pytest.raises(ValidationError):
        AggregatedRow(name="a", total=4, prev=1, daily=[1, 0, 2])


def test_raw_records_forbid_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        RawTransactionRecord(username="a@b.com", coupon="X")


def test_raw_records_are_immutable() -> None:
    user = RawUserRecord(username="a@b.com")
    with pytest.raises(ValidationError):
        user.username = "c@d.com"
