from __future__ import annotations

from datetime import date

from growth_report.clean.parsers import (
    mean_and_median,
    parse_count,
    parse_email_platform_date,
    parse_local_date,
    parse_money,
    parse_percent_rate,
    parse_score,
    resolve_field,
)
from growth_report.models import ScoreStats


def test_parse_local_date_day_first() -> None:
    assert parse_local_date("03/06/2024") == date(2024, 6, 3)
    assert parse_local_date("03/06/2024 14:22:10") == date(2024, 6, 3)
    assert parse_local_date(" 29/02/2024 ") == date(2024, 2, 29)


def test_parse_local_date_failures_return_none() -> None:
    assert parse_local_date("") is None
    assert parse_local_date(None) is None
    assert parse_local_date("31/02/2024") is None
    assert parse_local_date("not a date") is None


def test_parse_email_platform_date_formats() -> None:
    assert parse_email_platform_date("2024-06-03 10:00:00") == date(2024, 6, 3)
    assert parse_email_platform_date("2024-06-03T10:00") == date(2024, 6, 3)
    assert parse_email_platform_date("03-06-2024") == date(2024, 6, 3)
    assert parse_email_platform_date("03/06/2024") == date(2024, 6, 3)
    assert parse_email_platform_date("") is None
    assert parse_email_platform_date("junho") is None


def test_parse_money_localized() -> None:
    assert parse_money("R$ 1.234,56") == 1234.56
    assert parse_money("97,00") == 97.0
    assert parse_money("-10,50") == -10.5
    assert parse_money("") == 0.0
    assert parse_money("grátis") == 0.0
    assert parse_money(None) == 0.0


def test_parse_percent_rate() -> None:
    assert parse_percent_rate("45,3%") == 45.3
    assert parse_percent_rate("12.5 %") == 12.5
    assert parse_percent_rate("0%") == 0.0
    assert parse_percent_rate("n/a") == 0.0
    assert parse_percent_rate(None) == 0.0


def test_parse_count_thousands_separator() -> None:
    assert parse_count("1.234") == 1234
    assert parse_count("12 345") == 12345
    assert parse_count("1,5") == 1
    assert parse_count("980") == 980
    assert parse_count("") == 0
    assert parse_count("abc") == 0


def test_parse_score() -> None:
    assert parse_score("42,5") == 42.5
    assert parse_score("-3") == -3.0
    assert parse_score("") == 0.0
    assert parse_score("abc") is None


def test_mean_and_median() -> None:
    assert mean_and_median([]) == ScoreStats(mean=0, median=0)
    assert mean_and_median([10, 20, 30]) == ScoreStats(mean=20, median=20)
    assert mean_and_median([4, 1, 3, 2]).median == 2.5
    assert mean_and_median([1, 2, 2]).mean == 1.67


def test_resolve_field_uses_first_non_empty_key() -> None:
    row = {"Sent": "", "Enviados": "1.200", "Other": "x"}
    assert resolve_field(row, ["Sent", "Enviados"]) == "1.200"
    assert resolve_field(row, ["Missing"]) is None
    assert resolve_field(None, ["Sent"]) is None
    assert resolve_field({"a": float("nan"), "b": "ok"}, ["a", "b"]) == "ok"


def test_mean_and_median_round_halves_up() -> None:
    assert mean_and_median([10, 10.25]) == ScoreStats(mean=10.13, median=10.13)
    assert mean_and_median([0.125]).mean == 0.13
