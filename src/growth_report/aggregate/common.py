"""Shared helpers for the aggregation pipelines.

Holds the injected collaborators (`AggregationOptions`), the division-safe
rate/variation math and the per-call frames every pipeline groups on: one
pandas row per signup or transaction with its date, amount and validity
class parsed once.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

import pandas as pd

from growth_report.clean.parsers import parse_local_date, parse_money
from growth_report.clean.validity import FormValidator, LeadClass, classify_lead, default_form_validator
from growth_report.config import KNOWN_PROFESSIONS, NON_PAYING_PLAN_MARKERS, OAUTH_MARKER, Settings
from growth_report.models import Period, RawTransactionRecord, RawUserRecord

PLACEHOLDER_NAMES = ("(vazio)", "-")

USER_COLUMNS = ["username", "created", "lead_class", "medium", "campaign", "profession"]
TRANSACTION_COLUMNS = list(RawTransactionRecord.model_fields)


@dataclass(frozen=True)
class AggregationOptions:
    """External configuration consumed by the pipelines.

    Attributes:
        known_professions: Canonical profession labels, matched case-insensitively.
        form_validator: Predicate deciding whether a non-OAuth signup is valid.
        oauth_marker: Validation-marker value identifying OAuth signups.
        non_paying_plans: Substrings of plans left out of the scoring plan table,
            matched case-insensitively.
    """
    known_professions: Sequence[str] = KNOWN_PROFESSIONS
    form_validator: FormValidator = default_form_validator
    oauth_marker: str = OAUTH_MARKER
    non_paying_plans: Sequence[str] = field(default=NON_PAYING_PLAN_MARKERS)

    @classmethod
    def from_settings(cls, settings: Settings, form_validator: FormValidator = default_form_validator) -> "AggregationOptions":
        return cls(
            known_professions=settings.known_professions,
            form_validator=form_validator,
            oauth_marker=settings.oauth_marker,
            non_paying_plans=settings.non_paying_plans,
        )

    def match_profession(self, value: str) -> Optional[str]:
        wanted = value.strip().lower()
        for label in self.known_professions:
            if label.lower() == wanted:
                return label
        return None

    def is_paying_plan(self, plan: str) -> bool:
        lowered = plan.lower()
        return not any(marker.lower() in lowered for marker in self.non_paying_plans)


# =========================================================
# FRAMES
# =========================================================

def users_frame(users: Iterable[RawUserRecord], options: AggregationOptions) -> pd.DataFrame:
    """Return one row per signup.

    Columns: `username`, `created` (datetime, NaT when unparseable),
    `lead_class` (a `LeadClass` value), `is_valid`, `medium`, `campaign`
    and `profession`.
    """
    pdf = pd.DataFrame(
        [
            {
                "username": u.username,
                "created": parse_local_date(u.created_at),
                "lead_class": classify_lead(u, options.form_validator, options.oauth_marker).value,
                "medium": u.utm_medium,
                "campaign": u.utm_campaign,
                "profession": u.profession,
            }
            for u in users
        ],
        columns=USER_COLUMNS,
    )
    pdf["created"] = pd.to_datetime(pdf["created"])
    pdf["is_valid"] = pdf["lead_class"] != LeadClass.FORM_INVALID.value
    return pdf


def transactions_frame(transactions: Iterable[RawTransactionRecord]) -> pd.DataFrame:
    """Return one row per transaction with `paid_on` parsed and `amount` as float."""
    pdf = pd.DataFrame([t.model_dump() for t in transactions], columns=TRANSACTION_COLUMNS)
    pdf["paid_on"] = pd.to_datetime(pdf["transacted_at"].map(parse_local_date))
    pdf["amount"] = pdf["amount"].map(parse_money).astype(float)
    return pdf


def period_mask(dates: pd.Series, period: Period) -> pd.Series:
    """True where the date falls inside `period` (inclusive); NaT is never inside."""
    return dates.between(pd.Timestamp(period.start), pd.Timestamp(period.end))


def period_index(dates: pd.Series, periods: Sequence[Period]) -> pd.Series:
    """Position of the period holding each date (0 is current), -1 when none does."""
    out = pd.Series(-1, index=dates.index, dtype="int64")
    for i, period in enumerate(periods):
        out[period_mask(dates, period)] = i
    return out


def period_counts(frame: pd.DataFrame, key: str) -> pd.DataFrame:
    """Row counts per `key` value with one column per period position (0 and 1).

    `frame` must carry a `period` column already restricted to 0 or 1.
    """
    if frame.empty:
        return pd.DataFrame({0: pd.Series(dtype="int64"), 1: pd.Series(dtype="int64")})
    return (
        frame.groupby([key, "period"])
        .size()
        .unstack(fill_value=0)
        .reindex(columns=[0, 1], fill_value=0)
    )


# =========================================================
# MATH
# =========================================================

def rate(part: float, whole: float) -> float:
    """Percentage of `part` over `whole`, 0 when `whole` is 0."""
    if not whole:
        return 0.0
    return part * 100 / whole


def variation(current: float, previous: float) -> float:
    """Period-over-period change in percent.

    100 when growing from a zero base, 0 when both sides are zero.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) * 100 / previous


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def is_placeholder(name: str) -> bool:
    return name in PLACEHOLDER_NAMES or not name.strip()
