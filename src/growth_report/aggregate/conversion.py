"""Conversion and revenue cohorts.

`conversion_summary` joins the current period's valid signups to their paid
transactions inside the same period. `conversion_speed` follows every
period's valid signups to their first paid transaction and histograms the
day offset over a 31-day window.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd

from growth_report.aggregate.common import (
    AggregationOptions,
    period_index,
    period_mask,
    transactions_frame,
    users_frame,
)
from growth_report.models import (
    ConversionSpeed,
    ConversionSummary,
    OriginRevenueRow,
    Period,
    PlanRevenueRow,
    RawTransactionRecord,
    RawUserRecord,
    SpeedCohortRow,
)

log = logging.getLogger(__name__)

DEFAULT_ORIGIN = "Direto / Orgânico"
UNKNOWN_PLAN = "Não Identificado"
SPEED_WINDOW_DAYS = 30


def _revenue_by(conversions: pd.DataFrame, key: str) -> pd.DataFrame:
    return (
        conversions.groupby(key)
        .agg(quantity=("amount", "size"), revenue=("amount", "sum"))
        .sort_values("revenue", ascending=False, kind="stable")
    )


def _plan_mix(conversions: pd.DataFrame) -> dict[str, str]:
    mix = (
        conversions.groupby(["origin", "plan"])
        .size()
        .reset_index(name="n")
        .sort_values("n", ascending=False, kind="stable")
    )
    return {
        origin: ", ".join(f"{plan} ({n})" for plan, n in zip(group["plan"], group["n"]))
        for origin, group in mix.groupby("origin", sort=False)
    }


def conversion_summary(
    users: Sequence[RawUserRecord],
    transactions: Sequence[RawTransactionRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> Optional[ConversionSummary]:
    """Summarize paid conversions of current-period valid signups.

    A transaction counts only when it is dated within the current period and
    its amount is positive. Days to convert are floored at zero.
    """
    if not periods:
        return None

    current = periods[0]
    signups = users_frame(users, options)
    cohort = signups[signups["is_valid"] & period_mask(signups["created"], current)]
    txs = transactions_frame(transactions).drop(columns=["transacted_at"])

    joined = cohort.merge(txs, on="username", how="inner")
    conversions = joined[period_mask(joined["paid_on"], current) & (joined["amount"] > 0)]
    conversions = conversions.assign(
        days=(conversions["paid_on"] - conversions["created"]).dt.days.clip(lower=0),
        origin=conversions["medium"].replace("", DEFAULT_ORIGIN),
        plan=conversions["plan"].replace("", UNKNOWN_PLAN),
    )

    count = len(conversions)
    revenue = float(conversions["amount"].sum())
    total_days = int(conversions["days"].sum())

    by_plan: list[PlanRevenueRow] = []
    by_origin: list[OriginRevenueRow] = []
    if count:
        by_plan = [
            PlanRevenueRow(plan=plan, quantity=int(r.quantity), revenue=float(r.revenue))
            for plan, r in _revenue_by(conversions, "plan").iterrows()
        ]
        mix = _plan_mix(conversions)
        by_origin = [
            OriginRevenueRow(origin=origin, quantity=int(r.quantity), revenue=float(r.revenue), plan_mix=mix[origin])
            for origin, r in _revenue_by(conversions, "origin").iterrows()
        ]

    log.info("Conversion cohort %s: %d conversions, revenue=%.2f", current.label, count, revenue)
    return ConversionSummary(
        count=count,
        total_revenue=revenue,
        avg_ticket=revenue / count if count else 0.0,
        avg_days=total_days / count if count else 0.0,
        by_plan=by_plan,
        by_origin=by_origin,
    )


def conversion_speed(
    users: Sequence[RawUserRecord],
    transactions: Sequence[RawTransactionRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> ConversionSpeed:
    """Return the 30-day conversion speed of each period's lead cohort.

    Percentages use the period's whole lead volume (valid or not) as the
    denominator, never below 1.
    """
    signups = users_frame(users, options)
    signups["period"] = period_index(signups["created"], periods)
    leads = signups[signups["period"] >= 0]
    volume = leads.groupby("period").size().to_dict()

    valid = leads[leads["is_valid"]]
    valid = valid.assign(lead=valid.index)
    txs = transactions_frame(transactions)
    paid = txs[txs["amount"] > 0][["username", "paid_on"]]

    joined = valid.merge(paid, on="username", how="inner")
    first = (
        joined[joined["paid_on"] >= joined["created"]]
        .sort_values("paid_on", kind="stable")
        .drop_duplicates("lead")
    )
    first = first.assign(offset=(first["paid_on"] - first["created"]).dt.days)

    converted = first.groupby("period").size().to_dict()
    within_7 = first[first["offset"] <= 7].groupby("period").size().to_dict()
    in_window = first[first["offset"] <= SPEED_WINDOW_DAYS]
    within_30 = in_window.groupby("period").size().to_dict()
    cells = in_window.groupby(["period", "offset"]).size().to_dict()

    rows: list[SpeedCohortRow] = []
    for i, period in enumerate(periods):
        lead_volume = int(volume.get(i, 0))
        w7 = int(within_7.get(i, 0))
        w30 = int(within_30.get(i, 0))
        denominator = max(lead_volume, 1)
        rows.append(
            SpeedCohortRow(
                label=period.label,
                lead_volume=lead_volume,
                conversions=int(converted.get(i, 0)),
                within_7=w7,
                within_30=w30,
                perc_7=w7 * 100 / denominator,
                perc_30=w30 * 100 / denominator,
                daily_speed=[int(cells.get((i, d), 0)) for d in range(SPEED_WINDOW_DAYS + 1)],
            )
        )

    max_cell = max([1, *(c for r in rows for c in r.daily_speed)])
    return ConversionSpeed(rows=rows, max_cell=max_cell)
