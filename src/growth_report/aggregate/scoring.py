"""Lead-scoring distribution.

Runs on the maturation-lagged scoring periods (current vs previous). Scores
are bucketed, compared by mean/median, and grouped by plan, origin and
profession. Days to convert come from the earliest transaction of the lead's
email and are attributed to the plan on the scoring record.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

import pandas as pd

from growth_report.aggregate.common import AggregationOptions, period_index, rate, transactions_frame, variation
from growth_report.clean.parsers import mean_and_median, parse_local_date, parse_score
from growth_report.models import (
    Comparison,
    Period,
    RawScoringRecord,
    RawTransactionRecord,
    ScoreBucket,
    ScoringGroupRow,
    ScoringMetrics,
    ScoringPlanRow,
)

log = logging.getLogger(__name__)

BUCKET_LABELS = ("Negativo (< 0)", "0 a 24", "25 a 49", "50 a 74", "75 a 99", "100 ou mais")
BUCKET_EDGES = (0, 25, 50, 75, 100)
QUALIFIED_SCORE = 50

UNKNOWN_PLAN = "Não Identificado"
DEFAULT_SOURCE = "(direto)"
DEFAULT_MEDIUM = "(none)"
CUSTOM_PROFESSION = "Profissão customizada"
UNINFORMED_PROFESSION = "Não Informado"

SCORING_COLUMNS = list(RawScoringRecord.model_fields)


def score_bucket(score: float) -> int:
    """Index of the histogram bucket: <0, [0,25), [25,50), [50,75), [75,100), >=100."""
    for i, edge in enumerate(BUCKET_EDGES):
        if score < edge:
            return i
    return len(BUCKET_EDGES)


def normalize_profession(value: str, options: AggregationOptions) -> str:
    text = value.strip()
    if not text or text == UNINFORMED_PROFESSION:
        return CUSTOM_PROFESSION
    return options.match_profession(text) or text.capitalize()


def normalize_origin(source: str, medium: str) -> str:
    return f"{source or DEFAULT_SOURCE} / {medium or DEFAULT_MEDIUM}".lower()


def _earliest_payments(transactions: Sequence[RawTransactionRecord]) -> pd.Series:
    """Earliest transaction date per lowercased email."""
    txs = transactions_frame(transactions)
    txs["email"] = txs["username"].str.strip().str.lower()
    txs = txs[(txs["email"] != "") & txs["paid_on"].notna()]
    return txs.groupby("email")["paid_on"].min()


def scored_frame(
    scoring: Sequence[RawScoringRecord],
    transactions: Sequence[RawTransactionRecord],
    periods: Sequence[Period],
    options: AggregationOptions,
) -> pd.DataFrame:
    """Return the scored leads falling in `periods` with normalized group columns.

    Rows whose score is not numeric are dropped. `period` is the position of
    the scoring period, `days` the days from signup to the email's earliest
    transaction (NaN when there is none on or after signup).
    """
    pdf = pd.DataFrame([r.model_dump() for r in scoring], columns=SCORING_COLUMNS)
    pdf["created"] = pd.to_datetime(pdf["created_at"].map(parse_local_date))
    pdf["score"] = pdf["score"].map(parse_score).astype(float)
    pdf["period"] = period_index(pdf["created"], periods)
    pdf = pdf[(pdf["period"] >= 0) & pdf["score"].notna()].copy()

    pdf["plan"] = pdf["plan"].str.strip().replace("", UNKNOWN_PLAN)
    pdf["origin"] = [normalize_origin(s, m) for s, m in zip(pdf["source"], pdf["medium"])]
    pdf["profession"] = pdf["profession"].map(lambda value: normalize_profession(value, options))
    pdf["bucket"] = pdf["score"].map(score_bucket)

    first_paid = pd.to_datetime(pdf["email"].str.strip().str.lower().map(_earliest_payments(transactions)))
    pdf["days"] = (first_paid - pdf["created"]).dt.days.where(first_paid >= pdf["created"])
    return pdf


def _group_stats(scored: pd.DataFrame, key: str) -> list[dict[str, Any]]:
    """Volume, mean scores and average days per `key` value, best current mean first."""
    stats: list[dict[str, Any]] = []
    for name, group in scored.groupby(key, sort=False):
        current = group[group["period"] == 0]
        days = current["days"].dropna()
        stats.append(
            {
                "name": name,
                "volume": len(current),
                "mean_current": mean_and_median(current["score"]).mean,
                "mean_previous": mean_and_median(group.loc[group["period"] == 1, "score"]).mean,
                "avg_days": float(days.mean()) if len(days) else None,
            }
        )
    return sorted(stats, key=lambda s: s["mean_current"], reverse=True)


def _group_rows(scored: pd.DataFrame, key: str) -> list[ScoringGroupRow]:
    return [
        ScoringGroupRow(
            name=s["name"],
            volume=s["volume"],
            mean_current=s["mean_current"],
            mean_previous=s["mean_previous"],
        )
        for s in _group_stats(scored, key)
        if s["volume"] > 0
    ]


def scoring_metrics(
    scoring: Sequence[RawScoringRecord],
    transactions: Sequence[RawTransactionRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> Optional[ScoringMetrics]:
    """Compare lead-score quality between the two most recent scoring periods.

    Args:
        scoring: Lead-scoring export rows.
        transactions: Transactions used to measure days to convert.
        periods: Scoring periods (already shifted by the maturation lag).
        options: Known professions and non-paying plan markers.

    Returns:
        None when there are no scoring rows or fewer than two periods.
    """
    if not scoring or len(periods) < 2:
        return None

    current, previous = periods[0], periods[1]
    scored = scored_frame(scoring, transactions, periods[:2], options)
    curr = scored[scored["period"] == 0]
    prev = scored[scored["period"] == 1]

    stats_curr = mean_and_median(curr["score"])
    stats_prev = mean_and_median(prev["score"])
    n_curr, n_prev = len(curr), len(prev)

    buckets = scored.groupby(["period", "bucket"]).size().to_dict()
    distribution = [
        ScoreBucket(
            label=label,
            current=int(buckets.get((0, i), 0)),
            current_pct=rate(buckets.get((0, i), 0), n_curr),
            previous_pct=rate(buckets.get((1, i), 0), n_prev),
        )
        for i, label in enumerate(BUCKET_LABELS)
    ]

    paying = scored[scored["plan"].map(options.is_paying_plan).astype(bool)]
    plans = [
        ScoringPlanRow(
            plan=s["name"],
            volume=s["volume"],
            mean_current=s["mean_current"],
            mean_previous=s["mean_previous"],
            avg_days=s["avg_days"],
        )
        for s in _group_stats(paying, "plan")
    ]

    qualified_curr = rate(int((curr["score"] >= QUALIFIED_SCORE).sum()), n_curr)
    qualified_prev = rate(int((prev["score"] >= QUALIFIED_SCORE).sum()), n_prev)
    log.info("Lead scoring %s: %d scored leads, mean=%.2f", current.label, n_curr, stats_curr.mean)
    return ScoringMetrics(
        current_label=current.label,
        previous_label=previous.label,
        total_current=n_curr,
        total_previous=n_prev,
        mean=Comparison(current=stats_curr.mean, previous=stats_prev.mean, variation=variation(stats_curr.mean, stats_prev.mean)),
        median=Comparison(current=stats_curr.median, previous=stats_prev.median, variation=variation(stats_curr.median, stats_prev.median)),
        qualified_rate=Comparison(current=qualified_curr, previous=qualified_prev, variation=variation(qualified_curr, qualified_prev)),
        distribution=distribution,
        plans=plans,
        origins=_group_rows(scored, "origin"),
        professions=_group_rows(scored, "profession"),
    )
