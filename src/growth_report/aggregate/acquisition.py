"""Lead acquisition pipelines.

- `acquisition_scorecard`: current vs previous totals, validation rate and
  variation of valid leads.
- `validation_breakdown`: google / form-valid / form-invalid per period,
  oldest first for trend display.
- `channel_tables`: UTM medium breakdowns for current vs previous period.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd

from growth_report.aggregate.common import (
    AggregationOptions,
    period_counts,
    period_index,
    period_mask,
    rate,
    users_frame,
    variation,
)
from growth_report.clean.validity import LeadClass
from growth_report.models import (
    AcquisitionScorecard,
    ChannelRow,
    ChannelTables,
    EfficiencyRow,
    Period,
    RawUserRecord,
    ValidationBreakdownRow,
)

log = logging.getLogger(__name__)

NOT_SET_MEDIUM = "(not set)"


def acquisition_scorecard(
    users: Sequence[RawUserRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> Optional[AcquisitionScorecard]:
    """Return signup totals for the current period compared to the previous one.

    Returns:
        None when fewer than two periods are supplied.
    """
    if len(periods) < 2:
        return None

    pdf = users_frame(users, options)
    curr = pdf[period_mask(pdf["created"], periods[0])]
    prev = pdf[period_mask(pdf["created"], periods[1])]
    curr_valid = int(curr["is_valid"].sum())
    prev_valid = int(prev["is_valid"].sum())

    log.info("Acquisition scorecard: %d signups (%d valid) in %s", len(curr), curr_valid, periods[0].label)
    return AcquisitionScorecard(
        total=len(curr),
        valid=curr_valid,
        valid_rate=rate(curr_valid, len(curr)),
        var_valid=variation(curr_valid, prev_valid),
        prev_total=len(prev),
        prev_valid=prev_valid,
    )


def validation_breakdown(
    users: Sequence[RawUserRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> list[ValidationBreakdownRow]:
    """Split each period's signups into the three validity classes, oldest period first."""
    pdf = users_frame(users, options)
    pdf["period"] = period_index(pdf["created"], periods)
    counts = pdf[pdf["period"] >= 0].groupby(["period", "lead_class"]).size().to_dict()

    rows: list[ValidationBreakdownRow] = []
    for i in reversed(range(len(periods))):
        google = int(counts.get((i, LeadClass.GOOGLE.value), 0))
        form_valid = int(counts.get((i, LeadClass.FORM_VALID.value), 0))
        form_invalid = int(counts.get((i, LeadClass.FORM_INVALID.value), 0))
        total = google + form_valid + form_invalid
        rows.append(
            ValidationBreakdownRow(
                label=periods[i].label,
                google=google,
                form_valid=form_valid,
                form_invalid=form_invalid,
                total=total,
                form_rate=rate(form_valid, form_valid + form_invalid),
                total_rate=rate(google + form_valid, total),
            )
        )
    return rows


def _channel_rows(frame: pd.DataFrame) -> list[ChannelRow]:
    table = period_counts(frame, "medium").sort_values(0, ascending=False, kind="stable")
    return [
        ChannelRow(medium=medium, current=int(current), previous=int(previous))
        for medium, current, previous in zip(table.index, table[0], table[1])
    ]


def channel_tables(
    users: Sequence[RawUserRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> ChannelTables:
    """Break current and previous signups down by UTM medium.

    Three tables are produced: valid signups, OAuth signups and the form
    validation efficiency of each medium. Efficiency only looks at form
    signups since OAuth signups are valid by construction.
    """
    if len(periods) < 2:
        return ChannelTables()

    pdf = users_frame(users, options)
    pdf["period"] = period_index(pdf["created"], periods[:2])
    pdf["medium"] = pdf["medium"].replace("", NOT_SET_MEDIUM)
    window = pdf[pdf["period"] >= 0]

    oauth = window["lead_class"] == LeadClass.GOOGLE.value
    forms = window[~oauth]
    totals = period_counts(forms, "medium")
    valids = period_counts(forms[forms["is_valid"]], "medium").reindex(totals.index, fill_value=0)

    efficiency = (
        pd.DataFrame(
            {
                "volume": totals[0],
                "current_rate": valids[0] * 100 / totals[0],
                "previous_rate": valids[1] * 100 / totals[1],
            }
        )
        .fillna(0.0)
        .query("volume > 0")
        .sort_values("current_rate", ascending=False, kind="stable")
    )

    return ChannelTables(
        all_valid=_channel_rows(window[window["is_valid"]]),
        oauth=_channel_rows(window[oauth]),
        efficiency=[
            EfficiencyRow(
                medium=medium,
                current_rate=float(r.current_rate),
                previous_rate=float(r.previous_rate),
                volume=int(r.volume),
            )
            for medium, r in efficiency.iterrows()
        ],
    )
