"""Entity heatmaps for professions and UTM campaigns.

Each row counts valid signups per entity for the current period (with a
per-day breakdown over the current period's calendar days) and the previous
period. Rankings ignore placeholder names but the full table keeps them.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import pandas as pd

from growth_report.aggregate.common import AggregationOptions, is_placeholder, period_counts, period_index, users_frame
from growth_report.models import AggregatedRow, EntityHeatmap, EntityMetrics, Period, RawUserRecord

log = logging.getLogger(__name__)

EMPTY_NAME = "(vazio)"
OTHER_PROFESSIONS = "Outros"


def entity_heatmap(signups: pd.DataFrame, periods: Sequence[Period], key: str) -> EntityHeatmap:
    """Aggregate signups by the `key` column into heatmap rows.

    Args:
        signups: Frame from `users_frame` with the entity name in `key`.
        periods: Comparison periods; only the first two are used.
        key: Column holding the entity name of a signup.

    Returns:
        EntityHeatmap with rows sorted by current-period volume (desc),
        the top volume/growth/drop rows and the largest daily cell.
    """
    days = periods[0].days()
    valid = signups[signups["is_valid"]]
    window = valid.assign(period=period_index(valid["created"], periods[:2]))
    window = window[window["period"] >= 0]

    table = period_counts(window, key).sort_values(0, ascending=False, kind="stable")
    current = window[window["period"] == 0]
    daily = current.groupby([key, "created"]).size().to_dict()

    rows = {
        name: AggregatedRow(
            name=name,
            total=int(total),
            prev=int(prev),
            daily=[int(daily.get((name, pd.Timestamp(d)), 0)) for d in days],
        )
        for name, total, prev in zip(table.index, table[0], table[1])
    }

    ranked = table.loc[[not is_placeholder(name) for name in table.index]]
    growth = ranked[0] - ranked[1]
    top_volume = rows[ranked.index[0]] if len(ranked) else None
    top_growth: Optional[AggregatedRow] = None
    top_drop: Optional[AggregatedRow] = None
    if len(growth):
        if growth.max() > 0:
            top_growth = rows[growth.idxmax()]
        if growth.min() < 0:
            top_drop = rows[growth.idxmin()]

    return EntityHeatmap(
        rows=list(rows.values()),
        top_volume=top_volume,
        top_growth=top_growth,
        top_drop=top_drop,
        max_daily=max([1, *daily.values()]),
    )


def entity_metrics(
    users: Sequence[RawUserRecord],
    periods: Sequence[Period],
    options: AggregationOptions = AggregationOptions(),
) -> Optional[EntityMetrics]:
    """Build the profession and campaign heatmaps for the current period."""
    if len(periods) < 2:
        return None

    pdf = users_frame(users, options)
    pdf["profession_name"] = pdf["profession"].map(
        lambda value: options.match_profession(value or EMPTY_NAME) or OTHER_PROFESSIONS
    )
    pdf["campaign_name"] = pdf["campaign"].replace("", EMPTY_NAME)

    profession = entity_heatmap(pdf, periods, "profession_name")
    campaign = entity_heatmap(pdf, periods, "campaign_name")
    log.info(
        "Entity heatmaps: %d professions, %d campaigns for %s",
        len(profession.rows),
        len(campaign.rows),
        periods[0].label,
    )
    return EntityMetrics(dates=periods[0].days(), profession=profession, campaign=campaign)
