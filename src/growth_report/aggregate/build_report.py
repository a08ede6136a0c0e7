"""Report builder.

Computes every aggregation pipeline for one reference date and granularity.
Each call is a full, fresh derivation from the supplied snapshot.
"""
from __future__ import annotations

import logging
from typing import Optional

from growth_report.aggregate.acquisition import acquisition_scorecard, channel_tables, validation_breakdown
from growth_report.aggregate.common import AggregationOptions
from growth_report.aggregate.conversion import conversion_speed, conversion_summary
from growth_report.aggregate.email import email_metrics
from growth_report.aggregate.entities import entity_metrics
from growth_report.aggregate.periods import comparison_periods, reference_start, scoring_periods
from growth_report.aggregate.scoring import scoring_metrics
from growth_report.models import DashboardReport, Granularity, RawDataset

log = logging.getLogger(__name__)


def build_report(
    dataset: RawDataset,
    reference: Optional[str],
    granularity: Granularity = "weekly",
    options: AggregationOptions = AggregationOptions(),
    period_count: int = 4,
) -> Optional[DashboardReport]:
    """Run all pipelines over `dataset`.

    Args:
        dataset: Immutable snapshot of the four exports.
        reference: ISO day (weekly) or year-month (monthly) of the current period.
        granularity: `weekly` or `monthly`.
        options: Injected professions, form validator and plan markers.
        period_count: Number of comparison periods (at least 2).

    Returns:
        DashboardReport, or None when the reference date is missing or unusable.
    """
    start = reference_start(reference, granularity)
    if start is None:
        log.warning("No reference date for %s report; nothing to aggregate", granularity)
        return None

    if not dataset.users or not dataset.transactions:
        log.warning("Acquisition data incomplete (users=%d, transactions=%d)", len(dataset.users), len(dataset.transactions))

    periods = comparison_periods(start, granularity, period_count)
    lagged = scoring_periods(start, granularity, period_count)
    log.info("Building %s report for %s (%d periods)", granularity, periods[0].label, len(periods))

    return DashboardReport(
        granularity=granularity,
        periods=periods,
        scoring_periods=lagged,
        acquisition=acquisition_scorecard(dataset.users, periods, options),
        validation=validation_breakdown(dataset.users, periods, options),
        channels=channel_tables(dataset.users, periods, options),
        entities=entity_metrics(dataset.users, periods, options),
        conversion=conversion_summary(dataset.users, dataset.transactions, periods, options),
        speed=conversion_speed(dataset.users, dataset.transactions, periods, options),
        email=email_metrics(dataset.emails, periods),
        scoring=scoring_metrics(dataset.scoring, dataset.transactions, lagged, options),
    )
