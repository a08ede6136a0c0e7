"""Email campaign KPIs.

Rates are weighted: open rate by delivered volume, CTOR by the number of
openers (delivered x open rate), unsubscribe rate by delivered volume.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from growth_report.aggregate.common import rate, round_half_up, variation
from growth_report.clean.parsers import parse_count, parse_email_platform_date, parse_percent_rate
from growth_report.models import (
    CampaignRow,
    Comparison,
    EmailMetrics,
    EmailScorecard,
    EmailStats,
    EmailTrendRow,
    Period,
    RawEmailCampaignRecord,
)

log = logging.getLogger(__name__)


def email_stats(campaigns: Sequence[RawEmailCampaignRecord]) -> EmailStats:
    """Sum volumes and compute weighted rates over a set of campaigns."""
    sent = delivered = 0
    openers = clickers = unsubs = 0.0
    for c in campaigns:
        d = parse_count(c.delivered)
        sent += parse_count(c.sent)
        delivered += d
        open_rate = parse_percent_rate(c.open_rate) / 100
        openers += d * open_rate
        clickers += d * open_rate * (parse_percent_rate(c.ctor) / 100)
        unsubs += d * (parse_percent_rate(c.unsubscribe_rate) / 100)

    return EmailStats(
        campaigns=len(campaigns),
        sent=sent,
        delivered=delivered,
        open_rate=rate(openers, delivered),
        ctor=rate(clickers, openers),
        unsub_rate=rate(unsubs, delivered),
        unsub_count=round_half_up(unsubs),
    )


def _compare(current: float, previous: float) -> Comparison:
    return Comparison(current=current, previous=previous, variation=variation(current, previous))


def _campaign_row(c: RawEmailCampaignRecord, sent_on: date) -> CampaignRow:
    sent = parse_count(c.sent)
    delivered = parse_count(c.delivered)
    unsub_rate = parse_percent_rate(c.unsubscribe_rate)
    return CampaignRow(
        sent_on=sent_on,
        name=c.name or "-",
        subject=c.subject or "-",
        sent=sent,
        delivered=delivered,
        delivery_rate=rate(delivered, sent),
        open_rate=parse_percent_rate(c.open_rate),
        ctor=parse_percent_rate(c.ctor),
        unsub_rate=unsub_rate,
        unsubscribes=round_half_up(delivered * unsub_rate / 100),
    )


def email_metrics(
    campaigns: Sequence[RawEmailCampaignRecord],
    periods: Sequence[Period],
) -> Optional[EmailMetrics]:
    """Return the email scorecard, per-period trend and current campaigns.

    Returns:
        None when there are no campaigns or fewer than two periods.
    """
    if not campaigns or len(periods) < 2:
        return None

    dated = [(parse_email_platform_date(c.sent_at), c) for c in campaigns]
    undated = sum(1 for d, _ in dated if d is None)
    if undated:
        log.warning("Ignoring %d email campaigns without a usable sending date", undated)

    trend = [
        EmailTrendRow(label=p.label, stats=email_stats([c for d, c in dated if p.contains(d)]))
        for p in reversed(periods)
    ]
    curr, prev = trend[-1].stats, trend[-2].stats

    current = periods[0]
    rows = sorted(
        (_campaign_row(c, d) for d, c in dated if current.contains(d)),
        key=lambda r: r.sent_on,
    )

    scorecard = EmailScorecard(
        campaigns=_compare(curr.campaigns, prev.campaigns),
        sent=_compare(curr.sent, prev.sent),
        open_rate=_compare(curr.open_rate, prev.open_rate),
        ctor=_compare(curr.ctor, prev.ctor),
        unsubscribes=_compare(curr.unsub_count, prev.unsub_count),
        unsub_rate=curr.unsub_rate,
    )
    log.info("Email KPIs %s: %d campaigns, %d sent", current.label, curr.campaigns, curr.sent)
    return EmailMetrics(scorecard=scorecard, trend=trend, campaigns=rows)
