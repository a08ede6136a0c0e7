"""Flatten a `DashboardReport` into named pandas tables.

The presentation layer (or the `tables` CLI command) consumes these frames;
no formatting or styling is applied here.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from growth_report.models import DashboardReport

log = logging.getLogger(__name__)


def _frame(rows: list) -> pd.DataFrame:
    return pd.DataFrame([r.model_dump(mode="python") for r in rows])


def report_tables(report: DashboardReport) -> dict[str, pd.DataFrame]:
    """Return every non-empty metric table of `report` keyed by table name."""
    tables: dict[str, pd.DataFrame] = {
        "periods": _frame(report.periods),
        "scoring_periods": _frame(report.scoring_periods),
        "validation": _frame(report.validation),
        "channels_valid": _frame(report.channels.all_valid),
        "channels_oauth": _frame(report.channels.oauth),
        "channels_efficiency": _frame(report.channels.efficiency),
    }

    if report.acquisition is not None:
        tables["acquisition"] = pd.DataFrame([report.acquisition.model_dump()])

    if report.entities is not None:
        day_cols = [d.isoformat() for d in report.entities.dates]
        for name, heatmap in (("profession", report.entities.profession), ("campaign", report.entities.campaign)):
            pdf = pd.DataFrame(
                [[r.name, r.total, r.prev, *r.daily] for r in heatmap.rows],
                columns=["name", "total", "prev", *day_cols],
            )
            tables[f"heatmap_{name}"] = pdf

    if report.conversion is not None:
        tables["conversion_by_plan"] = _frame(report.conversion.by_plan)
        tables["conversion_by_origin"] = _frame(report.conversion.by_origin)

    if report.speed.rows:
        speed = pd.DataFrame(
            [[r.label, r.lead_volume, r.conversions, r.perc_7, r.perc_30, *r.daily_speed] for r in report.speed.rows],
            columns=["label", "lead_volume", "conversions", "perc_7", "perc_30", *[f"d{i}" for i in range(31)]],
        )
        tables["conversion_speed"] = speed

    if report.email is not None:
        trend = pd.DataFrame([{"label": t.label, **t.stats.model_dump()} for t in report.email.trend])
        tables["email_trend"] = trend
        tables["email_campaigns"] = _frame(report.email.campaigns)

    if report.scoring is not None:
        tables["scoring_distribution"] = _frame(report.scoring.distribution)
        tables["scoring_plans"] = _frame(report.scoring.plans)
        tables["scoring_origins"] = _frame(report.scoring.origins)
        tables["scoring_professions"] = _frame(report.scoring.professions)

    return {name: pdf for name, pdf in tables.items() if not pdf.empty}


def write_tables(tables: dict[str, pd.DataFrame], out_dir: Path) -> list[Path]:
    """Write each table to `<out_dir>/<name>.csv` and return the written paths."""
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for name, pdf in tables.items():
        path = out_dir / f"{name}.csv"
        pdf.to_csv(path, index=False)
        written.append(path)
    log.info("Wrote %d tables to %s", len(written), out_dir)
    return written
