"""Command-line interface for building growth reports.

Provides subcommands: `periods`, `report` and `tables`. Each command is
implemented as a `cmd_*` function that accepts an argparse namespace.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from dotenv import load_dotenv

from growth_report.config import GRANULARITIES, get_settings
from growth_report.logging_config import configure_logging
from growth_report.aggregate.build_report import build_report
from growth_report.aggregate.common import AggregationOptions
from growth_report.aggregate.export_tables import report_tables, write_tables
from growth_report.aggregate.periods import comparison_periods, reference_start, scoring_periods
from growth_report.ingest.dataset import load_dataset
from growth_report.models import DashboardReport

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _granularity(args: argparse.Namespace) -> str:
    return args.granularity or get_settings().granularity


def _build(args: argparse.Namespace) -> DashboardReport:
    """Load the exports named on the command line and build the report.

    Raises:
        SystemExit: if the reference date is missing or malformed.
    """
    s = get_settings()
    dataset = load_dataset(
        users=args.users,
        transactions=args.transactions,
        emails=args.emails,
        scoring=args.scoring,
        sep=args.sep or s.csv_separator,
    )
    report = build_report(
        dataset,
        args.reference,
        _granularity(args),
        AggregationOptions.from_settings(s),
        args.periods or s.period_count,
    )
    if report is None:
        raise SystemExit(f"Unusable reference date: {args.reference!r}")
    return report


# --------------------------------------------------
# COMMANDS
# --------------------------------------------------
def cmd_periods(args: argparse.Namespace) -> None:
    """Log the comparison and scoring periods for a reference date."""
    s = get_settings()
    granularity = _granularity(args)
    start = reference_start(args.reference, granularity)
    if start is None:
        raise SystemExit(f"Unusable reference date: {args.reference!r}")

    count = args.periods or s.period_count
    for p in comparison_periods(start, granularity, count):
        log.info("period %s: %s .. %s", p.label, p.start, p.end)
    for p in scoring_periods(start, granularity, count):
        log.info("scoring period %s: %s .. %s", p.label, p.start, p.end)


def cmd_report(args: argparse.Namespace) -> None:
    """Build the report and write it as JSON."""
    report = _build(args)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    log.info("Report written to %s", args.out)


def cmd_tables(args: argparse.Namespace) -> None:
    """Build the report and write one CSV per metric table."""
    report = _build(args)
    write_tables(report_tables(report), args.out_dir)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--reference", required=True, help="YYYY-MM-DD (weekly) or YYYY-MM (monthly)")
    common.add_argument("--granularity", choices=GRANULARITIES, default=None)
    common.add_argument("--periods", type=int, default=None)

    inputs = argparse.ArgumentParser(add_help=False)
    inputs.add_argument("--users", type=Path, nargs="*", default=[])
    inputs.add_argument("--transactions", type=Path, nargs="*", default=[])
    inputs.add_argument("--emails", type=Path, nargs="*", default=[])
    inputs.add_argument("--scoring", type=Path, nargs="*", default=[])
    inputs.add_argument("--sep", default=None)

    p = argparse.ArgumentParser(prog="growth-report")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("periods", parents=[common])

    p_report = sub.add_parser("report", parents=[common, inputs])
    p_report.add_argument("--out", type=Path, default=Path("out/report.json"))

    p_tables = sub.add_parser("tables", parents=[common, inputs])
    p_tables.add_argument("--out-dir", type=Path, default=Path("out/tables"))

    return p


def main() -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    load_dotenv()
    configure_logging(get_settings().log_path)

    args = build_parser().parse_args()

    if args.cmd == "periods":
        cmd_periods(args)
    elif args.cmd == "report":
        cmd_report(args)
    elif args.cmd == "tables":
        cmd_tables(args)
    else:
        raise SystemExit(2)


if __name__ == "__main__":
    main()
