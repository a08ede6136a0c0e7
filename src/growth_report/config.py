"""Configuration helpers and Settings container.

This module provides a small `Settings` dataclass and `get_settings` which
reads the report configuration from environment variables (a `.env` file in
the project root is loaded first).
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os

from dotenv import load_dotenv

# Explicitly load .env from project root
PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(PROJECT_ROOT / ".env")

OAUTH_MARKER = "UserCadastroGoogle"

KNOWN_PROFESSIONS: tuple[str, ...] = (
    "Engenheiro Civil",
    "Engenheiro Eletricista",
    "Engenheiro Mecânico",
    "Engenheiro de Produção",
    "Arquiteto",
    "Técnico em Edificações",
    "Técnico em Eletrotécnica",
    "Projetista",
    "Mestre de Obras",
    "Estudante",
)

NON_PAYING_PLAN_MARKERS: tuple[str, ...] = ("gratuito", "trial", "engehall_curso")

GRANULARITIES = ("weekly", "monthly")


@dataclass(frozen=True)
class Settings:
    """Container for report configuration read from the environment.

    Attributes:
        granularity: Default period granularity, `weekly` or `monthly`.
        period_count: Number of comparison periods to build (at least 2).
        oauth_marker: Validation-marker value identifying OAuth signups.
        known_professions: Canonical profession labels used for normalization.
        non_paying_plans: Substrings identifying plans excluded from scoring.
        csv_separator: Field separator used by the CSV exports.
        log_path: File that receives a copy of the CLI logs.
    """
    granularity: str
    period_count: int
    oauth_marker: str
    known_professions: tuple[str, ...]
    non_paying_plans: tuple[str, ...]
    csv_separator: str
    log_path: Path


def _split_list(raw: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if raw is None or not raw.strip():
        return default
    return tuple(item.strip() for item in raw.split(";") if item.strip())


def get_settings() -> Settings:
    """Read environment variables and return a frozen `Settings` object.

    Raises:
        RuntimeError: if the granularity is unknown or the period count is
            not an integer >= 2.
    """
    granularity = os.getenv("GROWTH_GRANULARITY", "weekly").strip().lower()
    raw_count = os.getenv("GROWTH_PERIOD_COUNT", "4").strip()
    oauth_marker = os.getenv("GROWTH_OAUTH_MARKER", OAUTH_MARKER).strip()
    csv_separator = os.getenv("GROWTH_CSV_SEPARATOR", ",")
    log_path = Path(os.getenv("GROWTH_LOG_PATH", "logs/growth_report.log"))

    if granularity not in GRANULARITIES:
        raise RuntimeError(
            f"GROWTH_GRANULARITY must be one of {', '.join(GRANULARITIES)} "
            f"(got {granularity!r})."
        )

    try:
        period_count = int(raw_count)
    except ValueError:
        raise RuntimeError(f"GROWTH_PERIOD_COUNT must be an integer (got {raw_count!r}).")
    if period_count < 2:
        raise RuntimeError("GROWTH_PERIOD_COUNT must be at least 2 (current vs previous).")

    return Settings(
        granularity=granularity,
        period_count=period_count,
        oauth_marker=oauth_marker or OAUTH_MARKER,
        known_professions=_split_list(os.getenv("GROWTH_KNOWN_PROFESSIONS"), KNOWN_PROFESSIONS),
        non_paying_plans=_split_list(os.getenv("GROWTH_NON_PAYING_PLANS"), NON_PAYING_PLAN_MARKERS),
        csv_separator=csv_separator or ",",
        log_path=log_path,
    )
