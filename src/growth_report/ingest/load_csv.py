"""Reading CSV exports into row dictionaries.

Each export may be split across several files (one per month, for
instance) whose headers do not fully agree. Files are parsed with pandas as
plain strings and concatenated through Dask, which unions the columns.
"""

from __future__ import annotations

from typing import Any, Sequence, cast
import logging
from pathlib import Path

import pandas as pd
import dask.dataframe as dd

log = logging.getLogger(__name__)


def read_export(path: Path, sep: str = ",") -> pd.DataFrame:
    """Parse a single CSV export with every column kept as text.

    Args:
        path: CSV file path. A UTF-8 BOM is tolerated.
        sep: Field separator.

    Returns:
        pandas.DataFrame of strings; empty cells are empty strings.
    """
    pdf = pd.read_csv(
        path,
        sep=sep,
        dtype=str,
        keep_default_na=False,
        encoding="utf-8-sig",
    )
    pdf.columns = [str(c).strip() for c in pdf.columns]
    log.info("Read %d rows from %s", len(pdf), path)
    return pdf


def read_exports(paths: Sequence[Path], sep: str = ",") -> pd.DataFrame:
    """Parse and concatenate several exports of the same source."""
    if not paths:
        return pd.DataFrame()

    dd_mod = cast(Any, dd)
    parts: list[Any] = []
    for p in paths:
        pdf = read_export(p, sep)
        parts.append(dd_mod.from_pandas(pdf, npartitions=max(1, len(pdf) // 200_000)))

    pdf = dd_mod.concat(parts, interleave_partitions=True).compute()
    return pdf.fillna("").reset_index(drop=True)


def frame_to_rows(pdf: pd.DataFrame) -> list[dict[str, str]]:
    """Convert a string DataFrame into row dictionaries."""
    if pdf.empty:
        return []
    return [{str(k): ("" if v is None else str(v)) for k, v in rec.items()} for rec in pdf.to_dict(orient="records")]
