"""Load the four exports into a `RawDataset` snapshot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from growth_report.ingest.load_csv import frame_to_rows, read_exports
from growth_report.ingest.records import (
    email_campaigns_from_rows,
    scoring_from_rows,
    transactions_from_rows,
    users_from_rows,
)
from growth_report.models import RawDataset

log = logging.getLogger(__name__)


def load_dataset(
    users: Sequence[Path] = (),
    transactions: Sequence[Path] = (),
    emails: Sequence[Path] = (),
    scoring: Sequence[Path] = (),
    sep: str = ",",
) -> RawDataset:
    """Read every export and map it into typed raw records.

    Any source may be omitted; its collection is then empty and the
    pipelines depending on it return neutral results.
    """
    dataset = RawDataset(
        users=users_from_rows(frame_to_rows(read_exports(users, sep))),
        transactions=transactions_from_rows(frame_to_rows(read_exports(transactions, sep))),
        emails=email_campaigns_from_rows(frame_to_rows(read_exports(emails, sep))),
        scoring=scoring_from_rows(frame_to_rows(read_exports(scoring, sep))),
    )
    log.info(
        "Dataset loaded: users=%d transactions=%d emails=%d scoring=%d",
        len(dataset.users),
        len(dataset.transactions),
        len(dataset.emails),
        len(dataset.scoring),
    )
    return dataset
