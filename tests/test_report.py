from __future__ import annotations

from pathlib import Path

from growth_report.aggregate.build_report import build_report
from growth_report.aggregate.common import AggregationOptions
from growth_report.aggregate.export_tables import report_tables, write_tables
from growth_report.models import (
    RawDataset,
    RawEmailCampaignRecord,
    RawScoringRecord,
    RawTransactionRecord,
    RawUserRecord,
)

OPTIONS = AggregationOptions(form_validator=lambda u: "@" in u.username)


def _dataset() -> RawDataset:
    return RawDataset(
        users=[
            RawUserRecord(created_at="03/06/2024", value="UserCadastroGoogle", username="a@b.com", utm_medium="cpc", utm_campaign="junho", profession="Arquiteto"),
            RawUserRecord(created_at="04/06/2024", username="c@d.com", utm_campaign="junho"),
            RawUserRecord(created_at="04/06/2024", username="invalid"),
            RawUserRecord(created_at="28/05/2024", username="e@f.com"),
        ],
        transactions=[
            RawTransactionRecord(username="a@b.com", transacted_at="05/06/2024", amount="97,00", plan="Mensal"),
        ],
        emails=[
            RawEmailCampaignRecord(sent_at="2024-06-04", name="News", sent="100", delivered="90", open_rate="30%", ctor="10%", unsubscribe_rate="1%"),
        ],
        scoring=[
            RawScoringRecord(email="a@b.com", created_at="20/05/2024", score="55", plan="Mensal"),
        ],
    )


def test_build_report_weekly() -> None:
    report = build_report(_dataset(), "2024-06-02", "weekly", OPTIONS, period_count=3)
    assert report is not None
    assert len(report.periods) == 3
    assert report.scoring_periods[0].start.isoformat() == "2024-05-19"
    assert report.acquisition.total == 3
    assert report.acquisition.valid == 2
    assert report.conversion.count == 1
    assert report.email.scorecard.sent.current == 100
    assert report.scoring.total_current == 1
    assert report.entities.campaign.top_volume.name == "junho"


def test_build_report_monthly() -> None:
    report = build_report(_dataset(), "2024-06", "monthly", OPTIONS, period_count=2)
    assert report.periods[0].start.isoformat() == "2024-06-01"
    assert report.scoring_periods[0].start.isoformat() == "2024-05-01"
    assert report.acquisition.total == 3
    assert report.acquisition.prev_total == 1
    assert report.scoring.total_current == 1


def test_build_report_without_reference() -> None:
    assert build_report(_dataset(), None, "weekly", OPTIONS) is None
    assert build_report(_dataset(), "soon", "weekly", OPTIONS) is None


def test_build_report_with_empty_dataset() -> None:
    report = build_report(RawDataset(), "2024-06-02", "weekly", OPTIONS)
    assert report.acquisition.total == 0
    assert report.email is None
    assert report.scoring is None
    assert report.conversion.count == 0
    assert report.channels.all_valid == []


def test_report_tables_and_csv_export(tmp_path: Path) -> None:
    report = build_report(_dataset(), "2024-06-02", "weekly", OPTIONS, period_count=3)
    tables = report_tables(report)
    assert {"periods", "acquisition", "heatmap_campaign", "conversion_speed", "email_trend"} <= set(tables)
    heatmap = tables["heatmap_campaign"]
    assert list(heatmap.columns[:3]) == ["name", "total", "prev"]
    assert len(heatmap.columns) == 3 + 7

    written = write_tables(tables, tmp_path / "tables")
    assert (tmp_path / "tables" / "acquisition.csv") in written
    assert all(p.exists() for p in written)
