from __future__ import annotations

from pathlib import Path

from growth_report.ingest.dataset import load_dataset
from growth_report.ingest.load_csv import frame_to_rows, read_exports
from growth_report.ingest.records import email_campaign_from_row, scoring_from_row, user_from_row


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_read_exports_unions_columns(tmp_path: Path) -> None:
    a = _write(tmp_path / "a.csv", "username,valor\nx@y.com,\"97,00\"\n")
    b = _write(tmp_path / "b.csv", "username,Plano\nz@y.com,Anual\n")
    pdf = read_exports([a, b])
    rows = frame_to_rows(pdf)
    assert len(rows) == 2
    assert set(pdf.columns) == {"username", "valor", "Plano"}
    by_user = {r["username"]: r for r in rows}
    assert by_user["x@y.com"]["valor"] == "97,00"
    assert by_user["x@y.com"]["Plano"] == ""


def test_read_exports_without_paths() -> None:
    assert frame_to_rows(read_exports([])) == []


def test_email_fallback_headers() -> None:
    english = email_campaign_from_row({"Sending date": "2024-06-03", "Sent": "1.000", "Open rate": "20%"})
    portuguese = email_campaign_from_row({"Data de envio": "2024-06-03", "Enviados": "1.000", "Taxa de abertura": "20%"})
    assert english == portuguese
    assert english.sent == "1.000"
    tracked = email_campaign_from_row({"Trackable open rate": "31%", "Open rate": "20%"})
    assert tracked.open_rate == "31%"


def test_scoring_fallback_headers() -> None:
    rec = scoring_from_row({"Email Address": "A@B.com", "data_criacao_usuario (Data)": "03/06/2024", "SCORE": "12,5", "source": "google"})
    assert rec.email == "A@B.com"
    assert rec.created_at == "03/06/2024"
    assert rec.score == "12,5"
    assert rec.source == "google"
    assert rec.medium == ""


def test_user_row_keeps_form_fields() -> None:
    rec = user_from_row({
        "data_criacao_usuario (Data)": "03/06/2024",
        "value": " UserCadastroGoogle ",
        "username": "a@b.com",
        "profissao": "Arquiteto",
        "telefone": "11999998888",
    })
    assert rec.value == "UserCadastroGoogle"
    assert rec.profession == "Arquiteto"
    assert rec.form_fields == {"telefone": "11999998888"}


def test_load_dataset_semicolon_exports(tmp_path: Path) -> None:
    users = _write(
        tmp_path / "users.csv",
        "data_criacao_usuario (Data);value;username;utm_medium\n"
        "03/06/2024;UserCadastroGoogle;a@b.com;cpc\n"
        "04/06/2024;;c@d.com;\n",
    )
    txs = _write(tmp_path / "tx.csv", "username;data_transacao (Data);valor;Plano\na@b.com;05/06/2024;97,00;Mensal\n")
    dataset = load_dataset(users=[users], transactions=[txs], sep=";")
    assert len(dataset.users) == 2
    assert dataset.users[0].utm_medium == "cpc"
    assert dataset.transactions[0].amount == "97,00"
    assert dataset.emails == [] and dataset.scoring == []
