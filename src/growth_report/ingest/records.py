"""Mapping export rows onto typed raw records.

Header names differ between exports (and languages of the same platform),
so every record field is looked up through an ordered list of accepted
headers with `resolve_field`.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from growth_report.clean.parsers import resolve_field
from growth_report.models import (
    RawEmailCampaignRecord,
    RawScoringRecord,
    RawTransactionRecord,
    RawUserRecord,
)

log = logging.getLogger(__name__)

Row = Mapping[str, Any]
M = TypeVar("M", bound=BaseModel)

USER_FIELDS: dict[str, tuple[str, ...]] = {
    "created_at": ("data_criacao_usuario (Data)", "data_criacao_usuario", "created_at"),
    "value": ("value",),
    "utm_medium": ("utm_medium",),
    "utm_campaign": ("utm_campaign",),
    "profession": ("profissao", "Profissao", "PROFISSAO"),
    "username": ("username", "email", "Email"),
}

TRANSACTION_FIELDS: dict[str, tuple[str, ...]] = {
    "username": ("username", "email", "Email"),
    "transacted_at": ("data_transacao (Data)", "data_transacao", "transacted_at"),
    "amount": ("valor", "Valor", "amount"),
    "plan": ("Plano", "plano", "plan"),
}

EMAIL_FIELDS: dict[str, tuple[str, ...]] = {
    "sent_at": ("Sending date", "Data de envio", "Data"),
    "name": ("Campaign Name", "Nome da campanha", "Nome"),
    "subject": ("Subject", "Assunto"),
    "sent": ("Sent", "Enviados"),
    "delivered": ("Delivered", "Entregues"),
    "open_rate": ("Trackable open rate", "Open rate", "Taxa de abertura"),
    "ctor": ("Click-to-Open rate", "CTOR"),
    "unsubscribe_rate": ("Unsubscription rate", "Taxa de descadastro"),
}

SCORING_FIELDS: dict[str, tuple[str, ...]] = {
    "email": ("EMAIL", "Email", "Email Address"),
    "created_at": ("DATA_CRIACAO_CONTA", "data_criacao_usuario (Data)"),
    "score": ("SCORE", "Score"),
    "plan": ("PLANO_DETALHE", "Plano"),
    "source": ("PRIMEIRA_UTM_SOURCE", "source", "Source"),
    "medium": ("PRIMEIRA_UTM_MEDIUM", "medium", "Medium"),
    "profession": ("PROFISSAO", "Profissao", "Job", "profissao"),
}


def map_row(row: Row, fields: Mapping[str, tuple[str, ...]]) -> dict[str, str]:
    """Resolve every record field of `row` through its candidate headers."""
    out: dict[str, str] = {}
    for name, keys in fields.items():
        value = resolve_field(row, keys)
        out[name] = "" if value is None else str(value).strip()
    return out


def _build_all(rows: Iterable[Row], build: Callable[[Row], M], source: str) -> list[M]:
    good: list[M] = []
    bad = 0
    for row in rows:
        try:
            good.append(build(row))
        except ValidationError:
            bad += 1
    if bad:
        log.warning("Skipped %d unusable %s rows", bad, source)
    log.info("Mapped %d %s rows", len(good), source)
    return good


def user_from_row(row: Row) -> RawUserRecord:
    mapped = map_row(row, USER_FIELDS)
    consumed = {k for keys in USER_FIELDS.values() for k in keys}
    form_fields = {
        str(k): "" if v is None else str(v)
        for k, v in row.items()
        if k not in consumed
    }
    return RawUserRecord(**mapped, form_fields=form_fields)


def transaction_from_row(row: Row) -> RawTransactionRecord:
    return RawTransactionRecord(**map_row(row, TRANSACTION_FIELDS))


def email_campaign_from_row(row: Row) -> RawEmailCampaignRecord:
    return RawEmailCampaignRecord(**map_row(row, EMAIL_FIELDS))


def scoring_from_row(row: Row) -> RawScoringRecord:
    return RawScoringRecord(**map_row(row, SCORING_FIELDS))


def users_from_rows(rows: Iterable[Row]) -> list[RawUserRecord]:
    return _build_all(rows, user_from_row, "user")


def transactions_from_rows(rows: Iterable[Row]) -> list[RawTransactionRecord]:
    return _build_all(rows, transaction_from_row, "transaction")


def email_campaigns_from_rows(rows: Iterable[Row]) -> list[RawEmailCampaignRecord]:
    return _build_all(rows, email_campaign_from_row, "email campaign")


def scoring_from_rows(rows: Iterable[Row]) -> list[RawScoringRecord]:
    return _build_all(rows, scoring_from_row, "scoring")
