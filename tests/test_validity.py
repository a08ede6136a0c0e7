from __future__ import annotations

import pytest

from growth_report.clean.validity import (
    LeadClass,
    classify_lead,
    default_form_validator,
    is_oauth,
)
from growth_report.models import RawUserRecord


def _always(result: bool):
    return lambda user: result


def test_oauth_marker_short_circuits_form_validation() -> None:
    user = RawUserRecord(value=" UserCadastroGoogle ", username="not-an-email")
    assert is_oauth(user)
    assert classify_lead(user, _always(False)) is LeadClass.GOOGLE


def test_form_classes() -> None:
    user = RawUserRecord(value="UserCadastro", username="a@b.com")
    assert classify_lead(user, _always(True)) is LeadClass.FORM_VALID
    assert classify_lead(user, _always(False)) is LeadClass.FORM_INVALID


@pytest.mark.parametrize(
    "user",
    [
        RawUserRecord(value="UserCadastroGoogle"),
        RawUserRecord(value="", username="a@b.com"),
        RawUserRecord(value="", username="broken"),
        RawUserRecord(value="usercadastrogoogle", username="a@b.com"),
    ],
)
def test_classification_is_exhaustive_and_exclusive(user: RawUserRecord) -> None:
    cls = classify_lead(user)
    assert sum(cls is c for c in LeadClass) == 1


def test_default_form_validator_rules() -> None:
    assert default_form_validator(RawUserRecord(username="ana@obra.com.br"))
    assert not default_form_validator(RawUserRecord(username="ana@obra"))
    assert not default_form_validator(RawUserRecord(username=""))
    assert default_form_validator(
        RawUserRecord(username="ana@obra.com", form_fields={"telefone": "(11) 98888-7777"})
    )
    assert not default_form_validator(
        RawUserRecord(username="ana@obra.com", form_fields={"telefone": "1234"})
    )


def test_custom_marker() -> None:
    user = RawUserRecord(value="oauth")
    assert classify_lead(user, _always(False), marker="oauth") is LeadClass.GOOGLE
