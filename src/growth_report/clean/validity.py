"""Lead validity classification.

A signup is exactly one of: OAuth (google), form-valid or form-invalid.
The OAuth marker is checked first; only non-OAuth signups are handed to
the form-validation predicate.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Callable

from growth_report.config import OAUTH_MARKER
from growth_report.models import RawUserRecord

FormValidator = Callable[[RawUserRecord], bool]

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PHONE_FIELDS = ("telefone", "phone", "celular")


class LeadClass(str, Enum):
    GOOGLE = "google"
    FORM_VALID = "form_valid"
    FORM_INVALID = "form_invalid"


def default_form_validator(user: RawUserRecord) -> bool:
    """Accept a form signup with a well-formed email and, if given, a usable phone.

    Stand-in for the product's own form rules; callers with the real rule set
    pass it to the aggregation options instead.
    """
    if not EMAIL_RE.match(user.username.strip()):
        return False
    for field in PHONE_FIELDS:
        if field in user.form_fields:
            digits = re.sub(r"\D", "", user.form_fields[field])
            return len(digits) >= 10
    return True


def is_oauth(user: RawUserRecord, marker: str = OAUTH_MARKER) -> bool:
    return user.value.strip() == marker


def classify_lead(
    user: RawUserRecord,
    form_validator: FormValidator = default_form_validator,
    marker: str = OAUTH_MARKER,
) -> LeadClass:
    """Return the single validity class of a signup."""
    if is_oauth(user, marker):
        return LeadClass.GOOGLE
    if form_validator(user):
        return LeadClass.FORM_VALID
    return LeadClass.FORM_INVALID

