"""Round Field Enforcement — re-validates round content before any write.

Invariants:
    - company_name, description, logo_url, deck_url: non-blank after strip
    - raising_amount: finite and > 0
    - currency: 3 uppercase ASCII letters (normalized from lower case)
    - Counter fields, founder_id, id and created_at are never client-settable
    - Validation fails fast: the first invalid field raises, nothing is written

Design Decisions:
    - Repeats the pydantic checks at the core boundary so
      non-HTTP callers (scripts, the reconciler) get the same guarantees
"""

import math
import re

from fundfeed.core.domain_types import UserId, DEFAULT_CURRENCY
from fundfeed.core.errors import FieldValidationError
from fundfeed.core.records import NewRound


_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

_REQUIRED_TEXT = ("company_name", "description", "logo_url", "deck_url")

EDITABLE_FIELDS: frozenset[str] = frozenset({
    "company_name", "description", "raising_amount",
    "currency", "logo_url", "deck_url",
})

PROTECTED_FIELDS: frozenset[str] = frozenset({
    "id", "founder_id", "follower_count", "intro_request_count",
    "created_at", "updated_at",
})


def _require_text(name: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise FieldValidationError(f"{name} is required", name)
    return value.strip()


def _require_amount(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldValidationError("Valid raising amount is required", "raising_amount")
    amount = float(value)
    if not math.isfinite(amount) or amount <= 0:
        raise FieldValidationError("Valid raising amount is required", "raising_amount")
    return amount


def _require_currency(value: object) -> str:
    if not isinstance(value, str):
        raise FieldValidationError("currency must be a 3-letter code", "currency")
    code = value.strip().upper()
    if not _CURRENCY_RE.match(code):
        raise FieldValidationError("currency must be a 3-letter code", "currency")
    return code


def build_new_round(
    founder_id: UserId,
    *,
    company_name: object,
    description: object,
    raising_amount: object,
    logo_url: object,
    deck_url: object,
    currency: object = DEFAULT_CURRENCY,
) -> NewRound:
    """Validate creation input and return a NewRound. Raises on first bad field."""
    if not founder_id:
        raise FieldValidationError("founder_id is required", "founder_id")
    return NewRound(
        company_name=_require_text("company_name", company_name),
        description=_require_text("description", description),
        raising_amount=_require_amount(raising_amount),
        currency=_require_currency(currency),
        logo_url=_require_text("logo_url", logo_url),
        deck_url=_require_text("deck_url", deck_url),
        founder_id=founder_id,
    )


def clean_round_update(fields: dict[str, object]) -> dict[str, object]:
    """Validate a partial content update. Drops None values, rejects protected keys."""
    protected = PROTECTED_FIELDS.intersection(fields)
    if protected:
        name = sorted(protected)[0]
        raise FieldValidationError(f"{name} cannot be set directly", name)
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        name = sorted(unknown)[0]
        raise FieldValidationError(f"Unknown field: {name}", name)

    cleaned: dict[str, object] = {}
    for name, value in fields.items():
        if value is None:
            continue
        if name in _REQUIRED_TEXT:
            cleaned[name] = _require_text(name, value)
        elif name == "raising_amount":
            cleaned[name] = _require_amount(value)
        elif name == "currency":
            cleaned[name] = _require_currency(value)
    return cleaned
