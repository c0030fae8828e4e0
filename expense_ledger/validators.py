"""Validation helpers shared by the ledger and its hosts."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE

from .exceptions import ValidationError
from .models import CATEGORIES, DEFAULT_CATEGORY, EMPTY_DESCRIPTION

_CATEGORY_LOOKUP = {label.lower(): label for label in CATEGORIES}


def _quantize_two_decimals(amount: Decimal) -> Decimal:
    """Round the amount to two decimal places using HALF_UP rounding."""
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def parse_amount(raw: object, field: str = "amount") -> Decimal:
    """Convert raw input to a positive Decimal with exactly two fraction digits."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise ValidationError(f"{field} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")

    quantized = _quantize_two_decimals(amount)
    # 0.001 rounds to 0.00, which would persist a non-positive amount.
    if quantized <= 0:
        raise ValidationError(f"{field} must be at least 0.01")
    return quantized


def validate_category(value: object, field: str = "category") -> str:
    if value is None:
        return DEFAULT_CATEGORY
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    canonical = _CATEGORY_LOOKUP.get(value.strip().lower())
    if canonical is None:
        raise ValidationError(f"{field} must be one of: {', '.join(CATEGORIES)}")
    return canonical


def validate_date(value: object, field: str = "date") -> str:
    """Normalise the expense date to ``YYYY-MM-DD``; missing values mean today."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return date.today().isoformat()
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a date or ISO 8601 string")
    text = value.strip()
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        pass
    # Full timestamps are accepted; the time-of-day is dropped.
    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError as exc:
        raise ValidationError(f"{field} must use the YYYY-MM-DD format") from exc


def normalize_description(value: object) -> str:
    if value is None:
        return EMPTY_DESCRIPTION
    if not isinstance(value, str):
        raise ValidationError("description must be a string")
    if ILLEGAL_CHARACTERS_RE.search(value):
        raise ValidationError("description contains control characters")
    return value.strip() or EMPTY_DESCRIPTION
