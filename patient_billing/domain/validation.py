"""
Validation -- explicit precondition checks for every write and query.

Responsibility:
    Turns caller-supplied primitives into validated domain values, raising
    ValidationError (with the offending field name and a reason) on the
    first violation.  Services call these before touching the store, so a
    rejected request never produces a partial write.

Architecture position:
    Domain -- pure functions, zero I/O.

Invariants enforced:
    - Patient names are trimmed, non-blank, and at most 120 characters.
    - Invoice amounts lie in (0, 1_000_000] with at most 2 fractional digits.
    - Amounts are never floats.
    - Status filters parse case-insensitively to exactly one InvoiceStatus.
"""

from __future__ import annotations

from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation

from patient_billing.db.types import MONEY_QUANTUM, as_utc
from patient_billing.domain.dtos import InvoiceFilter
from patient_billing.exceptions import ValidationError
from patient_billing.models.invoice import InvoiceStatus
from patient_billing.models.patient import PATIENT_NAME_MAX_LENGTH

MIN_INVOICE_AMOUNT = Decimal("0.00")  # exclusive
MAX_INVOICE_AMOUNT = Decimal("1000000.00")  # inclusive


def validate_patient_name(name: str | None) -> str:
    """Return the trimmed name.

    Raises:
        ValidationError: If name is missing, blank after trimming, or
            longer than 120 characters.
    """
    if name is None:
        raise ValidationError("name", "is required")
    if not isinstance(name, str):
        raise ValidationError("name", "must be a string")

    trimmed = name.strip()
    if not trimmed:
        raise ValidationError("name", "is required")
    if len(trimmed) > PATIENT_NAME_MAX_LENGTH:
        raise ValidationError(
            "name", f"must be at most {PATIENT_NAME_MAX_LENGTH} characters"
        )
    return trimmed


def validate_date_of_birth(date_of_birth: date | None) -> date:
    """Return the date of birth as a plain date (time component dropped)."""
    if date_of_birth is None:
        raise ValidationError("date_of_birth", "is required")
    if isinstance(date_of_birth, datetime):
        return date_of_birth.date()
    if not isinstance(date_of_birth, date):
        raise ValidationError("date_of_birth", "must be a date")
    return date_of_birth


def parse_decimal(value: Decimal | int | str | None, field: str) -> Decimal:
    """
    Convert an amount-like primitive to a finite Decimal.

    Accepts Decimal, int, or a numeric string.  Floats and bools are
    rejected: binary floats cannot represent cents exactly.
    """
    if value is None:
        raise ValidationError(field, "is required")
    if isinstance(value, (bool, float)):
        raise ValidationError(field, "must be a decimal, not a float")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(value.strip() if isinstance(value, str) else value)
        except InvalidOperation:
            raise ValidationError(field, f"is not a number: {value!r}") from None
    else:
        raise ValidationError(field, f"is not a number: {value!r}")

    if not result.is_finite():
        raise ValidationError(field, "must be a finite number")
    return result


def validate_invoice_amount(amount: Decimal | int | str | None) -> Decimal:
    """
    Return the amount quantized to cents.

    Raises:
        ValidationError: If amount is missing, malformed, not greater than
            zero, greater than 1_000_000, or has sub-cent digits.
    """
    value = parse_decimal(amount, "amount")

    if value <= MIN_INVOICE_AMOUNT:
        raise ValidationError("amount", "must be greater than 0")
    if value > MAX_INVOICE_AMOUNT:
        raise ValidationError("amount", f"must not exceed {MAX_INVOICE_AMOUNT}")

    quantized = value.quantize(MONEY_QUANTUM)
    if quantized != value:
        raise ValidationError("amount", "must have at most 2 decimal places")
    return quantized


def parse_status(status: str | InvoiceStatus | None) -> InvoiceStatus | None:
    """
    Parse a status filter.

    None, empty, or whitespace-only means "no status filter".  Otherwise the
    text must name a status, case-insensitively.
    """
    if status is None or isinstance(status, InvoiceStatus):
        return status
    if not isinstance(status, str):
        raise ValidationError("status", "must be a string")

    text = status.strip()
    if not text:
        return None
    try:
        return InvoiceStatus(text.lower())
    except ValueError:
        raise ValidationError(
            "status", f"{status!r} is not valid. Use Pending or Paid."
        ) from None


def _created_bound(value: datetime | date | None, field: str) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if isinstance(value, date):
        return as_utc(datetime.combine(value, time.min))
    raise ValidationError(field, "must be a date or datetime")


def build_invoice_filter(
    status: str | InvoiceStatus | None = None,
    patient_id: int | None = None,
    min_amount: Decimal | int | str | None = None,
    max_amount: Decimal | int | str | None = None,
    created_from: datetime | date | None = None,
    created_to: datetime | date | None = None,
) -> InvoiceFilter:
    """
    Validate raw filter arguments into an InvoiceFilter.

    ``created_from`` and ``created_to`` keep their wall-clock value and are
    stamped as UTC; a bare date means midnight UTC of that day.
    """
    if patient_id is not None and (
        isinstance(patient_id, bool) or not isinstance(patient_id, int)
    ):
        raise ValidationError("patient_id", "must be an integer")

    return InvoiceFilter(
        status=parse_status(status),
        patient_id=patient_id,
        min_amount=None if min_amount is None else parse_decimal(min_amount, "min_amount"),
        max_amount=None if max_amount is None else parse_decimal(max_amount, "max_amount"),
        created_from=_created_bound(created_from, "from"),
        created_to=_created_bound(created_to, "to"),
    )
