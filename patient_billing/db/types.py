"""
Module: patient_billing.db.types
Responsibility: Column types and helpers for monetary and temporal values.
    Centralizes precision, rounding, and UTC normalisation so that every model
    and service uses identical definitions.
Architecture position: Store > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Amounts are stored as Numeric(10, 2): 10 significant digits, exactly
      2 fractional.  round_money() is the ONLY sanctioned rounding function.
    - No floats anywhere.  All monetary amounts use Decimal.
    - Timestamps are written as UTC and always come back timezone-aware.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

MONEY_PRECISION = 10
MONEY_SCALE = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

MONEY_QUANTUM = Decimal(1).scaleb(-MONEY_SCALE)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_SCALE,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to specified decimal places.

    Preconditions: value is a Decimal.
    Postconditions: Returns value quantized to the specified decimal places
        using the specified rounding mode.
    """
    return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=rounding)


def as_utc(value: datetime) -> datetime:
    """
    Reinterpret a datetime's wall-clock value as UTC.

    Any tz marker on the input is discarded, not converted: 10:00+02:00
    becomes 10:00 UTC.  Naive values are treated as UTC.
    """
    return value.replace(tzinfo=timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware UTC timestamp, portable across PostgreSQL and SQLite.

    Contract:
        - process_bind_param: aware datetimes are converted to UTC; naive
          datetimes are taken to already be UTC.
        - process_result_value: always returns an aware UTC datetime, even
          on backends (SQLite) that drop the offset on storage.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
