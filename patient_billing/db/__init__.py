"""Database layer - engine, base classes, and column types."""

from patient_billing.db.base import Base
from patient_billing.db.engine import Database, create_engine_from_url
from patient_billing.db.types import UTCDateTime, round_money

__all__ = [
    "Base",
    "Database",
    "create_engine_from_url",
    "UTCDateTime",
    "round_money",
]
