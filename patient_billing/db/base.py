"""
Module: patient_billing.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models.  Provides
    the integer primary key convention and the type annotation map that keeps
    column types consistent across the schema.
Architecture position: Store > DB.  This is the lowest-level import target
    within the package.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, selectors/, or domain/.

Invariants enforced:
    - Store-assigned identity: every model inherits an autoincrement integer
      primary key.  Callers never supply ids.
    - Decimal precision: Decimal maps to Numeric(10, 2).  NEVER use float for
      monetary amounts.
    - UTC timestamps: datetime maps to UTCDateTime, so every timestamp is
      timezone-aware UTC on read regardless of backend.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import Date, Integer, Numeric
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from patient_billing.db.types import MONEY_PRECISION, MONEY_SCALE, UTCDateTime


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - id is an integer assigned by the store on INSERT.
        - Decimal maps to Numeric(10, 2).
        - datetime maps to UTCDateTime (always timezone-aware UTC).
        - date maps to Date (no time component).
    """

    type_annotation_map: ClassVar[dict] = {
        # Currency: 10 significant digits, 2 fractional
        Decimal: Numeric(MONEY_PRECISION, MONEY_SCALE),
        datetime: UTCDateTime(),
        date: Date,
        # Plain Integer so SQLite aliases the PK to ROWID
        int: Integer,
    }

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
