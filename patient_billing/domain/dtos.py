"""
DTOs -- Immutable data crossing the kernel boundary.

Responsibility:
    Defines the frozen records returned by services and selectors
    (PatientInfo, InvoiceInfo) and the validated query parameters for
    invoice filtering (InvoiceFilter).  Callers never receive ORM entities.

Architecture position:
    Domain -- free of database access.  from_model() class methods are
    boundary converters invoked only from services and selectors.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from patient_billing.db.types import round_money
from patient_billing.models.invoice import InvoiceStatus

if TYPE_CHECKING:
    from patient_billing.models.invoice import Invoice
    from patient_billing.models.patient import Patient


@dataclass(frozen=True)
class PatientInfo:
    """Patient summary: id, name, date of birth."""

    id: int
    name: str
    date_of_birth: date

    @classmethod
    def from_model(cls, patient: Patient) -> PatientInfo:
        return cls(
            id=patient.id,
            name=patient.name,
            date_of_birth=patient.date_of_birth,
        )


@dataclass(frozen=True)
class InvoiceInfo:
    """Invoice as seen by callers.  amount always carries 2 decimal places."""

    id: int
    patient_id: int
    amount: Decimal
    status: InvoiceStatus
    created_at_utc: datetime
    paid_at_utc: datetime | None

    @property
    def is_paid(self) -> bool:
        return self.status == InvoiceStatus.PAID

    @classmethod
    def from_model(cls, invoice: Invoice) -> InvoiceInfo:
        return cls(
            id=invoice.id,
            patient_id=invoice.patient_id,
            amount=round_money(Decimal(invoice.amount)),
            status=InvoiceStatus(invoice.status),
            created_at_utc=invoice.created_at_utc,
            paid_at_utc=invoice.paid_at_utc,
        )


@dataclass(frozen=True)
class InvoiceFilter:
    """
    Validated invoice query.  Every field is optional; the supplied ones
    are AND-combined.

    Bounds are inclusive.  ``created_from`` and ``created_to`` are already
    normalised to UTC (see patient_billing.domain.validation.build_invoice_filter).
    """

    status: InvoiceStatus | None = None
    patient_id: int | None = None
    min_amount: Decimal | None = None
    max_amount: Decimal | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.status,
                self.patient_id,
                self.min_amount,
                self.max_amount,
                self.created_from,
                self.created_to,
            )
        )
