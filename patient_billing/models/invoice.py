"""
Module: patient_billing.models.invoice
Responsibility: ORM persistence for invoices and the InvoiceStatus lifecycle.
Architecture position: Store > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, or domain/.

Invariants enforced:
    - Every Invoice has exactly one owning Patient (patient_id NOT NULL,
      foreign key with ON DELETE CASCADE).
    - amount is Numeric(10, 2) and lies in (0, 1_000_000]
      (ck_invoice_amount_range).
    - status and paid_at_utc agree: PENDING has no paid_at_utc, PAID has one
      (ck_invoice_paid_at_matches_status).
    - The only transition is PENDING -> PAID; it is performed exclusively by
      InvoiceService.pay_invoice.

Failure modes:
    - IntegrityError on a dangling patient_id, an out-of-range amount, or an
      inconsistent status/paid_at_utc pair written outside the service.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from patient_billing.db.base import Base

if TYPE_CHECKING:
    from patient_billing.models.patient import Patient


class InvoiceStatus(str, Enum):
    """Invoice payment status.

    Contract: Transitions follow PENDING -> PAID only.  PAID is terminal.
    """

    PENDING = "pending"
    PAID = "paid"


class Invoice(Base):
    """
    A billable charge owned by exactly one Patient.

    Guarantees:
        - status defaults to PENDING on INSERT.
        - created_at_utc is set once at creation and never changes.
        - paid_at_utc is NULL until the PENDING -> PAID transition.
    """

    __tablename__ = "invoices"

    __table_args__ = (
        CheckConstraint(
            "amount > 0 AND amount <= 1000000",
            name="ck_invoice_amount_range",
        ),
        CheckConstraint(
            "(status = 'pending' AND paid_at_utc IS NULL)"
            " OR (status = 'paid' AND paid_at_utc IS NOT NULL)",
            name="ck_invoice_paid_at_matches_status",
        ),
        Index("idx_invoice_patient", "patient_id"),
        Index("idx_invoice_status", "status"),
        Index("idx_invoice_created_at", "created_at_utc"),
    )

    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="CASCADE"),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        nullable=False,
    )

    status: Mapped[InvoiceStatus] = mapped_column(
        SAEnum(
            InvoiceStatus,
            name="invoice_status",
            native_enum=False,
            length=10,
            values_callable=lambda statuses: [s.value for s in statuses],
            validate_strings=True,
        ),
        nullable=False,
        default=InvoiceStatus.PENDING,
    )

    created_at_utc: Mapped[datetime] = mapped_column(
        nullable=False,
    )

    paid_at_utc: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )

    patient: Mapped["Patient"] = relationship(
        back_populates="invoices",
    )

    @property
    def is_paid(self) -> bool:
        """True iff the invoice has made the PENDING -> PAID transition."""
        return self.status == InvoiceStatus.PAID

    def __repr__(self) -> str:
        return f"<Invoice {self.id} patient={self.patient_id} status={self.status.value}>"
