"""
Module: patient_billing.selectors.invoice_selector
Responsibility: Read-only query access to invoices, including the
    multi-predicate invoice filter.  Converts ORM models to frozen DTOs.
Architecture position: Selectors.  May import from models/, domain/dtos.py,
    and selectors/base.py.  MUST NOT import from services/.

Invariants enforced:
    - Read-only: No mutations performed on any queried data.
    - Ordering: every multi-invoice result is newest created_at_utc first,
      with id descending as a tie-breaker so equal timestamps order
      deterministically.
    - Filter predicates are AND-combined; absent predicates do not constrain.
    - Amount and date bounds are inclusive.

Failure modes:
    - Returns None or an empty list when no invoices match (never raises on
      absence of data).
"""

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from patient_billing.domain.dtos import InvoiceFilter, InvoiceInfo
from patient_billing.models.invoice import Invoice
from patient_billing.selectors.base import BaseSelector


class InvoiceSelector(BaseSelector[Invoice]):
    """
    Selector for invoice queries.

    Contract:
        All public query methods return InvoiceInfo instances (or lists
        thereof).  Callers validate filter arguments before they get here
        (see patient_billing.domain.validation.build_invoice_filter).
    """

    def __init__(self, session: Session):
        super().__init__(session)

    def get(self, invoice_id: int) -> InvoiceInfo | None:
        invoice = self.session.get(Invoice, invoice_id)
        return InvoiceInfo.from_model(invoice) if invoice is not None else None

    def list_for_patient(self, patient_id: int) -> list[InvoiceInfo]:
        """Invoices owned by one patient, newest first.  Empty if none."""
        return self.filter(InvoiceFilter(patient_id=patient_id))

    def filter(self, criteria: InvoiceFilter) -> list[InvoiceInfo]:
        """
        Invoices matching every supplied predicate, newest first.

        An empty InvoiceFilter returns every invoice.
        """
        stmt = self._ordered(self._apply(select(Invoice), criteria))
        invoices = self.session.execute(stmt).scalars().all()
        return [InvoiceInfo.from_model(i) for i in invoices]

    @staticmethod
    def _apply(stmt: Select, criteria: InvoiceFilter) -> Select:
        if criteria.patient_id is not None:
            stmt = stmt.where(Invoice.patient_id == criteria.patient_id)

        if criteria.status is not None:
            stmt = stmt.where(Invoice.status == criteria.status)

        if criteria.min_amount is not None:
            stmt = stmt.where(Invoice.amount >= criteria.min_amount)

        if criteria.max_amount is not None:
            stmt = stmt.where(Invoice.amount <= criteria.max_amount)

        if criteria.created_from is not None:
            stmt = stmt.where(Invoice.created_at_utc >= criteria.created_from)

        if criteria.created_to is not None:
            stmt = stmt.where(Invoice.created_at_utc <= criteria.created_to)

        return stmt

    @staticmethod
    def _ordered(stmt: Select) -> Select:
        return stmt.order_by(Invoice.created_at_utc.desc(), Invoice.id.desc())
