"""
InvoiceService -- invoice creation, payment, and querying.

Responsibility:
    Owns the invoice lifecycle.  Creates PENDING invoices for existing
    patients, performs the single PENDING -> PAID transition, and answers
    lookups and filtered queries.

Architecture position:
    Services -- imperative shell.  Validation is delegated to
    patient_billing.domain.validation, reads to the selectors, time to the
    injected Clock.

Invariants enforced:
    - An invoice can only be created for an existing patient.  A dangling
      reference is the caller's mistake, reported as a ValidationError
      (PatientReferenceError), never as a NotFoundError.
    - New invoices are PENDING with paid_at_utc = None.
    - PAID is terminal.  Paying twice raises InvoiceAlreadyPaidError.
    - status and paid_at_utc change together in one UPDATE or not at all.

Failure modes:
    - ValidationError: bad amount, bad patient id, bad filter argument.
    - InvoiceNotFoundError: lookup or payment of an unknown id.
    - InvoiceAlreadyPaidError: payment of a PAID invoice, including losing
      a race against a concurrent payment of the same invoice.

Concurrency:
    pay_invoice reads the row with SELECT ... FOR UPDATE (a row lock on
    PostgreSQL) and then issues a conditional UPDATE guarded by
    ``status = 'pending'``.  If another transaction paid the invoice in
    between, the UPDATE matches zero rows and the payment is rejected, so
    two concurrent payments can never both succeed on any backend.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from patient_billing.domain.clock import Clock, SystemClock
from patient_billing.domain.dtos import InvoiceInfo
from patient_billing.domain.validation import (
    build_invoice_filter,
    validate_invoice_amount,
)
from patient_billing.exceptions import (
    InvoiceAlreadyPaidError,
    InvoiceNotFoundError,
    PatientReferenceError,
    ValidationError,
)
from patient_billing.logging_config import LogContext, get_logger
from patient_billing.models.invoice import Invoice, InvoiceStatus
from patient_billing.selectors.invoice_selector import InvoiceSelector
from patient_billing.selectors.patient_selector import PatientSelector
from patient_billing.services.base import BaseService

logger = get_logger("services.invoice")


class InvoiceService(BaseService[Invoice]):
    """
    Service for the invoice lifecycle.

    Contract:
        All public methods return InvoiceInfo DTOs (or lists thereof).
        Timestamps come from the injected Clock, defaulting to SystemClock.
    """

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._patients = PatientSelector(session)
        self._invoices = InvoiceSelector(session)

    # =========================================================================
    # Commands
    # =========================================================================

    def create_invoice(
        self,
        patient_id: int,
        amount: Decimal | int | str,
    ) -> InvoiceInfo:
        """
        Create a PENDING invoice for an existing patient.

        Args:
            patient_id: Owning patient.
            amount: Decimal amount in (0, 1_000_000], at most 2 decimal places.

        Returns:
            Created InvoiceInfo DTO.

        Raises:
            ValidationError: If amount is invalid.
            PatientReferenceError: If patient_id does not name a patient.
        """
        validated_amount = validate_invoice_amount(amount)

        if patient_id is None:
            raise ValidationError("patient_id", "is required")
        if isinstance(patient_id, bool) or not isinstance(patient_id, int):
            raise ValidationError("patient_id", "must be an integer")
        if not self._patients.exists(patient_id):
            raise PatientReferenceError(patient_id)

        invoice = Invoice(
            patient_id=patient_id,
            amount=validated_amount,
            status=InvoiceStatus.PENDING,
            created_at_utc=self._clock.now_utc(),
            paid_at_utc=None,
        )
        self.session.add(invoice)
        self.session.flush()

        with LogContext.bind(patient_id=patient_id, invoice_id=invoice.id):
            logger.info("invoice_created", extra={"amount": validated_amount})
        return InvoiceInfo.from_model(invoice)

    def pay_invoice(self, invoice_id: int) -> InvoiceInfo:
        """
        Transition an invoice from PENDING to PAID.

        Postconditions: status is PAID and paid_at_utc is the clock's
            current time (never earlier than created_at_utc).

        Raises:
            InvoiceNotFoundError: If the invoice doesn't exist.
            InvoiceAlreadyPaidError: If the invoice is already PAID.
        """
        with LogContext.bind(invoice_id=invoice_id):
            invoice = self.session.execute(
                select(Invoice)
                .where(Invoice.id == invoice_id)
                .with_for_update()
            ).scalar_one_or_none()

            if invoice is None:
                raise InvoiceNotFoundError(invoice_id)
            if invoice.status == InvoiceStatus.PAID:
                raise InvoiceAlreadyPaidError(invoice_id)

            # Clock skew must not produce a payment before the invoice existed
            paid_at = max(self._clock.now_utc(), invoice.created_at_utc)

            result = self.session.execute(
                update(Invoice)
                .where(
                    Invoice.id == invoice_id,
                    Invoice.status == InvoiceStatus.PENDING,
                )
                .values(status=InvoiceStatus.PAID, paid_at_utc=paid_at)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Lost the race: another transaction paid it after our read
                raise InvoiceAlreadyPaidError(invoice_id)

            self.session.refresh(invoice)

            with LogContext.bind(patient_id=invoice.patient_id):
                logger.info("invoice_paid", extra={"paid_at_utc": paid_at})
            return InvoiceInfo.from_model(invoice)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_invoice(self, invoice_id: int) -> InvoiceInfo:
        """
        Get invoice by ID.

        Raises:
            InvoiceNotFoundError: If invoice doesn't exist.
        """
        invoice = self._invoices.get(invoice_id)
        if invoice is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def filter_invoices(
        self,
        status: str | InvoiceStatus | None = None,
        patient_id: int | None = None,
        min_amount: Decimal | int | str | None = None,
        max_amount: Decimal | int | str | None = None,
        from_: datetime | date | None = None,
        to: datetime | date | None = None,
    ) -> list[InvoiceInfo]:
        """
        Invoices matching every supplied predicate, newest first.

        Args:
            status: "pending" or "paid", any case.  Blank means no filter.
            patient_id: Exact owner match.
            min_amount: Inclusive lower bound on amount.
            max_amount: Inclusive upper bound on amount.
            from_: Inclusive lower bound on created_at_utc.
            to: Inclusive upper bound on created_at_utc.

        ``from_`` and ``to`` are read as UTC wall-clock times; any tz marker
        on the argument is ignored rather than converted.

        Raises:
            ValidationError: If status names no known status, or any other
                argument is malformed.
        """
        criteria = build_invoice_filter(
            status=status,
            patient_id=patient_id,
            min_amount=min_amount,
            max_amount=max_amount,
            created_from=from_,
            created_to=to,
        )
        return self._invoices.filter(criteria)
