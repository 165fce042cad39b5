"""
Payment race safety.

Two units of work that both believe an invoice is PENDING must not both
pay it.  The loser sees InvoiceAlreadyPaidError and the winner's
paid_at_utc survives.
"""

import threading
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from patient_billing.domain.clock import DeterministicClock
from patient_billing.exceptions import InvoiceAlreadyPaidError
from patient_billing.models.invoice import InvoiceStatus
from patient_billing.services.invoice_service import InvoiceService
from patient_billing.services.patient_service import PatientService

START = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def pending_invoice(file_database):
    with file_database.session_scope() as session:
        patient = PatientService(session).create_patient("Race", date(1980, 1, 1))
        invoice = InvoiceService(session, DeterministicClock(START)).create_invoice(
            patient.id, Decimal("10.00")
        )
    return invoice


def test_stale_reader_cannot_pay_after_winner_commits(file_database, pending_invoice):
    winner_clock = DeterministicClock(START + timedelta(minutes=1))
    loser_clock = DeterministicClock(START + timedelta(minutes=2))

    winner = file_database.get_session()
    loser = file_database.get_session()
    try:
        # Loser reads first and holds a PENDING view of the invoice
        stale = InvoiceService(loser, loser_clock).get_invoice(pending_invoice.id)
        assert stale.status == InvoiceStatus.PENDING

        InvoiceService(winner, winner_clock).pay_invoice(pending_invoice.id)
        winner.commit()

        with pytest.raises(InvoiceAlreadyPaidError):
            InvoiceService(loser, loser_clock).pay_invoice(pending_invoice.id)
        loser.rollback()
    finally:
        winner.close()
        loser.close()

    with file_database.session_scope() as session:
        final = InvoiceService(session).get_invoice(pending_invoice.id)
    assert final.status == InvoiceStatus.PAID
    assert final.paid_at_utc == START + timedelta(minutes=1)


def test_concurrent_payments_exactly_one_succeeds(file_database, pending_invoice):
    barrier = threading.Barrier(4)
    outcomes: list[str] = []
    lock = threading.Lock()

    def pay():
        barrier.wait()
        try:
            with file_database.session_scope() as session:
                InvoiceService(session).pay_invoice(pending_invoice.id)
            outcome = "paid"
        except InvoiceAlreadyPaidError:
            outcome = "already_paid"
        except Exception as exc:  # store-level conflict (e.g. database is locked)
            outcome = type(exc).__name__
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=pay) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert len(outcomes) == 4
    assert outcomes.count("paid") == 1

    with file_database.session_scope() as session:
        assert InvoiceService(session).get_invoice(pending_invoice.id).is_paid
