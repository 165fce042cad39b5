"""
ORM models for the patient billing store.

Importing this package registers every table on Base.metadata.
"""

from patient_billing.models.invoice import Invoice, InvoiceStatus
from patient_billing.models.patient import PATIENT_NAME_MAX_LENGTH, Patient

__all__ = [
    "Invoice",
    "InvoiceStatus",
    "Patient",
    "PATIENT_NAME_MAX_LENGTH",
]
