"""Read-only selectors returning DTOs."""

from patient_billing.selectors.base import BaseSelector
from patient_billing.selectors.invoice_selector import InvoiceSelector
from patient_billing.selectors.patient_selector import PatientSelector

__all__ = [
    "BaseSelector",
    "InvoiceSelector",
    "PatientSelector",
]
