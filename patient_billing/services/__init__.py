"""Kernel services.  Each takes a Session and flushes, never commits."""

from patient_billing.services.base import BaseService
from patient_billing.services.invoice_service import InvoiceService
from patient_billing.services.patient_service import PatientService

__all__ = [
    "BaseService",
    "InvoiceService",
    "PatientService",
]
