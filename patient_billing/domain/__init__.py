"""Domain layer - clock, DTOs, and validation."""

from patient_billing.domain.clock import Clock, DeterministicClock, SystemClock
from patient_billing.domain.dtos import InvoiceFilter, InvoiceInfo, PatientInfo

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "InvoiceFilter",
    "InvoiceInfo",
    "PatientInfo",
]
