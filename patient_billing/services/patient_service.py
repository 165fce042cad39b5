"""
Service layer for Patient operations.

Registers patients and answers patient lookups, including the invoice
history for one patient.  Returns PatientInfo / InvoiceInfo DTOs
instead of ORM entities.
"""

from __future__ import annotations

from datetime import date

from sqlalchemy.orm import Session

from patient_billing.domain.dtos import InvoiceInfo, PatientInfo
from patient_billing.domain.validation import (
    validate_date_of_birth,
    validate_patient_name,
)
from patient_billing.exceptions import PatientNotFoundError
from patient_billing.logging_config import LogContext, get_logger
from patient_billing.models.patient import Patient
from patient_billing.selectors.invoice_selector import InvoiceSelector
from patient_billing.selectors.patient_selector import PatientSelector
from patient_billing.services.base import BaseService

logger = get_logger("services.patient")


class PatientService(BaseService[Patient]):
    """
    Service for managing patients.

    Patients are created here and never updated or deleted by any
    operation; removal only happens through the store's cascade.
    """

    def __init__(self, session: Session):
        super().__init__(session)
        self._patients = PatientSelector(session)
        self._invoices = InvoiceSelector(session)

    def create_patient(self, name: str, date_of_birth: date) -> PatientInfo:
        """
        Create a new patient.

        Args:
            name: Display name.  Surrounding whitespace is trimmed.
            date_of_birth: Calendar date of birth.

        Returns:
            Created PatientInfo DTO with its store-assigned id.

        Raises:
            ValidationError: If the name is blank or longer than 120
                characters, or date_of_birth is missing.
        """
        patient = Patient(
            name=validate_patient_name(name),
            date_of_birth=validate_date_of_birth(date_of_birth),
        )
        self.session.add(patient)
        self.session.flush()

        with LogContext.bind(patient_id=patient.id):
            logger.info("patient_created")
        return PatientInfo.from_model(patient)

    def list_patients(self) -> list[PatientInfo]:
        """All patients, ordered by id.  No filtering, no pagination."""
        return self._patients.list_all()

    def get_patient(self, patient_id: int) -> PatientInfo:
        """
        Get patient by ID.

        Raises:
            PatientNotFoundError: If patient doesn't exist.
        """
        patient = self._patients.get(patient_id)
        if patient is None:
            raise PatientNotFoundError(patient_id)
        return patient

    def list_invoices_for_patient(self, patient_id: int) -> list[InvoiceInfo]:
        """
        Invoices owned by a patient, newest first.

        Raises:
            PatientNotFoundError: If patient doesn't exist.  A patient with
                no invoices yields an empty list instead.
        """
        with LogContext.bind(patient_id=patient_id):
            if not self._patients.exists(patient_id):
                raise PatientNotFoundError(patient_id)

            invoices = self._invoices.list_for_patient(patient_id)
            logger.debug("patient_invoices_listed", extra={"count": len(invoices)})
            return invoices
