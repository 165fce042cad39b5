"""
Module: patient_billing.selectors.patient_selector
Responsibility: Read-only queries over patients.
Architecture position: Selectors.

Failure modes:
    - Returns None or an empty list when nothing matches (never raises on
      absence of data; the service layer decides whether absence is an error).
"""

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from patient_billing.domain.dtos import PatientInfo
from patient_billing.models.patient import Patient
from patient_billing.selectors.base import BaseSelector


class PatientSelector(BaseSelector[Patient]):
    """Selector for patient queries.  Results are ordered by id."""

    def __init__(self, session: Session):
        super().__init__(session)

    def get(self, patient_id: int) -> PatientInfo | None:
        patient = self.session.get(Patient, patient_id)
        return PatientInfo.from_model(patient) if patient is not None else None

    def exists(self, patient_id: int) -> bool:
        stmt = select(exists().where(Patient.id == patient_id))
        return bool(self.session.execute(stmt).scalar())

    def list_all(self) -> list[PatientInfo]:
        stmt = select(Patient).order_by(Patient.id)
        patients = self.session.execute(stmt).scalars().all()
        return [PatientInfo.from_model(p) for p in patients]
