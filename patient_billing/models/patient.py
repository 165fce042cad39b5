"""
Module: patient_billing.models.patient
Responsibility: ORM persistence for patients, the owners of invoices.
Architecture position: Store > Models.  May import from db/ only.
    MUST NOT import from services/, selectors/, or domain/.

Invariants enforced:
    - name is NOT NULL and at most 120 characters (column length).  Trimming
      and the non-blank rule are enforced by PatientService before INSERT.
    - Deleting a Patient deletes all of its Invoices, both through the ORM
      cascade and through ON DELETE CASCADE on invoices.patient_id.

Failure modes:
    - IntegrityError on NULL name or date_of_birth.
"""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from patient_billing.db.base import Base

if TYPE_CHECKING:
    from patient_billing.models.invoice import Invoice

PATIENT_NAME_MAX_LENGTH = 120


class Patient(Base):
    """
    A person who can accumulate invoices.

    Guarantees:
        - id is store-assigned and never changes.
        - invoices holds every Invoice whose patient_id is this id.
    """

    __tablename__ = "patients"

    name: Mapped[str] = mapped_column(
        String(PATIENT_NAME_MAX_LENGTH),
        nullable=False,
    )

    date_of_birth: Mapped[date] = mapped_column(
        nullable=False,
    )

    invoices: Mapped[list["Invoice"]] = relationship(
        back_populates="patient",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Patient {self.id}: {self.name}>"
