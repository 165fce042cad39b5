"""
Typed exception hierarchy for the patient billing kernel.

Every error has a TYPED class (catch by type, not message), a static
``code`` attribute (machine-readable, safe to expose to callers), and
structured attributes carrying the offending values.

    BillingError (base)
    |
    +-- ValidationError
    |   +-- PatientReferenceError
    |
    +-- NotFoundError
    |   +-- PatientNotFoundError
    |   +-- InvoiceNotFoundError
    |
    +-- InvalidStateError
        +-- InvoiceAlreadyPaidError

Category        | Code                       | When Raised
----------------|----------------------------|-------------------------------------
Validation      | VALIDATION_ERROR           | Malformed or out-of-range input
                | PATIENT_REFERENCE_INVALID  | Invoice references unknown patient
----------------|----------------------------|-------------------------------------
Lookup          | PATIENT_NOT_FOUND          | Patient ID doesn't exist
                | INVOICE_NOT_FOUND          | Invoice ID doesn't exist
----------------|----------------------------|-------------------------------------
State           | INVOICE_ALREADY_PAID       | Paying an invoice that is paid

Handling pattern (what a request handler does):

    try:
        invoice = invoices.pay_invoice(invoice_id)
    except NotFoundError as e:
        return not_found(code=e.code, message=str(e))
    except (ValidationError, InvalidStateError) as e:
        return bad_request(code=e.code, message=str(e))

A dangling patient reference on invoice creation is a ValidationError,
not a NotFoundError: the caller sent a bad body, the URL was fine.
"""


class BillingError(Exception):
    """Base exception for all billing kernel errors."""

    code: str = "BILLING_ERROR"


# Validation


class ValidationError(BillingError):
    """Input is missing, malformed, or outside its allowed range."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


class PatientReferenceError(ValidationError):
    """Invoice creation referenced a patient that does not exist."""

    code: str = "PATIENT_REFERENCE_INVALID"

    def __init__(self, patient_id: int):
        self.patient_id = patient_id
        super().__init__("patient_id", f"patient {patient_id} does not exist")


# Lookup


class NotFoundError(BillingError):
    """A direct lookup by id found no matching record."""

    code: str = "NOT_FOUND"


class PatientNotFoundError(NotFoundError):
    """Patient with given ID was not found."""

    code: str = "PATIENT_NOT_FOUND"

    def __init__(self, patient_id: int):
        self.patient_id = patient_id
        super().__init__(f"Patient not found: {patient_id}")


class InvoiceNotFoundError(NotFoundError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: int):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


# State


class InvalidStateError(BillingError):
    """Operation is not allowed in the entity's current state."""

    code: str = "INVALID_STATE"


class InvoiceAlreadyPaidError(InvalidStateError):
    """
    Invoice has already been paid.

    Paid is terminal. A second payment is rejected rather than treated as
    an idempotent success.
    """

    code: str = "INVOICE_ALREADY_PAID"

    def __init__(self, invoice_id: int):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice already paid: {invoice_id}")
