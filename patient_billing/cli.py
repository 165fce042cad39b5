"""
Command-line front end for the billing kernel.

Parses arguments into primitives, runs exactly one service operation inside
one unit of work, and prints the result as JSON.  Typed errors map to exit
codes the way a request handler maps them to responses:

    0  success
    2  unparseable command line (argparse usage error)
    3  NotFoundError                        (not found)
    4  ValidationError / InvalidStateError  (bad request)

Usage:
    patient-billing init-db
    patient-billing create-patient --name "Alice" --dob 1990-01-01
    patient-billing create-invoice --patient-id 1 --amount 42.50
    patient-billing pay-invoice 1
    patient-billing list-invoices --status paid --min-amount 10
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Sequence

from sqlalchemy.orm import Session

from patient_billing.config import Settings
from patient_billing.db.engine import Database
from patient_billing.exceptions import (
    BillingError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from patient_billing.logging_config import LogContext, configure_logging
from patient_billing.services.invoice_service import InvoiceService
from patient_billing.services.patient_service import PatientService

EXIT_OK = 0
EXIT_USAGE = 2  # argparse exits with this itself
EXIT_NOT_FOUND = 3
EXIT_BAD_REQUEST = 4


def _json_default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Not JSON serializable: {type(obj).__name__}")


def _to_json(result: Any) -> str:
    if isinstance(result, list):
        payload = [asdict(item) for item in result]
    elif result is None:
        payload = None
    else:
        payload = asdict(result)
    return json.dumps(payload, default=_json_default, indent=2)


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value!r}") from None


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO datetime: {value!r}") from None


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_create_patient(session: Session, args: argparse.Namespace) -> Any:
    return PatientService(session).create_patient(args.name, args.dob)


def _cmd_list_patients(session: Session, args: argparse.Namespace) -> Any:
    return PatientService(session).list_patients()


def _cmd_get_patient(session: Session, args: argparse.Namespace) -> Any:
    return PatientService(session).get_patient(args.patient_id)


def _cmd_patient_invoices(session: Session, args: argparse.Namespace) -> Any:
    return PatientService(session).list_invoices_for_patient(args.patient_id)


def _cmd_create_invoice(session: Session, args: argparse.Namespace) -> Any:
    return InvoiceService(session).create_invoice(args.patient_id, args.amount)


def _cmd_get_invoice(session: Session, args: argparse.Namespace) -> Any:
    return InvoiceService(session).get_invoice(args.invoice_id)


def _cmd_pay_invoice(session: Session, args: argparse.Namespace) -> Any:
    return InvoiceService(session).pay_invoice(args.invoice_id)


def _cmd_list_invoices(session: Session, args: argparse.Namespace) -> Any:
    return InvoiceService(session).filter_invoices(
        status=args.status,
        patient_id=args.patient_id,
        min_amount=args.min_amount,
        max_amount=args.max_amount,
        from_=args.from_,
        to=args.to,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="patient-billing",
        description="Patient and invoice tracking.",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy database URL (overrides PATIENT_BILLING_DATABASE_URL)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables if they do not exist")

    p = sub.add_parser("create-patient", help="Register a patient")
    p.add_argument("--name", required=True)
    p.add_argument("--dob", required=True, type=_parse_date, help="YYYY-MM-DD")
    p.set_defaults(handler=_cmd_create_patient)

    p = sub.add_parser("list-patients", help="List all patients")
    p.set_defaults(handler=_cmd_list_patients)

    p = sub.add_parser("get-patient", help="Show one patient")
    p.add_argument("patient_id", type=int)
    p.set_defaults(handler=_cmd_get_patient)

    p = sub.add_parser("patient-invoices", help="List a patient's invoices")
    p.add_argument("patient_id", type=int)
    p.set_defaults(handler=_cmd_patient_invoices)

    p = sub.add_parser("create-invoice", help="Raise a pending invoice")
    p.add_argument("--patient-id", required=True, type=int)
    # Kept as text; the kernel parses it to Decimal
    p.add_argument("--amount", required=True)
    p.set_defaults(handler=_cmd_create_invoice)

    p = sub.add_parser("get-invoice", help="Show one invoice")
    p.add_argument("invoice_id", type=int)
    p.set_defaults(handler=_cmd_get_invoice)

    p = sub.add_parser("pay-invoice", help="Mark a pending invoice paid")
    p.add_argument("invoice_id", type=int)
    p.set_defaults(handler=_cmd_pay_invoice)

    p = sub.add_parser("list-invoices", help="Filter invoices, newest first")
    p.add_argument("--status", help="pending or paid (any case)")
    p.add_argument("--patient-id", type=int)
    p.add_argument("--min-amount")
    p.add_argument("--max-amount")
    p.add_argument("--from", dest="from_", type=_parse_datetime)
    p.add_argument("--to", type=_parse_datetime)
    p.set_defaults(handler=_cmd_list_invoices)

    return parser


def _exit_code_for(error: BillingError) -> int:
    if isinstance(error, NotFoundError):
        return EXIT_NOT_FOUND
    if isinstance(error, (ValidationError, InvalidStateError)):
        return EXIT_BAD_REQUEST
    return 1


def run(
    argv: Sequence[str] | None = None,
    settings: Settings | None = None,
    database: Database | None = None,
    out: Callable[[str], None] | None = None,
    err: Callable[[str], None] | None = None,
) -> int:
    """
    Execute one CLI invocation and return its exit code.

    ``database`` may be supplied by the caller (tests); otherwise one is
    built from settings and disposed on exit.
    """
    out = out or (lambda text: print(text, file=sys.stdout))
    err = err or (lambda text: print(text, file=sys.stderr))

    args = build_parser().parse_args(argv)
    settings = settings or Settings.from_env()
    configure_logging(level=settings.log_level_number)

    owns_database = database is None
    if database is None:
        database = Database.from_url(
            args.database_url or settings.database_url,
            echo=settings.sql_echo,
        )

    try:
        if args.command == "init-db":
            database.create_tables()
            out(json.dumps({"status": "ok"}))
            return EXIT_OK

        with LogContext.bind(request_id=f"cli:{args.command}"):
            try:
                with database.session_scope() as session:
                    result = args.handler(session, args)
            except BillingError as e:
                err(json.dumps({"error": e.code, "message": str(e)}))
                return _exit_code_for(e)

        out(_to_json(result))
        return EXIT_OK
    finally:
        if owns_database:
            database.dispose()


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
