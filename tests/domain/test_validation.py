"""Tests for the explicit precondition checks in patient_billing.domain.validation."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from patient_billing.domain.dtos import InvoiceFilter
from patient_billing.domain.validation import (
    build_invoice_filter,
    parse_decimal,
    parse_status,
    validate_date_of_birth,
    validate_invoice_amount,
    validate_patient_name,
)
from patient_billing.exceptions import ValidationError
from patient_billing.models.invoice import InvoiceStatus


class TestPatientName:
    def test_trims_surrounding_whitespace(self):
        assert validate_patient_name("  Alice Smith \t") == "Alice Smith"

    @pytest.mark.parametrize("name", ["", "   ", "\t\n", None])
    def test_blank_or_missing_rejected(self, name):
        with pytest.raises(ValidationError) as exc_info:
            validate_patient_name(name)
        assert exc_info.value.field == "name"

    def test_exactly_120_characters_accepted(self):
        assert validate_patient_name("x" * 120) == "x" * 120

    def test_121_characters_rejected(self):
        with pytest.raises(ValidationError, match="at most 120"):
            validate_patient_name("x" * 121)

    def test_length_checked_after_trimming(self):
        assert validate_patient_name("  " + "x" * 120 + "  ") == "x" * 120

    def test_non_string_rejected(self):
        with pytest.raises(ValidationError):
            validate_patient_name(123)


class TestDateOfBirth:
    def test_date_passes_through(self):
        assert validate_date_of_birth(date(1990, 1, 1)) == date(1990, 1, 1)

    def test_datetime_loses_time_component(self):
        assert validate_date_of_birth(datetime(1990, 1, 1, 23, 59)) == date(1990, 1, 1)

    def test_missing_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_date_of_birth(None)
        assert exc_info.value.field == "date_of_birth"

    def test_string_rejected(self):
        with pytest.raises(ValidationError):
            validate_date_of_birth("1990-01-01")


class TestInvoiceAmount:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("42.5"), Decimal("42.50")),
            (Decimal("0.01"), Decimal("0.01")),
            (Decimal("1000000.00"), Decimal("1000000.00")),
            (1_000_000, Decimal("1000000.00")),
            ("19.99", Decimal("19.99")),
            (" 7 ", Decimal("7.00")),
            (Decimal("3.100"), Decimal("3.10")),
        ],
    )
    def test_valid_amounts(self, amount, expected):
        result = validate_invoice_amount(amount)
        assert result == expected
        assert result.as_tuple().exponent == -2

    @pytest.mark.parametrize(
        "amount",
        [Decimal("0"), Decimal("0.00"), Decimal("-0.01"), -5, "0"],
    )
    def test_zero_and_negative_rejected(self, amount):
        with pytest.raises(ValidationError, match="greater than 0"):
            validate_invoice_amount(amount)

    def test_just_above_maximum_rejected(self):
        with pytest.raises(ValidationError, match="must not exceed"):
            validate_invoice_amount(Decimal("1000000.01"))

    def test_sub_cent_precision_rejected(self):
        with pytest.raises(ValidationError, match="2 decimal places"):
            validate_invoice_amount(Decimal("42.505"))

    @pytest.mark.parametrize(
        "amount",
        [None, "", "abc", "NaN", "Infinity", Decimal("NaN"), 42.5, True, [1]],
    )
    def test_missing_or_malformed_rejected(self, amount):
        with pytest.raises(ValidationError) as exc_info:
            validate_invoice_amount(amount)
        assert exc_info.value.field == "amount"


class TestParseDecimal:
    def test_uses_given_field_name(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_decimal("ten", "min_amount")
        assert exc_info.value.field == "min_amount"

    def test_negative_allowed(self):
        assert parse_decimal("-3", "min_amount") == Decimal("-3")


class TestParseStatus:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("pending", InvoiceStatus.PENDING),
            ("Pending", InvoiceStatus.PENDING),
            ("PAID", InvoiceStatus.PAID),
            ("pAiD", InvoiceStatus.PAID),
            ("  paid  ", InvoiceStatus.PAID),
        ],
    )
    def test_case_insensitive(self, text, expected):
        assert parse_status(text) is expected

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_means_no_filter(self, text):
        assert parse_status(text) is None

    def test_enum_accepted_as_is(self):
        assert parse_status(InvoiceStatus.PAID) is InvoiceStatus.PAID

    @pytest.mark.parametrize("text", ["bogus", "0", "1", "paid!", "unpaid"])
    def test_unknown_rejected(self, text):
        with pytest.raises(ValidationError, match="Use Pending or Paid"):
            parse_status(text)


class TestBuildInvoiceFilter:
    def test_no_arguments_is_empty_filter(self):
        criteria = build_invoice_filter()
        assert criteria == InvoiceFilter()
        assert criteria.is_empty

    def test_all_arguments(self):
        criteria = build_invoice_filter(
            status="paid",
            patient_id=3,
            min_amount="10",
            max_amount=Decimal("50"),
            created_from=datetime(2026, 1, 1),
            created_to=datetime(2026, 12, 31, 23, 59, 59),
        )
        assert criteria.status is InvoiceStatus.PAID
        assert criteria.patient_id == 3
        assert criteria.min_amount == Decimal("10")
        assert criteria.max_amount == Decimal("50")
        assert criteria.created_from == datetime(2026, 1, 1, tzinfo=timezone.utc)
        assert criteria.created_to == datetime(2026, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
        assert not criteria.is_empty

    def test_offset_is_replaced_not_converted(self):
        plus_five = timezone(timedelta(hours=5))
        criteria = build_invoice_filter(created_from=datetime(2026, 3, 1, 10, 0, tzinfo=plus_five))
        assert criteria.created_from == datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_bare_date_is_midnight_utc(self):
        criteria = build_invoice_filter(created_to=date(2026, 3, 1))
        assert criteria.created_to == datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)

    def test_malformed_bounds_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            build_invoice_filter(max_amount="lots")
        assert exc_info.value.field == "max_amount"

        with pytest.raises(ValidationError) as exc_info:
            build_invoice_filter(created_from="yesterday")
        assert exc_info.value.field == "from"

    def test_non_integer_patient_rejected(self):
        with pytest.raises(ValidationError):
            build_invoice_filter(patient_id="3")
