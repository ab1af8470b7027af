"""
Input validation tests: format rules, payload coercion, period parsing and
checkout request parsing.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from zlagoda.errors import ValidationError
from zlagoda.models import CustomerCard, StoreProduct
from zlagoda.routes.customer_cards import CARD_POLICY
from zlagoda.services.checkout_schemas import parse_checkout_request
from zlagoda.time_utils import parse_range
from zlagoda.validation import (
    ModelValidationPolicy,
    coerce_decimal,
    coerce_int,
    enforce_rules_employee,
    validate_check_number,
    validate_payload,
    validate_upc,
)


# =============================================================================
# FORMATS
# =============================================================================


class TestFormats:

    def test_upc(self):
        assert validate_upc("012345678901") == "012345678901"
        for bad in ("12345678901", "1234567890123", "abcdefghijkl", None, 123456789012):
            with pytest.raises(ValidationError):
                validate_upc(bad)

    def test_check_number(self):
        assert validate_check_number("CHECK042") == "CHECK042"
        for bad in ("CHECK42", "check042", "CHK0042", ""):
            with pytest.raises(ValidationError):
                validate_check_number(bad)


class TestCoercion:

    def test_int(self):
        assert coerce_int("q", 5) == 5
        assert coerce_int("q", " 7 ") == 7
        for bad in (True, 1.5, "1.0", "1e3", "", None):
            with pytest.raises(ValidationError):
                coerce_int("q", bad)

    def test_decimal(self):
        assert coerce_decimal("p", "12.10") == Decimal("12.10")
        assert coerce_decimal("p", 12.1) == Decimal("12.1")
        for bad in (True, "abc", "NaN", [1]):
            with pytest.raises(ValidationError):
                coerce_decimal("p", bad)


class TestValidatePayload:

    def test_create_requires_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_payload(model=CustomerCard, payload={"card_number": "100000000001"}, policy=CARD_POLICY,
                             partial=False)
        assert "cust_name" in exc_info.value.message

    def test_coerces_and_strips(self):
        patch = validate_payload(
            model=CustomerCard,
            payload={"cust_surname": "  Koval ", "percent": "7"},
            policy=CARD_POLICY,
            partial=True,
        )
        assert patch == {"cust_surname": "Koval", "percent": 7}

    def test_rejects_unknown_and_too_long(self):
        with pytest.raises(ValidationError):
            validate_payload(model=CustomerCard, payload={"nickname": "x"}, policy=CARD_POLICY, partial=True)
        with pytest.raises(ValidationError):
            validate_payload(model=CustomerCard, payload={"cust_name": "x" * 51}, policy=CARD_POLICY, partial=True)

    def test_boolean_column(self):
        policy = ModelValidationPolicy(writable_fields={"promotional_product"})
        patch = validate_payload(model=StoreProduct, payload={"promotional_product": "TRUE"}, policy=policy,
                                 partial=True)
        assert patch == {"promotional_product": True}


class TestEmployeeRules:

    def test_minimum_age(self):
        too_young = date(date.today().year - 16, 1, 1)
        with pytest.raises(ValidationError):
            enforce_rules_employee({"date_of_birth": too_young}, partial=True)

    def test_credentials_come_together(self):
        with pytest.raises(ValidationError):
            enforce_rules_employee({"password": "LongEnough1"}, partial=False)
        enforce_rules_employee({}, partial=False)


# =============================================================================
# PERIODS
# =============================================================================


class TestParseRange:

    def test_open_range(self):
        assert parse_range(None, None) == (None, None)

    def test_date_only_end_covers_the_day(self):
        start, end = parse_range("2026-03-01", "2026-03-01")
        assert start == datetime(2026, 3, 1)
        assert end == datetime(2026, 3, 2)

    def test_datetime_end_is_inclusive(self):
        _, end = parse_range(None, "2026-03-01T12:00:00Z")
        assert end > datetime(2026, 3, 1, 12)
        assert end < datetime(2026, 3, 1, 12, 0, 1)

    def test_offsets_normalized_to_utc(self):
        start, _ = parse_range("2026-03-01T02:00:00+02:00", None)
        assert start == datetime(2026, 3, 1, 0, 0)

    def test_inverted(self):
        with pytest.raises(ValueError):
            parse_range("2026-03-02", "2026-03-01")


# =============================================================================
# CHECKOUT REQUEST PARSING
# =============================================================================


class TestParseCheckoutRequest:

    NOW = datetime(2026, 3, 1, 12, 0)

    def test_parses_types(self):
        request = parse_checkout_request(
            {
                "header": {"check_number": "CHECK001", "card_number": "100000000001", "sum_total": "10.5"},
                "items": [{"upc": "000000000001", "quantity": "2", "selling_price": 5.25}],
            },
            id_employee="E002",
            now=self.NOW,
        )

        assert request.header.id_employee == "E002"
        assert request.header.print_date == self.NOW
        assert request.header.sum_total == Decimal("10.5")
        assert request.header.vat is None
        assert request.items[0].quantity == 2
        assert request.items[0].selling_price == Decimal("5.25")

    @pytest.mark.parametrize(
        "payload",
        [
            None,
            [],
            {"header": {}},
            {"header": [], "items": []},
            {"header": {"check_number": "CHECK001"}, "items": ["x"]},
            {"header": {"check_number": "CHECK001"}, "items": [{"upc": "000000000001"}]},
            {"header": {"check_number": "CHECK001", "print_date": "soon"}, "items": []},
            {"header": {"check_number": "CHECK001", "print_date": 5}, "items": []},
            {"header": {"check_number": "CHECK001", "id_employee": "E001"}, "items": []},
            {"header": {"check_number": {"a": 1}}, "items": []},
        ],
    )
    def test_rejects_malformed(self, payload):
        with pytest.raises(ValidationError):
            parse_checkout_request(payload, id_employee="E002", now=self.NOW)
