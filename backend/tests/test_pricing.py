"""
Pricing tests: receipt totals, VAT, promotional prices and checkout pricing.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from zlagoda.errors import NotFoundError, ValidationError
from zlagoda.money import round_money, to_string_money
from zlagoda.services.checkout_schemas import CheckoutHeader, CheckoutItem
from zlagoda.services.pricing_service import line_total, price_checkout, promotional_price, quote


class TestMoney:

    def test_round_half_up(self):
        assert round_money("2.345") == Decimal("2.35")
        assert round_money("2.344") == Decimal("2.34")
        assert round_money(None) == Decimal("0.00")

    def test_to_string(self):
        assert to_string_money(Decimal("10")) == "10.00"
        assert to_string_money(None) is None


class TestQuote:

    def test_no_card(self, app):
        with app.app_context():
            total, vat = quote([CheckoutItem("000000000001", 3, Decimal("10.00"))])
        assert total == Decimal("30.00")
        assert vat == Decimal("6.00")

    def test_card_discount(self, app):
        with app.app_context():
            total, vat = quote(
                [
                    CheckoutItem("000000000001", 1, Decimal("9.99")),
                    CheckoutItem("000000000002", 2, Decimal("0.50")),
                ],
                card_percent=15,
            )
        # 10.99 * 0.85 = 9.3415
        assert total == Decimal("9.34")
        assert vat == Decimal("1.87")

    def test_full_discount(self, app):
        with app.app_context():
            total, vat = quote([CheckoutItem("000000000001", 1, Decimal("10.00"))], card_percent=100)
        assert total == Decimal("0.00")
        assert vat == Decimal("0.00")

    def test_percent_out_of_range(self, app):
        with app.app_context():
            with pytest.raises(ValidationError):
                quote([], card_percent=120)

    def test_line_total(self):
        assert line_total("25.50", 3) == Decimal("76.50")

    def test_promotional_price(self, app):
        with app.app_context():
            assert promotional_price("25.50") == Decimal("20.40")
            assert promotional_price("0.99") == Decimal("0.79")


class TestPriceCheckout:

    def _header(self, **overrides):
        data = dict(check_number="CHECK001", id_employee="E002", print_date=datetime(2026, 3, 1))
        data.update(overrides)
        return CheckoutHeader(**data)

    def test_fills_shelf_prices_and_totals(self, db_session, seed):
        header, items = price_checkout(
            self._header(card_number=seed.card),
            [CheckoutItem(seed.milk, 2), CheckoutItem(seed.kefir, 1, Decimal("20.00"))],
        )

        assert items[0].selling_price == Decimal("10.00")
        assert items[1].selling_price == Decimal("20.00")
        # 40.00 less 10%
        assert header.sum_total == Decimal("36.00")
        assert header.vat == Decimal("7.20")

    def test_keeps_client_totals(self, db_session, seed):
        header, _ = price_checkout(
            self._header(sum_total=Decimal("1.00"), vat=Decimal("0.20")),
            [CheckoutItem(seed.milk, 2)],
        )
        assert header.sum_total == Decimal("1.00")
        assert header.vat == Decimal("0.20")

    def test_unknown_upc(self, db_session, seed):
        with pytest.raises(NotFoundError):
            price_checkout(self._header(), [CheckoutItem("999999999999", 1)])

    def test_unknown_card(self, db_session, seed):
        with pytest.raises(NotFoundError):
            price_checkout(self._header(card_number="999999999999"), [CheckoutItem(seed.milk, 1)])

    def test_malformed_upc_left_for_validation(self, db_session, seed):
        _, items = price_checkout(
            self._header(sum_total=Decimal("0"), vat=Decimal("0")),
            [CheckoutItem("abc", 1)],
        )
        assert items[0].selling_price is None
