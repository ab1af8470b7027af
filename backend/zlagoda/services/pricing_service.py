# Overview: Receipt totals, VAT and promotional prices.

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from flask import current_app
from sqlalchemy import select

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import CustomerCard, StoreProduct
from ..money import D, round_money
from ..validation import CARD_NUMBER_RE, UPC_RE
from .checkout_schemas import CheckoutHeader, CheckoutItem


def _rate(key: str) -> Decimal:
    return D(current_app.config[key])


def line_total(price, quantity: int) -> Decimal:
    return round_money(D(price) * quantity)


def quote(items: Iterable[CheckoutItem], card_percent: int = 0) -> tuple[Decimal, Decimal]:
    """
    (sum_total, vat) for a receipt.

    sum_total is the gross amount less the loyalty card discount; vat is the
    VAT share of sum_total at VAT_RATE. Both rounded half-up to cents.
    """
    if not 0 <= card_percent <= 100:
        raise ValidationError("percent must be between 0 and 100")

    gross = sum((D(item.selling_price) * item.quantity for item in items), Decimal("0"))
    discount = gross * Decimal(card_percent) / Decimal(100)
    sum_total = round_money(gross - discount)
    vat = round_money(sum_total * _rate("VAT_RATE"))
    return sum_total, vat


def promotional_price(price) -> Decimal:
    return round_money(D(price) * _rate("PROMO_PRICE_RATE"))


def price_checkout(header: CheckoutHeader, items: list[CheckoutItem]) -> tuple[CheckoutHeader, list[CheckoutItem]]:
    """
    Fill in what the client left out: each missing line price is the current
    shelf price, and missing totals are quoted from the items and the card.

    Read-only. The prices used here are not locked; the receipt stores them
    as charged.
    """
    missing = sorted({
        item.upc for item in items
        if item.selling_price is None and item.upc and UPC_RE.match(item.upc)
    })
    prices = {}
    if missing:
        rows = db.session.execute(
            select(StoreProduct.upc, StoreProduct.selling_price).where(StoreProduct.upc.in_(missing))
        ).all()
        prices = {row.upc: row.selling_price for row in rows}
        for upc in missing:
            if upc not in prices:
                raise NotFoundError(f"Product with UPC {upc} not found", details={"upc": upc})

    priced = [
        item if item.selling_price is not None or item.upc not in prices
        else CheckoutItem(upc=item.upc, quantity=item.quantity, selling_price=round_money(prices[item.upc]))
        for item in items
    ]

    if header.sum_total is not None and header.vat is not None:
        return header, priced

    card_percent = 0
    if header.card_number and CARD_NUMBER_RE.match(header.card_number):
        card = db.session.get(CustomerCard, header.card_number)
        if card is None:
            raise NotFoundError(
                f"Customer card with number {header.card_number} not found",
                details={"card_number": header.card_number},
            )
        card_percent = card.percent

    sum_total, vat = quote(priced, card_percent)
    return header.with_totals(
        header.sum_total if header.sum_total is not None else sum_total,
        header.vat if header.vat is not None else vat,
    ), priced
