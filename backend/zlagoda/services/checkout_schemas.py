from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from ..errors import ValidationError
from ..time_utils import parse_iso_datetime
from ..validation import (
    coerce_decimal,
    coerce_int,
    validate_card_number,
    validate_check_number,
    validate_employee_id,
    validate_upc,
)


@dataclass(frozen=True)
class CheckoutItem:
    upc: str
    quantity: int
    # None until pricing fills in the current shelf price
    selling_price: Decimal | None = None


@dataclass(frozen=True)
class CheckoutHeader:
    check_number: str
    id_employee: str
    print_date: datetime
    card_number: str | None = None
    # None until pricing computes them from the items
    sum_total: Decimal | None = None
    vat: Decimal | None = None

    def with_totals(self, sum_total: Decimal, vat: Decimal) -> "CheckoutHeader":
        return replace(self, sum_total=sum_total, vat=vat)


@dataclass(frozen=True)
class CheckoutRequest:
    header: CheckoutHeader
    items: list[CheckoutItem] = field(default_factory=list)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ValidationError("Identifiers must be strings")
    text = str(value).strip()
    return text or None


def _optional_decimal(key: str, value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return coerce_decimal(key, value)


def parse_checkout_request(payload: Any, *, id_employee: str, now: datetime) -> CheckoutRequest:
    """
    Turn a JSON body shaped as {"header": {...}, "items": [...]} into typed
    structs. Only types are coerced here; rules live in validate_checkout.

    id_employee is the authenticated cashier, never taken from the body.
    print_date defaults to now.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid request format. Expected { header: {...}, items: [...] }")

    raw_header = payload.get("header")
    raw_items = payload.get("items")
    if not isinstance(raw_header, dict) or not isinstance(raw_items, list):
        raise ValidationError("Invalid request format. Expected { header: {...}, items: [...] }")

    if "id_employee" in raw_header and raw_header["id_employee"] != id_employee:
        raise ValidationError("id_employee is taken from the authenticated employee")

    raw_print_date = raw_header.get("print_date")
    if raw_print_date in (None, ""):
        print_date = now
    elif isinstance(raw_print_date, str):
        try:
            print_date = parse_iso_datetime(raw_print_date)
        except ValueError:
            raise ValidationError("print_date must be an ISO-8601 datetime")
    else:
        raise ValidationError("print_date must be an ISO-8601 datetime")

    header = CheckoutHeader(
        check_number=_text(raw_header.get("check_number")),
        id_employee=id_employee,
        print_date=print_date,
        card_number=_text(raw_header.get("card_number")),
        sum_total=_optional_decimal("sum_total", raw_header.get("sum_total")),
        vat=_optional_decimal("vat", raw_header.get("vat")),
    )

    items = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationError(f"items[{index}] must be an object")
        if raw.get("quantity") is None:
            raise ValidationError(f"items[{index}].quantity is required")
        items.append(CheckoutItem(
            upc=_text(raw.get("upc")),
            quantity=coerce_int(f"items[{index}].quantity", raw.get("quantity")),
            selling_price=_optional_decimal(f"items[{index}].selling_price", raw.get("selling_price")),
        ))

    return CheckoutRequest(header=header, items=items)


def validate_checkout_shape(header: CheckoutHeader, items: list[CheckoutItem]) -> None:
    """
    Format rules that hold whatever the shelf prices are: header formats,
    non-empty items, UPC format, no UPC twice, positive quantities and
    non-negative client-supplied amounts. Touches no storage, so it runs
    before pricing looks anything up.
    """
    if not header.check_number:
        raise ValidationError("check_number is required")
    validate_check_number(header.check_number)
    validate_employee_id(header.id_employee)
    if header.card_number is not None:
        validate_card_number(header.card_number)
    if header.print_date is None:
        raise ValidationError("print_date is required")

    for key in ("sum_total", "vat"):
        amount = getattr(header, key)
        if amount is not None and amount < 0:
            raise ValidationError(f"{key} must be a non-negative number")

    if not items:
        raise ValidationError("items must be a non-empty list")

    seen: set[str] = set()
    for index, item in enumerate(items):
        if not item.upc:
            raise ValidationError(f"items[{index}].upc is required")
        validate_upc(item.upc, key=f"items[{index}].upc")
        if item.upc in seen:
            raise ValidationError(
                f"UPC {item.upc} appears more than once; combine it into one line",
                details={"upc": item.upc},
            )
        seen.add(item.upc)

        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity <= 0:
            raise ValidationError(f"items[{index}].quantity must be a positive integer")
        if item.selling_price is not None and item.selling_price < 0:
            raise ValidationError(f"items[{index}].selling_price must be a non-negative number")


def validate_checkout(header: CheckoutHeader, items: list[CheckoutItem]) -> None:
    """
    Structural rules for a checkout. Touches no storage.

    Raises ValidationError on the first violation found.
    """
    validate_checkout_shape(header, items)

    for key in ("sum_total", "vat"):
        if getattr(header, key) is None:
            raise ValidationError(f"{key} is required")
    for index, item in enumerate(items):
        if item.selling_price is None:
            raise ValidationError(f"items[{index}].selling_price is required")
