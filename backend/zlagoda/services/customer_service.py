# Overview: Service-layer operations for customer (loyalty) cards.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Check, CustomerCard
from .pagination import paginate

CARD_MUTABLE_FIELDS = {
    "cust_surname", "cust_name", "cust_patronymic", "phone_number",
    "city", "street", "zip_code", "percent",
}


def apply_card_patch(card: CustomerCard, patch: dict) -> None:
    for k, v in patch.items():
        if k not in CARD_MUTABLE_FIELDS:
            continue
        setattr(card, k, v)


def get_card(card_number: str) -> CustomerCard:
    card = db.session.get(CustomerCard, card_number)
    if card is None:
        raise NotFoundError(
            f"Customer card with number {card_number} not found", details={"card_number": card_number}
        )
    return card


def list_cards(
    *,
    surname: str | None = None,
    percent: int | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """Sorted by surname; surname matches a prefix, percent an exact discount."""
    query = db.session.query(CustomerCard)
    if surname:
        query = query.filter(func.lower(CustomerCard.cust_surname).like(f"{surname.strip().lower()}%"))
    if percent is not None:
        if not 0 <= percent <= 100:
            raise ValidationError("percent must be between 0 and 100")
        query = query.filter(CustomerCard.percent == percent)
    query = query.order_by(
        CustomerCard.cust_surname.asc(), CustomerCard.cust_name.asc(), CustomerCard.card_number.asc()
    )
    return paginate(query, page=page, per_page=per_page, serialize=lambda c: c.to_dict())


def create_card(*, patch: dict) -> CustomerCard:
    card_number = patch["card_number"]
    if db.session.get(CustomerCard, card_number) is not None:
        raise ConflictError(f"Customer card with number {card_number} already exists")

    card = CustomerCard(card_number=card_number)
    apply_card_patch(card, patch)
    db.session.add(card)
    db.session.commit()
    return card


def update_card(*, card_number: str, patch: dict) -> CustomerCard:
    card = get_card(card_number)
    if "card_number" in patch and patch["card_number"] != card_number:
        raise ValidationError("card_number cannot be changed")
    apply_card_patch(card, patch)
    db.session.commit()
    return card


def delete_card(*, card_number: str) -> None:
    card = get_card(card_number)
    used = db.session.query(Check.check_number).filter(Check.card_number == card_number).first()
    if used is not None:
        raise ConflictError(
            f"Customer card {card_number} appears on checks and cannot be deleted",
            details={"card_number": card_number},
        )
    db.session.delete(card)
    db.session.commit()
