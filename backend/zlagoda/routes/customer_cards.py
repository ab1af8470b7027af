# Overview: Flask API routes for customer (loyalty) cards.

from flask import Blueprint, request

from ..decorators import require_auth, require_permission
from ..models import CustomerCard
from ..permissions import Action, Resource
from ..services import customer_service
from ..validation import ModelValidationPolicy, enforce_rules_customer_card, validate_payload

CARD_POLICY = ModelValidationPolicy(
    writable_fields={
        "card_number", "cust_surname", "cust_name", "cust_patronymic",
        "phone_number", "city", "street", "zip_code", "percent",
    },
    required_on_create={"card_number", "cust_surname", "cust_name", "phone_number", "percent"},
)

customer_cards_bp = Blueprint("customer_cards", __name__, url_prefix="/api/customer-cards")


@customer_cards_bp.get("")
@require_auth
@require_permission(Resource.CUSTOMER_CARD, Action.READ)
def list_cards():
    """
    Query params:
    - surname: surname prefix (optional)
    - percent: exact discount percent (optional)
    - page, per_page: optional pagination
    """
    return customer_service.list_cards(
        surname=request.args.get("surname"),
        percent=request.args.get("percent", type=int),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@customer_cards_bp.get("/<card_number>")
@require_auth
@require_permission(Resource.CUSTOMER_CARD, Action.READ)
def get_card(card_number: str):
    return customer_service.get_card(card_number).to_dict()


@customer_cards_bp.post("")
@require_auth
@require_permission(Resource.CUSTOMER_CARD, Action.CREATE)
def create_card():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=CustomerCard, payload=payload, policy=CARD_POLICY, partial=False)
    enforce_rules_customer_card(patch)
    return customer_service.create_card(patch=patch).to_dict(), 201


@customer_cards_bp.put("/<card_number>")
@require_auth
@require_permission(Resource.CUSTOMER_CARD, Action.UPDATE)
def update_card(card_number: str):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=CustomerCard, payload=payload, policy=CARD_POLICY, partial=True)
    enforce_rules_customer_card(patch)
    return customer_service.update_card(card_number=card_number, patch=patch).to_dict(), 200


@customer_cards_bp.delete("/<card_number>")
@require_auth
@require_permission(Resource.CUSTOMER_CARD, Action.DELETE)
def delete_card(card_number: str):
    customer_service.delete_card(card_number=card_number)
    return {"ok": True}, 200
