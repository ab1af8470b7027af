# Overview: Flask API routes for store products (inventory records); CRUD, restock, promotion.

from flask import Blueprint, request

from ..decorators import require_auth, require_permission
from ..errors import ValidationError
from ..models import StoreProduct
from ..permissions import Action, Resource
from ..services import store_product_service
from ..validation import (
    ModelValidationPolicy,
    coerce_decimal,
    coerce_int,
    enforce_rules_store_product,
    validate_payload,
    validate_upc,
)

STORE_PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"upc", "upc_prom", "id_product", "selling_price", "quantity", "promotional_product"},
    required_on_create={"upc", "id_product", "selling_price", "quantity"},
)

# Quantity only moves through checkout, restock and promotion
STORE_PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"upc_prom", "id_product", "selling_price", "promotional_product"},
)

store_products_bp = Blueprint("store_products", __name__, url_prefix="/api/store-products")


def _bool_arg(name: str) -> bool | None:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return None
    value = raw.strip().lower()
    if value not in {"true", "false"}:
        raise ValidationError(f"{name} must be true or false")
    return value == "true"


@store_products_bp.get("")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.READ)
def list_store_products():
    """
    Query params:
    - sort: name (default) | quantity
    - promotional: true | false (optional)
    - page, per_page: optional pagination
    """
    return store_product_service.list_store_products(
        sort=request.args.get("sort", "name"),
        promotional=_bool_arg("promotional"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@store_products_bp.get("/<upc>")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.READ)
def get_store_product(upc: str):
    validate_upc(upc)
    return store_product_service.get_store_product(upc).to_dict()


@store_products_bp.post("")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.CREATE)
def create_store_product():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=StoreProduct, payload=payload, policy=STORE_PRODUCT_POLICY, partial=False)
    enforce_rules_store_product(patch)
    return store_product_service.create_store_product(patch=patch).to_dict(), 201


@store_products_bp.put("/<upc>")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.UPDATE)
def update_store_product(upc: str):
    validate_upc(upc)
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(
        model=StoreProduct, payload=payload, policy=STORE_PRODUCT_UPDATE_POLICY, partial=True
    )
    enforce_rules_store_product(patch)
    return store_product_service.update_store_product(upc=upc, patch=patch).to_dict(), 200


@store_products_bp.delete("/<upc>")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.DELETE)
def delete_store_product(upc: str):
    validate_upc(upc)
    store_product_service.delete_store_product(upc=upc)
    return {"ok": True}, 200


@store_products_bp.post("/<upc>/restock")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.UPDATE)
def restock_store_product(upc: str):
    """Body: {"quantity": int, "price": decimal (optional, new batch price)}"""
    validate_upc(upc)
    payload = request.get_json(silent=True) or {}
    if payload.get("quantity") is None:
        raise ValidationError("quantity is required")
    quantity = coerce_int("quantity", payload["quantity"])
    price = payload.get("price")
    price = coerce_decimal("price", price) if price is not None else None

    record = store_product_service.restock(upc=upc, quantity=quantity, price=price)
    return record.to_dict(), 200


@store_products_bp.post("/<upc>/promotion")
@require_auth
@require_permission(Resource.STORE_PRODUCT, Action.UPDATE)
def promote_store_product(upc: str):
    """Body: {"quantity": int, "promo_upc": "12 digits" (first promotion only)}"""
    validate_upc(upc)
    payload = request.get_json(silent=True) or {}
    if payload.get("quantity") is None:
        raise ValidationError("quantity is required")
    quantity = coerce_int("quantity", payload["quantity"])

    companion = store_product_service.create_promotion(
        upc=upc, quantity=quantity, promo_upc=payload.get("promo_upc")
    )
    return companion.to_dict(), 200
