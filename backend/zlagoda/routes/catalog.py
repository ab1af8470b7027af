# Overview: Flask API routes for categories and products.

from flask import Blueprint, request

from ..decorators import require_auth, require_permission
from ..models import Category, Product
from ..permissions import Action, Resource
from ..services import catalog_service
from ..validation import ModelValidationPolicy, validate_payload

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"category_name"},
    required_on_create={"category_name"},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"category_number", "product_name", "producer", "characteristics"},
    required_on_create={"category_number", "product_name", "producer"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")
products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@categories_bp.get("")
@require_auth
@require_permission(Resource.CATEGORY, Action.READ)
def list_categories():
    return catalog_service.list_categories()


@categories_bp.post("")
@require_auth
@require_permission(Resource.CATEGORY, Action.CREATE)
def create_category():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=False)
    return catalog_service.create_category(patch=patch).to_dict(), 201


@categories_bp.put("/<int:category_number>")
@require_auth
@require_permission(Resource.CATEGORY, Action.UPDATE)
def update_category(category_number: int):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Category, payload=payload, policy=CATEGORY_POLICY, partial=True)
    return catalog_service.update_category(category_number=category_number, patch=patch).to_dict(), 200


@categories_bp.delete("/<int:category_number>")
@require_auth
@require_permission(Resource.CATEGORY, Action.DELETE)
def delete_category(category_number: int):
    catalog_service.delete_category(category_number=category_number)
    return {"ok": True}, 200


@products_bp.get("")
@require_auth
@require_permission(Resource.PRODUCT, Action.READ)
def list_products():
    """
    Query params:
    - category: category_number (optional)
    - search: name substring (optional)
    - page, per_page: optional pagination
    """
    return catalog_service.list_products(
        category_number=request.args.get("category", type=int),
        search=request.args.get("search"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@products_bp.get("/<int:id_product>")
@require_auth
@require_permission(Resource.PRODUCT, Action.READ)
def get_product(id_product: int):
    return catalog_service.get_product(id_product).to_dict()


@products_bp.post("")
@require_auth
@require_permission(Resource.PRODUCT, Action.CREATE)
def create_product():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
    return catalog_service.create_product(patch=patch).to_dict(), 201


@products_bp.put("/<int:id_product>")
@require_auth
@require_permission(Resource.PRODUCT, Action.UPDATE)
def update_product(id_product: int):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
    return catalog_service.update_product(id_product=id_product, patch=patch).to_dict(), 200


@products_bp.delete("/<int:id_product>")
@require_auth
@require_permission(Resource.PRODUCT, Action.DELETE)
def delete_product(id_product: int):
    catalog_service.delete_product(id_product=id_product)
    return {"ok": True}, 200
