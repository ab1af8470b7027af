# Overview: Service-layer operations for categories and products.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError
from ..extensions import db
from ..models import Category, Product, StoreProduct
from .pagination import paginate

PRODUCT_MUTABLE_FIELDS = {"category_number", "product_name", "producer", "characteristics"}


# -- Categories --

def get_category(category_number: int) -> Category:
    category = db.session.get(Category, category_number)
    if category is None:
        raise NotFoundError(
            f"Category {category_number} not found", details={"category_number": category_number}
        )
    return category


def list_categories() -> dict:
    rows = db.session.query(Category).order_by(Category.category_name.asc()).all()
    return {"items": [c.to_dict() for c in rows], "count": len(rows)}


def _ensure_category_name_free(name: str, *, exclude: int | None = None) -> None:
    query = db.session.query(Category.category_number).filter(
        func.lower(Category.category_name) == name.lower()
    )
    if exclude is not None:
        query = query.filter(Category.category_number != exclude)
    if query.first() is not None:
        raise ConflictError(f"Category {name!r} already exists")


def create_category(*, patch: dict) -> Category:
    _ensure_category_name_free(patch["category_name"])
    category = Category(category_name=patch["category_name"])
    db.session.add(category)
    db.session.commit()
    return category


def update_category(*, category_number: int, patch: dict) -> Category:
    category = get_category(category_number)
    if "category_name" in patch:
        _ensure_category_name_free(patch["category_name"], exclude=category_number)
        category.category_name = patch["category_name"]
    db.session.commit()
    return category


def delete_category(*, category_number: int) -> None:
    category = get_category(category_number)
    in_use = db.session.query(Product.id_product).filter(Product.category_number == category_number).first()
    if in_use is not None:
        raise ConflictError(
            f"Category {category.category_name!r} still has products",
            details={"category_number": category_number},
        )
    db.session.delete(category)
    db.session.commit()


# -- Products --

def apply_product_patch(product: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(product, k, v)


def get_product(id_product: int) -> Product:
    product = db.session.get(Product, id_product)
    if product is None:
        raise NotFoundError(f"Product {id_product} not found", details={"id_product": id_product})
    return product


def list_products(
    *,
    category_number: int | None = None,
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Products sorted by name. search matches a substring of the name
    (case-insensitive); category_number narrows to one category.
    """
    query = db.session.query(Product)
    if category_number is not None:
        query = query.filter(Product.category_number == category_number)
    if search:
        query = query.filter(Product.product_name.ilike(f"%{search.strip()}%"))
    query = query.order_by(Product.product_name.asc(), Product.id_product.asc())
    return paginate(query, page=page, per_page=per_page, serialize=lambda p: p.to_dict())


def create_product(*, patch: dict) -> Product:
    get_category(patch["category_number"])

    product = Product()
    apply_product_patch(product, patch)
    db.session.add(product)
    db.session.commit()
    return product


def update_product(*, id_product: int, patch: dict) -> Product:
    product = get_product(id_product)
    if "category_number" in patch:
        get_category(patch["category_number"])
    apply_product_patch(product, patch)
    db.session.commit()
    return product


def delete_product(*, id_product: int) -> None:
    product = get_product(id_product)
    stocked = db.session.query(StoreProduct.upc).filter(StoreProduct.id_product == id_product).first()
    if stocked is not None:
        raise ConflictError(
            f"Product {product.product_name!r} is still stocked",
            details={"id_product": id_product},
        )
    db.session.delete(product)
    db.session.commit()
