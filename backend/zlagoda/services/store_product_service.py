# Overview: Service-layer operations for store products (inventory records); CRUD, restock, promotion.

"""
Inventory records are mutated in three places only: checkout (decrement),
restock and promotion (below). The last two take the same row locks as
checkout through InventoryStore, so they serialize with sales of the same
UPC instead of overwriting them.

Create/update here are for correcting records (price, product link);
quantity changes belong to restock.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from ..errors import ConflictError, InsufficientStockError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Product, Sale, StoreProduct
from ..money import round_money
from ..validation import validate_upc
from .concurrency import UnitOfWork
from .inventory_store import InventoryStore
from .pagination import paginate
from .pricing_service import promotional_price

STORE_PRODUCT_MUTABLE_FIELDS = {"id_product", "selling_price", "quantity", "promotional_product", "upc_prom"}

SORT_KEYS = {"name", "quantity"}


def apply_store_product_patch(record: StoreProduct, patch: dict) -> None:
    for k, v in patch.items():
        if k not in STORE_PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(record, k, v)


def get_store_product(upc: str) -> StoreProduct:
    record = db.session.get(StoreProduct, upc)
    if record is None:
        raise NotFoundError(f"Product with UPC {upc} not found", details={"upc": upc})
    return record


def list_store_products(
    *,
    sort: str = "name",
    promotional: bool | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """Sorted by product name (default) or quantity; promotional filters either way."""
    if sort not in SORT_KEYS:
        raise ValidationError("sort must be one of: name, quantity")

    query = (
        db.session.query(StoreProduct)
        .join(Product, StoreProduct.id_product == Product.id_product)
        .options(joinedload(StoreProduct.product))
    )
    if promotional is not None:
        query = query.filter(StoreProduct.promotional_product.is_(promotional))

    if sort == "quantity":
        query = query.order_by(StoreProduct.quantity.asc(), StoreProduct.upc.asc())
    else:
        query = query.order_by(Product.product_name.asc(), StoreProduct.upc.asc())

    return paginate(query, page=page, per_page=per_page, serialize=lambda r: r.to_dict())


def _require_product(id_product: int) -> None:
    if db.session.get(Product, id_product) is None:
        raise NotFoundError(f"Product {id_product} not found", details={"id_product": id_product})


def _require_companion(upc: str, upc_prom: str | None) -> None:
    if upc_prom is None:
        return
    if upc_prom == upc:
        raise ValidationError("upc_prom cannot point at the record itself")
    if db.session.get(StoreProduct, upc_prom) is None:
        raise NotFoundError(f"Product with UPC {upc_prom} not found", details={"upc": upc_prom})


def create_store_product(*, patch: dict) -> StoreProduct:
    upc = patch["upc"]
    if db.session.get(StoreProduct, upc) is not None:
        raise ConflictError(f"Product with UPC {upc} already exists", details={"upc": upc})
    _require_product(patch["id_product"])
    _require_companion(upc, patch.get("upc_prom"))

    record = StoreProduct(upc=upc, quantity=0, promotional_product=False)
    apply_store_product_patch(record, patch)
    db.session.add(record)
    db.session.commit()
    return record


def update_store_product(*, upc: str, patch: dict) -> StoreProduct:
    record = get_store_product(upc)
    if "upc" in patch and patch["upc"] != upc:
        raise ValidationError("upc cannot be changed")
    if "id_product" in patch:
        _require_product(patch["id_product"])
    if "upc_prom" in patch:
        _require_companion(upc, patch["upc_prom"])

    apply_store_product_patch(record, patch)
    db.session.commit()
    return record


def delete_store_product(*, upc: str) -> None:
    """Records that appear on receipts are kept; links from regular records are cleared."""
    record = get_store_product(upc)
    sold = db.session.query(Sale.check_number).filter(Sale.upc == upc).first()
    if sold is not None:
        raise ConflictError(
            f"Product with UPC {upc} has sales and cannot be deleted",
            details={"upc": upc},
        )

    db.session.query(StoreProduct).filter(StoreProduct.upc_prom == upc).update(
        {StoreProduct.upc_prom: None}, synchronize_session=False
    )
    db.session.delete(record)
    db.session.commit()


def _require_positive_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("quantity must be a positive integer")


def _lock_with_companion(store: InventoryStore, upc: str) -> tuple[StoreProduct, StoreProduct | None]:
    """
    Lock a record and its promotional companion in ascending UPC order.

    The link is read before locking to know the order. It only changes
    under the regular record's lock, so it is re-read once that lock is held.
    """
    peek = store.uow.session.execute(
        select(StoreProduct.upc_prom).where(StoreProduct.upc == upc)
    ).first()
    if peek is None:
        raise NotFoundError(f"Product with UPC {upc} not found", details={"upc": upc})

    for code in sorted({upc, peek.upc_prom} - {None}):
        store.lock_for_update(code)

    record = store.lock_for_update(upc)
    companion = store.lock_for_update(record.upc_prom) if record.upc_prom else None
    return record, companion


def _uow() -> UnitOfWork:
    return UnitOfWork(db.session, lock_timeout_ms=current_app.config.get("CHECKOUT_LOCK_TIMEOUT_MS"))


def restock(*, upc: str, quantity: int, price=None) -> StoreProduct:
    """
    Receive a new batch: add quantity and, when price is given, move the
    whole stock to the new batch price. A linked promotional record follows
    at the promotional rate.
    """
    _require_positive_quantity(quantity)
    if price is not None and price < 0:
        raise ValidationError("price must be a non-negative number")

    with _uow() as uow:
        store = InventoryStore(uow)
        record, companion = _lock_with_companion(store, upc)

        store.increment(upc, quantity)
        if price is not None:
            record.selling_price = round_money(price)
            if companion is not None:
                companion.selling_price = promotional_price(price)

    current_app.logger.info("restocked upc=%s quantity=%s price=%s", upc, quantity, price)
    return record


def create_promotion(*, upc: str, quantity: int, promo_upc: str | None = None) -> StoreProduct:
    """
    Move quantity units of a regular record onto its promotional companion,
    priced at PROMO_PRICE_RATE of the regular price. The companion is
    created under promo_upc on first use and reused afterwards.

    Returns the promotional record.
    """
    _require_positive_quantity(quantity)
    if promo_upc is not None:
        validate_upc(promo_upc, key="promo_upc")
        if promo_upc == upc:
            raise ValidationError("promo_upc must differ from upc")

    with _uow() as uow:
        store = InventoryStore(uow)
        record, companion = _lock_with_companion(store, upc)

        if record.promotional_product:
            raise ValidationError("Product is already promotional", details={"upc": upc})
        if companion is not None and promo_upc is not None and promo_upc != companion.upc:
            raise ConflictError(
                f"Product with UPC {upc} already has promotional UPC {companion.upc}",
                details={"upc": upc, "upc_prom": companion.upc},
            )
        if companion is None and promo_upc is None:
            raise ValidationError("promo_upc is required for the first promotion of a product")

        if record.quantity < quantity:
            raise InsufficientStockError(
                f"Not enough quantity for product with UPC {upc}",
                details={"items": [{"upc": upc, "requested": quantity, "available": record.quantity}]},
            )

        if companion is not None:
            companion.selling_price = promotional_price(record.selling_price)
            store.increment(companion.upc, quantity)
        else:
            if uow.session.get(StoreProduct, promo_upc) is not None:
                raise ConflictError(f"Product with UPC {promo_upc} already exists", details={"upc": promo_upc})
            companion = StoreProduct(
                upc=promo_upc,
                id_product=record.id_product,
                selling_price=promotional_price(record.selling_price),
                quantity=quantity,
                promotional_product=True,
            )
            uow.session.add(companion)
            uow.flush()
            record.upc_prom = companion.upc

        store.decrement(upc, quantity)

    current_app.logger.info("promotion upc=%s promo_upc=%s quantity=%s", upc, companion.upc, quantity)
    return companion
