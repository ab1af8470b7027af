from __future__ import annotations

from ..extensions import db
from ..money import to_string_money


class StoreProduct(db.Model):
    """
    Inventory record: a sellable line identified by its UPC.

    INVARIANTS:
    - quantity never goes negative (CHECK constraint + guarded decrement)
    - mutated only by restock/promotion operations and checkout decrements
    - never deleted while sales reference it

    A regular record may point at a promotional companion record through
    upc_prom; the companion carries promotional_product=True.
    """
    __tablename__ = "store_products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_store_products_quantity_non_negative"),
        db.CheckConstraint("selling_price >= 0", name="ck_store_products_price_non_negative"),
        db.Index("ix_store_products_promotional", "promotional_product"),
    )

    upc = db.Column(db.String(12), primary_key=True)
    upc_prom = db.Column(db.String(12), db.ForeignKey("store_products.upc"), nullable=True)
    id_product = db.Column(db.Integer, db.ForeignKey("products.id_product"), nullable=False, index=True)

    selling_price = db.Column(db.Numeric(13, 4), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    promotional_product = db.Column(db.Boolean, nullable=False, default=False)

    product = db.relationship("Product", backref=db.backref("store_products", lazy=True))
    promotional_record = db.relationship("StoreProduct", remote_side=[upc], uselist=False)

    def __repr__(self) -> str:
        return f"<StoreProduct upc={self.upc} qty={self.quantity} promo={self.promotional_product}>"

    def to_dict(self) -> dict:
        return {
            "upc": self.upc,
            "upc_prom": self.upc_prom,
            "id_product": self.id_product,
            "product_name": self.product.product_name if self.product else None,
            "selling_price": to_string_money(self.selling_price),
            "quantity": self.quantity,
            "promotional_product": self.promotional_product,
        }
