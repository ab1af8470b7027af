from __future__ import annotations

from ..extensions import db


class Category(db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    category_number = db.Column(db.Integer, primary_key=True)
    category_name = db.Column(db.String(50), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Category {self.category_number} {self.category_name!r}>"

    def to_dict(self) -> dict:
        return {
            "category_number": self.category_number,
            "category_name": self.category_name,
        }


class Product(db.Model):
    """
    Catalog entry. What is physically on the shelf (price, quantity, UPC)
    lives in StoreProduct; one product may back several store products
    (regular and promotional).
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_name", "product_name"),
        {"sqlite_autoincrement": True},
    )

    id_product = db.Column(db.Integer, primary_key=True)
    category_number = db.Column(
        db.Integer, db.ForeignKey("categories.category_number"), nullable=False, index=True
    )
    product_name = db.Column(db.String(50), nullable=False)
    producer = db.Column(db.String(50), nullable=False)
    characteristics = db.Column(db.String(100), nullable=True)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product {self.id_product} {self.product_name!r}>"

    def to_dict(self) -> dict:
        return {
            "id_product": self.id_product,
            "category_number": self.category_number,
            "category_name": self.category.category_name if self.category else None,
            "product_name": self.product_name,
            "producer": self.producer,
            "characteristics": self.characteristics,
        }
