from __future__ import annotations

from ..extensions import db
from ..money import to_string_money
from ..time_utils import to_utc_z


class Check(db.Model):
    """
    Receipt header ("check").

    Created exactly once, by the checkout transaction, together with its
    Sale rows. Immutable afterwards; the only other write is the manager's
    administrative delete, which removes the sale lines with it.
    """
    __tablename__ = "checks"
    __table_args__ = (
        db.CheckConstraint("sum_total >= 0", name="ck_checks_sum_total_non_negative"),
        db.CheckConstraint("vat >= 0", name="ck_checks_vat_non_negative"),
        db.Index("ix_checks_employee_print_date", "id_employee", "print_date"),
    )

    check_number = db.Column(db.String(10), primary_key=True)
    id_employee = db.Column(db.String(10), db.ForeignKey("employees.id_employee"), nullable=False)
    card_number = db.Column(db.String(13), db.ForeignKey("customer_cards.card_number"), nullable=True, index=True)
    print_date = db.Column(db.DateTime, nullable=False, index=True)
    sum_total = db.Column(db.Numeric(13, 4), nullable=False)
    vat = db.Column(db.Numeric(13, 4), nullable=False)

    employee = db.relationship("Employee", backref=db.backref("checks", lazy=True))
    card = db.relationship("CustomerCard", backref=db.backref("checks", lazy=True))
    sales = db.relationship(
        "Sale",
        back_populates="check",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Sale.upc",
    )

    def __repr__(self) -> str:
        return f"<Check {self.check_number} employee={self.id_employee} total={self.sum_total}>"

    def to_dict(self, include_sales: bool = False) -> dict:
        data = {
            "check_number": self.check_number,
            "id_employee": self.id_employee,
            "card_number": self.card_number,
            "print_date": to_utc_z(self.print_date),
            "sum_total": to_string_money(self.sum_total),
            "vat": to_string_money(self.vat),
        }
        if include_sales:
            data["sales"] = [s.to_dict() for s in self.sales]
        return data


class Sale(db.Model):
    """One line of a receipt. selling_price is the price charged, not a live link."""
    __tablename__ = "sales"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sales_quantity_positive"),
        db.CheckConstraint("selling_price >= 0", name="ck_sales_price_non_negative"),
    )

    upc = db.Column(db.String(12), db.ForeignKey("store_products.upc"), primary_key=True)
    check_number = db.Column(
        db.String(10), db.ForeignKey("checks.check_number", ondelete="CASCADE"), primary_key=True
    )
    quantity = db.Column(db.Integer, nullable=False)
    selling_price = db.Column(db.Numeric(13, 4), nullable=False)

    check = db.relationship("Check", back_populates="sales")
    store_product = db.relationship("StoreProduct")

    def to_dict(self) -> dict:
        product = self.store_product.product if self.store_product else None
        return {
            "upc": self.upc,
            "check_number": self.check_number,
            "quantity": self.quantity,
            "selling_price": to_string_money(self.selling_price),
            "product_name": product.product_name if product else None,
        }
