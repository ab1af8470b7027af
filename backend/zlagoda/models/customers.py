from __future__ import annotations

from ..extensions import db


class CustomerCard(db.Model):
    """
    Loyalty card. percent is the discount applied to receipts that carry
    this card.
    """
    __tablename__ = "customer_cards"
    __table_args__ = (
        db.CheckConstraint("percent >= 0 AND percent <= 100", name="ck_customer_cards_percent_range"),
        db.Index("ix_customer_cards_surname", "cust_surname"),
    )

    card_number = db.Column(db.String(13), primary_key=True)
    cust_surname = db.Column(db.String(50), nullable=False)
    cust_name = db.Column(db.String(50), nullable=False)
    cust_patronymic = db.Column(db.String(50), nullable=True)
    phone_number = db.Column(db.String(13), nullable=False)
    city = db.Column(db.String(50), nullable=True)
    street = db.Column(db.String(50), nullable=True)
    zip_code = db.Column(db.String(9), nullable=True)
    percent = db.Column(db.Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<CustomerCard {self.card_number} {self.cust_surname!r} {self.percent}%>"

    def to_dict(self) -> dict:
        return {
            "card_number": self.card_number,
            "cust_surname": self.cust_surname,
            "cust_name": self.cust_name,
            "cust_patronymic": self.cust_patronymic,
            "phone_number": self.phone_number,
            "city": self.city,
            "street": self.street,
            "zip_code": self.zip_code,
            "percent": self.percent,
        }
