from __future__ import annotations

from ..extensions import db
from ..money import to_string_money
from ..time_utils import to_utc_z


class Employee(db.Model):
    """
    Store employees (managers and cashiers).

    Login credentials live on the same row. email/password_hash are nullable
    so that staff records can exist before an account is issued.
    """
    __tablename__ = "employees"
    __table_args__ = (
        db.Index("ix_employees_surname", "surname"),
        db.Index("ix_employees_role", "role"),
    )

    # Human-assigned identifier, e.g. "E001"
    id_employee = db.Column(db.String(10), primary_key=True)

    surname = db.Column(db.String(50), nullable=False)
    name = db.Column(db.String(50), nullable=False)
    patronymic = db.Column(db.String(50), nullable=True)

    # "manager" | "cashier" (see permissions.Role)
    role = db.Column(db.String(10), nullable=False)

    salary = db.Column(db.Numeric(13, 4), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=False)
    date_of_start = db.Column(db.Date, nullable=False)

    phone_number = db.Column(db.String(13), nullable=False)
    city = db.Column(db.String(50), nullable=False)
    street = db.Column(db.String(50), nullable=False)
    zip_code = db.Column(db.String(9), nullable=False)

    email = db.Column(db.String(255), nullable=True, unique=True)
    password_hash = db.Column(db.String(255), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())
    last_login_at = db.Column(db.DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Employee {self.id_employee} {self.surname!r} role={self.role}>"

    @property
    def has_credentials(self) -> bool:
        return bool(self.email and self.password_hash)

    def to_dict(self) -> dict:
        return {
            "id_employee": self.id_employee,
            "surname": self.surname,
            "name": self.name,
            "patronymic": self.patronymic,
            "role": self.role,
            "salary": to_string_money(self.salary),
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "date_of_start": self.date_of_start.isoformat() if self.date_of_start else None,
            "phone_number": self.phone_number,
            "city": self.city,
            "street": self.street,
            "zip_code": self.zip_code,
            "email": self.email,
            "is_active": self.is_active,
            "last_login_at": to_utc_z(self.last_login_at),
        }

    def contact_dict(self) -> dict:
        return {
            "id_employee": self.id_employee,
            "surname": self.surname,
            "name": self.name,
            "phone_number": self.phone_number,
            "city": self.city,
            "street": self.street,
            "zip_code": self.zip_code,
        }


class SessionToken(db.Model):
    """
    Opaque bearer tokens. Only the SHA-256 hash of a token is stored.
    """
    __tablename__ = "session_tokens"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(
        db.String(10), db.ForeignKey("employees.id_employee", ondelete="CASCADE"), nullable=False, index=True
    )
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False)
    last_used_at = db.Column(db.DateTime, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime, nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(255), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    employee = db.relationship(
        "Employee", backref=db.backref("sessions", lazy=True, cascade="all, delete-orphan")
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
