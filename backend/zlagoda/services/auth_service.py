# Overview: Service-layer operations for auth; password hashing and credential checks.

"""
Employees log in with email + password. Passwords are hashed with bcrypt
(cost factor BCRYPT_ROUNDS, 12 by default); only the hash is stored on the employee row.
"""

import bcrypt
from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import Employee
from ..time_utils import utcnow
from ..validation import MIN_PASSWORD_LENGTH, ValidationError


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"password must be at least {MIN_PASSWORD_LENGTH} characters long")


def hash_password(password: str) -> str:
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=current_app.config.get("BCRYPT_ROUNDS", 12))
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Timing-safe bcrypt check. False for employees without a password and
    for anything that is not a bcrypt hash.
    """
    if not password_hash or not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def set_credentials(employee: Employee, email: str, password: str) -> None:
    """Issue or replace login credentials. Caller commits."""
    employee.email = email.strip().lower()
    employee.password_hash = hash_password(password)


def authenticate(email: str, password: str) -> Employee | None:
    """
    Employee for valid credentials, otherwise None.

    Updates last_login_at on success.
    """
    if not email or not password:
        return None

    employee = db.session.query(Employee).filter(
        func.lower(Employee.email) == email.strip().lower(),
        Employee.is_active.is_(True),
    ).first()

    if not employee:
        return None

    if not verify_password(password, employee.password_hash):
        return None

    employee.last_login_at = utcnow()
    db.session.commit()
    return employee
