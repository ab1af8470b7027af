# Overview: Service-layer operations for employees; staff records and login credentials.

from __future__ import annotations

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Check, Employee
from ..permissions import parse_role
from .auth_service import hash_password
from .pagination import paginate
from .session_service import revoke_all_sessions

EMPLOYEE_MUTABLE_FIELDS = {
    "surname", "name", "patronymic", "role", "salary",
    "date_of_birth", "date_of_start", "phone_number",
    "city", "street", "zip_code", "email", "is_active",
}


def apply_employee_patch(employee: Employee, patch: dict) -> None:
    for k, v in patch.items():
        if k not in EMPLOYEE_MUTABLE_FIELDS:
            continue
        if k == "email" and v is not None:
            v = v.strip().lower()
        setattr(employee, k, v)


def get_employee(id_employee: str) -> Employee:
    employee = db.session.get(Employee, id_employee)
    if employee is None:
        raise NotFoundError(f"Employee with ID {id_employee} not found", details={"id_employee": id_employee})
    return employee


def list_employees(*, role: str | None = None, page: int | None = None, per_page: int | None = None) -> dict:
    """All employees sorted by surname, optionally only one role."""
    query = db.session.query(Employee)
    if role:
        if parse_role(role) is None:
            raise ValidationError("role must be one of: manager, cashier")
        query = query.filter(Employee.role == role)
    query = query.order_by(Employee.surname.asc(), Employee.name.asc(), Employee.id_employee.asc())
    return paginate(query, page=page, per_page=per_page, serialize=lambda e: e.to_dict())


def find_contacts(surname: str) -> list[dict]:
    """Phone and address of every employee with this surname (case-insensitive)."""
    if not surname or not surname.strip():
        raise ValidationError("surname is required")
    rows = (
        db.session.query(Employee)
        .filter(func.lower(Employee.surname) == surname.strip().lower())
        .order_by(Employee.name.asc(), Employee.id_employee.asc())
        .all()
    )
    return [e.contact_dict() for e in rows]


def _ensure_email_free(email: str | None, *, exclude_id: str | None = None) -> None:
    if not email:
        return
    query = db.session.query(Employee.id_employee).filter(func.lower(Employee.email) == email.strip().lower())
    if exclude_id is not None:
        query = query.filter(Employee.id_employee != exclude_id)
    if query.first() is not None:
        raise ConflictError("Email is already used by another employee")


def create_employee(*, patch: dict) -> Employee:
    """Create from a validated patch (see routes/employees.py)."""
    id_employee = patch["id_employee"]
    if db.session.get(Employee, id_employee) is not None:
        raise ConflictError(f"Employee with ID {id_employee} already exists")
    _ensure_email_free(patch.get("email"))

    employee = Employee(id_employee=id_employee, is_active=True)
    apply_employee_patch(employee, patch)
    if patch.get("password"):
        employee.password_hash = hash_password(patch["password"])

    db.session.add(employee)
    db.session.commit()
    return employee


def update_employee(*, id_employee: str, patch: dict) -> Employee:
    """
    Apply a partial update. Changing the password or deactivating the
    employee revokes their open sessions.
    """
    employee = get_employee(id_employee)
    if "id_employee" in patch and patch["id_employee"] != id_employee:
        raise ValidationError("id_employee cannot be changed")
    if "email" in patch:
        _ensure_email_free(patch["email"], exclude_id=id_employee)

    apply_employee_patch(employee, patch)
    if patch.get("password") and not employee.email:
        raise ValidationError("Set an email before setting a password")

    if patch.get("password"):
        employee.password_hash = hash_password(patch["password"])
        revoke_all_sessions(id_employee, reason="Password changed")
    if patch.get("is_active") is False:
        revoke_all_sessions(id_employee, reason="Employee deactivated")

    db.session.commit()
    return employee


def delete_employee(*, id_employee: str, actor_id: str | None = None) -> None:
    """Employees who have issued receipts are kept for the record."""
    employee = get_employee(id_employee)
    if actor_id is not None and actor_id == id_employee:
        raise ConflictError("You cannot delete your own account")

    has_checks = db.session.query(Check.check_number).filter(Check.id_employee == id_employee).first()
    if has_checks is not None:
        raise ConflictError(
            f"Employee {id_employee} has issued checks and cannot be deleted",
            details={"id_employee": id_employee},
        )

    db.session.delete(employee)
    db.session.commit()
