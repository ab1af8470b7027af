# Overview: Service-layer operations for checks (receipts); create via checkout, list, details, delete.

from __future__ import annotations

from sqlalchemy.orm import selectinload

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Check, Employee, Sale, StoreProduct
from ..permissions import Role, parse_role
from ..time_utils import day_bounds, parse_range, utcnow
from .checkout_schemas import parse_checkout_request, validate_checkout_shape
from .checkout_service import submit_checkout
from .pagination import paginate
from .pricing_service import price_checkout


def create_check(payload, *, employee: Employee) -> Check:
    """
    POST /api/checks body -> committed Check.

    The cashier is the authenticated employee; missing prices and totals
    are filled in from the shelf and the loyalty card before checkout.
    Malformed requests are rejected before pricing reads storage.
    """
    request = parse_checkout_request(payload, id_employee=employee.id_employee, now=utcnow())
    validate_checkout_shape(request.header, request.items)
    header, items = price_checkout(request.header, request.items)
    return submit_checkout(header, items)


def _is_cashier(actor: Employee) -> bool:
    return parse_role(actor.role) is Role.CASHIER


def period_bounds(start: str | None, end: str | None):
    try:
        return parse_range(start, end)
    except ValueError as exc:
        raise ValidationError(f"Invalid period: {exc}")


def list_checks(
    *,
    actor: Employee,
    start: str | None = None,
    end: str | None = None,
    today: bool = False,
    employee_id: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Newest first. Cashiers only ever see their own checks; managers see all
    and may narrow to one employee. today=True overrides start/end with
    the current UTC day. A date-only end includes that whole day.
    """
    query = db.session.query(Check)

    if _is_cashier(actor):
        if employee_id and employee_id != actor.id_employee:
            raise ValidationError("Cashiers can only list their own checks")
        query = query.filter(Check.id_employee == actor.id_employee)
    elif employee_id:
        query = query.filter(Check.id_employee == employee_id)

    if today:
        start_dt, end_dt = day_bounds(utcnow().date())
        query = query.filter(Check.print_date >= start_dt, Check.print_date < end_dt)
    else:
        start_dt, end_dt = period_bounds(start, end)
        if start_dt:
            query = query.filter(Check.print_date >= start_dt)
        if end_dt:
            query = query.filter(Check.print_date < end_dt)

    query = query.order_by(Check.print_date.desc(), Check.check_number.desc())
    return paginate(query, page=page, per_page=per_page, serialize=lambda c: c.to_dict())


def get_check(check_number: str, *, actor: Employee) -> Check:
    check = (
        db.session.query(Check)
        .options(selectinload(Check.sales).selectinload(Sale.store_product).selectinload(StoreProduct.product))
        .filter(Check.check_number == check_number)
        .first()
    )
    # Other cashiers' checks are reported as missing
    if check is None or (_is_cashier(actor) and check.id_employee != actor.id_employee):
        raise NotFoundError(f"Check {check_number} not found", details={"check_number": check_number})
    return check


def delete_check(check_number: str) -> None:
    """
    Administrative delete of a receipt and its sale lines.
    Inventory is not restored.
    """
    check = db.session.get(Check, check_number)
    if check is None:
        raise NotFoundError(f"Check {check_number} not found", details={"check_number": check_number})
    db.session.delete(check)
    db.session.commit()
