# Overview: Service-layer operations for reporting; read-only aggregates over checks and sales.

from __future__ import annotations

from sqlalchemy import func, or_

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Category, Check, CustomerCard, Employee, Product, Sale, StoreProduct
from ..money import to_string_money
from ..time_utils import parse_range, to_utc_z


def _period(start: str | None, end: str | None):
    try:
        return parse_range(start, end)
    except ValueError as exc:
        raise ValidationError(f"Invalid period: {exc}")


def _in_period(query, start_dt, end_dt):
    if start_dt:
        query = query.filter(Check.print_date >= start_dt)
    if end_dt:
        query = query.filter(Check.print_date < end_dt)
    return query


def _full_name(employee: Employee) -> str:
    return " ".join(p for p in (employee.surname, employee.name, employee.patronymic) if p)


def _period_dict(start_dt, end_dt) -> dict:
    return {"start": to_utc_z(start_dt), "end_exclusive": to_utc_z(end_dt)}


def cashier_sales_total(*, id_employee: str, start: str | None, end: str | None) -> dict:
    """Checks issued and their summed totals for one employee in a period."""
    start_dt, end_dt = _period(start, end)
    employee = db.session.get(Employee, id_employee)
    if employee is None:
        raise NotFoundError(f"Employee with ID {id_employee} not found", details={"id_employee": id_employee})

    query = db.session.query(
        func.count(Check.check_number).label("checks_count"),
        func.coalesce(func.sum(Check.sum_total), 0).label("total_sales"),
    ).filter(Check.id_employee == id_employee)
    row = _in_period(query, start_dt, end_dt).one()

    return {
        "id_employee": id_employee,
        "cashier_name": _full_name(employee),
        **_period_dict(start_dt, end_dt),
        "checks_count": int(row.checks_count or 0),
        "total_sales": to_string_money(row.total_sales),
    }


def all_cashiers_sales(*, start: str | None, end: str | None) -> dict:
    """Per-employee totals for everyone who issued a check in the period, highest first."""
    start_dt, end_dt = _period(start, end)

    query = db.session.query(
        Employee.id_employee,
        Employee.surname,
        Employee.name,
        func.count(Check.check_number).label("checks_count"),
        func.sum(Check.sum_total).label("total_sales"),
    ).join(Check, Check.id_employee == Employee.id_employee)
    rows = (
        _in_period(query, start_dt, end_dt)
        .group_by(Employee.id_employee, Employee.surname, Employee.name)
        .order_by(func.sum(Check.sum_total).desc(), Employee.id_employee.asc())
        .all()
    )

    total = sum((r.total_sales or 0 for r in rows), 0)
    return {
        **_period_dict(start_dt, end_dt),
        "rows": [
            {
                "id_employee": r.id_employee,
                "cashier_name": f"{r.surname} {r.name}",
                "checks_count": int(r.checks_count or 0),
                "total_sales": to_string_money(r.total_sales),
            }
            for r in rows
        ],
        "total_sales": to_string_money(total),
    }


def product_quantity_sold(*, upc: str, start: str | None, end: str | None) -> dict:
    """Units of one UPC sold in a period."""
    start_dt, end_dt = _period(start, end)
    record = db.session.get(StoreProduct, upc)
    if record is None:
        raise NotFoundError(f"Product with UPC {upc} not found", details={"upc": upc})

    query = (
        db.session.query(func.coalesce(func.sum(Sale.quantity), 0).label("quantity_sold"))
        .join(Check, Check.check_number == Sale.check_number)
        .filter(Sale.upc == upc)
    )
    row = _in_period(query, start_dt, end_dt).one()

    return {
        "upc": upc,
        "product_name": record.product.product_name if record.product else None,
        **_period_dict(start_dt, end_dt),
        "quantity_sold": int(row.quantity_sold or 0),
    }


def employee_category_sales(*, id_employee: str, start: str | None, end: str | None) -> dict:
    """Units, revenue and average price per category sold by one employee."""
    start_dt, end_dt = _period(start, end)
    if db.session.get(Employee, id_employee) is None:
        raise NotFoundError(f"Employee with ID {id_employee} not found", details={"id_employee": id_employee})

    revenue = func.sum(Sale.selling_price * Sale.quantity)
    query = (
        db.session.query(
            Category.category_number,
            Category.category_name,
            func.sum(Sale.quantity).label("items_sold"),
            revenue.label("total_sales"),
            func.avg(Sale.selling_price).label("average_price"),
        )
        .select_from(Sale)
        .join(Check, Check.check_number == Sale.check_number)
        .join(StoreProduct, StoreProduct.upc == Sale.upc)
        .join(Product, Product.id_product == StoreProduct.id_product)
        .join(Category, Category.category_number == Product.category_number)
        .filter(Check.id_employee == id_employee)
    )
    rows = (
        _in_period(query, start_dt, end_dt)
        .group_by(Category.category_number, Category.category_name)
        .having(revenue > 0)
        .order_by(revenue.desc())
        .all()
    )

    return {
        "id_employee": id_employee,
        **_period_dict(start_dt, end_dt),
        "rows": [
            {
                "category_number": r.category_number,
                "category_name": r.category_name,
                "items_sold": int(r.items_sold or 0),
                "total_sales": to_string_money(r.total_sales),
                "average_price": to_string_money(r.average_price),
            }
            for r in rows
        ],
    }


def customer_stats_by_city(*, city: str) -> dict:
    """Per-card checks, spend and units for loyalty customers living in a city."""
    if not city or not city.strip():
        raise ValidationError("city is required")

    # Totals per check first so sum_total is not multiplied by its sale lines
    units = (
        db.session.query(Sale.check_number, func.sum(Sale.quantity).label("units"))
        .group_by(Sale.check_number)
        .subquery()
    )
    rows = (
        db.session.query(
            CustomerCard.card_number,
            CustomerCard.cust_surname,
            CustomerCard.cust_name,
            func.count(Check.check_number).label("total_checks"),
            func.sum(Check.sum_total).label("total_amount"),
            func.coalesce(func.sum(units.c.units), 0).label("items_bought"),
        )
        .join(Check, Check.card_number == CustomerCard.card_number)
        .outerjoin(units, units.c.check_number == Check.check_number)
        .filter(func.lower(CustomerCard.city) == city.strip().lower())
        .group_by(CustomerCard.card_number, CustomerCard.cust_surname, CustomerCard.cust_name)
        .order_by(CustomerCard.cust_surname.asc(), CustomerCard.card_number.asc())
        .all()
    )

    return {
        "city": city.strip(),
        "rows": [
            {
                "card_number": r.card_number,
                "full_name": f"{r.cust_surname} {r.cust_name}",
                "total_checks": int(r.total_checks or 0),
                "total_amount": to_string_money(r.total_amount),
                "items_bought": int(r.items_bought or 0),
            }
            for r in rows
        ],
    }


def employees_without_credentials() -> dict:
    """Staff with no login yet, with how much they have sold."""
    rows = (
        db.session.query(
            Employee,
            func.count(Check.check_number).label("total_checks"),
            func.coalesce(func.sum(Check.sum_total), 0).label("total_sales"),
        )
        .outerjoin(Check, Check.id_employee == Employee.id_employee)
        .filter(or_(Employee.email.is_(None), Employee.password_hash.is_(None)))
        .group_by(Employee.id_employee)
        .order_by(Employee.surname.asc(), Employee.id_employee.asc())
        .all()
    )

    return {
        "rows": [
            {
                "id_employee": employee.id_employee,
                "full_name": _full_name(employee),
                "role": employee.role,
                "city": employee.city,
                "total_checks": int(total_checks or 0),
                "total_sales": to_string_money(total_sales),
            }
            for employee, total_checks, total_sales in rows
        ],
    }
