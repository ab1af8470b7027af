# Overview: Flask API routes for checks (receipts); checkout, listing, details, administrative delete.

"""
POST /api/checks is the checkout endpoint:

    {"header": {"check_number": "CHECK001", "card_number": "...", "print_date": "...",
                "sum_total": "...", "vat": "..."},
     "items": [{"upc": "000000000001", "quantity": 3, "selling_price": "10.00"}, ...]}

id_employee is the authenticated cashier. print_date, prices, sum_total
and vat are optional and filled in when absent.

Status codes: 201 committed, 400 validation or insufficient stock,
404 unknown product/card/employee, 409 duplicate check number or lock
timeout (body carries "retryable": true), 500 storage failure.
"""

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Resource
from ..services import check_service
from ..validation import validate_check_number

checks_bp = Blueprint("checks", __name__, url_prefix="/api/checks")


@checks_bp.post("")
@require_auth
@require_permission(Resource.CHECK, Action.CREATE)
def create_check():
    payload = request.get_json(silent=True)
    check = check_service.create_check(payload, employee=g.current_employee)
    return check.to_dict(include_sales=True), 201


@checks_bp.get("")
@require_auth
@require_permission(Resource.CHECK, Action.READ)
def list_checks():
    """
    Query params:
    - start, end: ISO date/datetime bounds on print_date (optional)
    - today: true to list only today's checks
    - employee_id: managers only; cashiers always get their own
    - page, per_page: optional pagination
    """
    return check_service.list_checks(
        actor=g.current_employee,
        start=request.args.get("start"),
        end=request.args.get("end"),
        today=request.args.get("today", "false").lower() == "true",
        employee_id=request.args.get("employee_id"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@checks_bp.get("/<check_number>")
@require_auth
@require_permission(Resource.CHECK, Action.READ)
def get_check(check_number: str):
    validate_check_number(check_number)
    check = check_service.get_check(check_number, actor=g.current_employee)
    return check.to_dict(include_sales=True)


@checks_bp.delete("/<check_number>")
@require_auth
@require_permission(Resource.CHECK, Action.DELETE)
def delete_check(check_number: str):
    validate_check_number(check_number)
    check_service.delete_check(check_number)
    return {"ok": True}, 200
