# Overview: Flask API routes for employee management (manager only).

from flask import Blueprint, g, request

from ..decorators import require_auth, require_permission
from ..models import Employee
from ..permissions import Action, Resource
from ..services import employee_service
from ..validation import ModelValidationPolicy, enforce_rules_employee, validate_payload

EMPLOYEE_POLICY = ModelValidationPolicy(
    writable_fields={
        "id_employee", "surname", "name", "patronymic", "role", "salary",
        "date_of_birth", "date_of_start", "phone_number", "city", "street",
        "zip_code", "email", "is_active",
    },
    required_on_create={
        "id_employee", "surname", "name", "role", "salary", "date_of_birth",
        "date_of_start", "phone_number", "city", "street", "zip_code",
    },
    extra_fields={"password"},
)

employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.get("")
@require_auth
@require_permission(Resource.EMPLOYEE, Action.READ)
def list_employees():
    """
    Query params:
    - role: manager | cashier (optional)
    - page, per_page: optional pagination
    """
    return employee_service.list_employees(
        role=request.args.get("role"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )


@employees_bp.get("/contacts")
@require_auth
@require_permission(Resource.EMPLOYEE, Action.READ)
def employee_contacts():
    """Phone and address by surname (?surname=...)."""
    items = employee_service.find_contacts(request.args.get("surname", ""))
    return {"items": items, "count": len(items)}


@employees_bp.get("/<id_employee>")
@require_auth
@require_permission(Resource.EMPLOYEE, Action.READ)
def get_employee(id_employee: str):
    return employee_service.get_employee(id_employee).to_dict()


@employees_bp.post("")
@require_auth
@require_permission(Resource.EMPLOYEE, Action.CREATE)
def create_employee():
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=False)
    enforce_rules_employee(patch, partial=False)

    employee = employee_service.create_employee(patch=patch)
    return employee.to_dict(), 201


@employees_bp.put("/<id_employee>")
@require_auth
@require_permission(Resource.EMPLOYEE, Action.UPDATE)
def update_employee(id_employee: str):
    payload = request.get_json(silent=True) or {}
    patch = validate_payload(model=Employee, payload=payload, policy=EMPLOYEE_POLICY, partial=True)
    enforce_rules_employee(patch, partial=True)

    employee = employee_service.update_employee(id_employee=id_employee, patch=patch)
    return employee.to_dict(), 200


@employees_bp.delete("/<id_employee>")
@require_auth
@require_permission(Resource.EMPLOYEE, Action.DELETE)
def delete_employee(id_employee: str):
    employee_service.delete_employee(id_employee=id_employee, actor_id=g.current_employee.id_employee)
    return {"ok": True}, 200
