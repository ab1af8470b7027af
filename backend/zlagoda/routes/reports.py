from flask import Blueprint, jsonify, request

from ..decorators import require_auth, require_permission
from ..permissions import Action, Resource
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/cashier-sales")
@require_auth
@require_permission(Resource.REPORT, Action.READ)
def cashier_sales_report():
    id_employee = request.args.get("employee_id")
    if not id_employee:
        return jsonify({"error": "employee_id is required"}), 400

    report = reporting_service.cashier_sales_total(
        id_employee=id_employee,
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report), 200


@reports_bp.get("/cashiers-sales")
@require_auth
@require_permission(Resource.REPORT, Action.READ)
def all_cashiers_sales_report():
    report = reporting_service.all_cashiers_sales(
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report), 200


@reports_bp.get("/product-sales")
@require_auth
@require_permission(Resource.REPORT, Action.READ)
def product_sales_report():
    upc = request.args.get("upc")
    if not upc:
        return jsonify({"error": "upc is required"}), 400

    report = reporting_service.product_quantity_sold(
        upc=upc,
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report), 200


@reports_bp.get("/category-sales")
@require_auth
@require_permission(Resource.REPORT, Action.READ)
def category_sales_report():
    id_employee = request.args.get("employee_id")
    if not id_employee:
        return jsonify({"error": "employee_id is required"}), 400

    report = reporting_service.employee_category_sales(
        id_employee=id_employee,
        start=request.args.get("start"),
        end=request.args.get("end"),
    )
    return jsonify(report), 200


@reports_bp.get("/customers-by-city")
@require_auth
@require_permission(Resource.REPORT, Action.READ)
def customers_by_city_report():
    report = reporting_service.customer_stats_by_city(city=request.args.get("city", ""))
    return jsonify(report), 200


@reports_bp.get("/employees-without-credentials")
@require_auth
@require_permission(Resource.REPORT, Action.READ)
def employees_without_credentials_report():
    return jsonify(reporting_service.employees_without_credentials()), 200
