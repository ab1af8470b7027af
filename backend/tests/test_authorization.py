"""
Authorization tests.

Verifies:
- Unauthenticated requests return 401
- Cashiers are denied manager-only operations (403)
- Managers can perform staff, catalog and reporting operations
"""

import pytest

from zlagoda.permissions import Action, Resource, Role, can, parse_role, permissions_for


# =============================================================================
# UNAUTHENTICATED ACCESS - 401
# =============================================================================


class TestUnauthenticatedAccess:
    """All protected endpoints return 401 without a token."""

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/employees"),
            ("POST", "/api/employees"),
            ("GET", "/api/categories"),
            ("GET", "/api/products"),
            ("GET", "/api/store-products"),
            ("POST", "/api/store-products/000000000001/restock"),
            ("GET", "/api/customer-cards"),
            ("GET", "/api/checks"),
            ("POST", "/api/checks"),
            ("GET", "/api/reports/cashiers-sales"),
            ("GET", "/api/auth/me"),
        ],
    )
    def test_requires_auth(self, client, seed, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"


# =============================================================================
# CASHIER DENIED MANAGER OPERATIONS - 403
# =============================================================================


class TestCashierDenied:

    @pytest.mark.parametrize(
        "method,path,permission",
        [
            ("GET", "/api/employees", "employee:read"),
            ("POST", "/api/categories", "category:create"),
            ("POST", "/api/products", "product:create"),
            ("POST", "/api/store-products", "store_product:create"),
            ("POST", "/api/store-products/000000000001/restock", "store_product:update"),
            ("POST", "/api/store-products/000000000001/promotion", "store_product:update"),
            ("DELETE", "/api/customer-cards/100000000001", "customer_card:delete"),
            ("DELETE", "/api/checks/CHECK001", "check:delete"),
            ("GET", "/api/reports/cashiers-sales", "report:read"),
        ],
    )
    def test_denied(self, client, seed, cashier_headers, method, path, permission):
        resp = getattr(client, method.lower())(path, json={}, headers=cashier_headers)
        assert resp.status_code == 403, f"{method} {path} returned {resp.status_code}"
        assert resp.get_json()["required_permission"] == permission


class TestCashierAllowed:

    def test_reads_catalog_and_stock(self, client, seed, cashier_headers):
        assert client.get("/api/products", headers=cashier_headers).status_code == 200
        assert client.get("/api/store-products", headers=cashier_headers).status_code == 200
        assert client.get("/api/categories", headers=cashier_headers).status_code == 200

    def test_registers_customer_card(self, client, seed, cashier_headers):
        resp = client.post(
            "/api/customer-cards",
            json={
                "card_number": "100000000002",
                "cust_surname": "Lysenko",
                "cust_name": "Petro",
                "phone_number": "+380931234567",
                "percent": 5,
            },
            headers=cashier_headers,
        )
        assert resp.status_code == 201


class TestManagerAllowed:

    def test_lists_employees(self, client, seed, manager_headers):
        resp = client.get("/api/employees", headers=manager_headers)
        assert resp.status_code == 200
        assert resp.get_json()["count"] == 2

    def test_reads_reports(self, client, seed, manager_headers):
        assert client.get("/api/reports/cashiers-sales", headers=manager_headers).status_code == 200


# =============================================================================
# PERMISSION TABLE
# =============================================================================


class TestPermissionTable:

    def test_manager_cannot_create_checks(self):
        assert can(Role.MANAGER, Resource.CHECK, Action.READ)
        assert not can(Role.MANAGER, Resource.CHECK, Action.CREATE)

    def test_cashier_cannot_touch_staff(self):
        for action in Action:
            assert not can(Role.CASHIER, Resource.EMPLOYEE, action)

    def test_unknown_role_fails_closed(self):
        assert parse_role("admin") is None
        assert not can("admin", Resource.PRODUCT, Action.READ)
        assert permissions_for("admin") == []

    def test_role_strings_accepted(self):
        assert can("cashier", Resource.CHECK, Action.CREATE)

    def test_permission_codes_sorted(self):
        codes = permissions_for(Role.CASHIER)
        assert codes == sorted(codes)
        assert "customer_card:update" in codes
        assert "customer_card:delete" not in codes
