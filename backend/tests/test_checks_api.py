"""
Checks (receipts) API tests.

Verifies:
- POST /api/checks maps checkout outcomes to 201 / 400 / 404 / 409
- Prices and totals are filled in from the shelf and the loyalty card
- Cashiers only see their own checks; managers see all
- Managers can delete a check; stock is not restored
"""

from datetime import datetime
from decimal import Decimal

from zlagoda.models import Check, StoreProduct


def _body(check_number="CHECK001", items=None, **header):
    return {
        "header": {"check_number": check_number, **header},
        "items": items if items is not None else [{"upc": "000000000001", "quantity": 3}],
    }


# =============================================================================
# CREATE
# =============================================================================


class TestCreateCheck:

    def test_created(self, client, seed, cashier_headers, db_session):
        resp = client.post("/api/checks", json=_body(), headers=cashier_headers)

        assert resp.status_code == 201
        data = resp.get_json()
        assert data["check_number"] == "CHECK001"
        assert data["id_employee"] == "E002"
        assert data["sum_total"] == "30.00"
        assert data["vat"] == "6.00"
        assert data["sales"] == [{
            "upc": seed.milk,
            "check_number": "CHECK001",
            "quantity": 3,
            "selling_price": "10.00",
            "product_name": "Milk",
        }]

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 2

    def test_card_discount_applied(self, client, seed, cashier_headers):
        resp = client.post(
            "/api/checks",
            json=_body(card_number=seed.card, items=[{"upc": seed.kefir, "quantity": 2}]),
            headers=cashier_headers,
        )

        assert resp.status_code == 201
        # 51.00 less 10% = 45.90; VAT 20% = 9.18
        assert resp.get_json()["sum_total"] == "45.90"
        assert resp.get_json()["vat"] == "9.18"

    def test_client_totals_and_prices_kept(self, client, seed, cashier_headers):
        resp = client.post(
            "/api/checks",
            json=_body(
                sum_total="25.00",
                vat="5.00",
                print_date="2026-03-01T09:15:00Z",
                items=[{"upc": seed.milk, "quantity": 2, "selling_price": "12.50"}],
            ),
            headers=cashier_headers,
        )

        assert resp.status_code == 201
        data = resp.get_json()
        assert data["sum_total"] == "25.00"
        assert data["print_date"] == "2026-03-01T09:15:00Z"
        assert data["sales"][0]["selling_price"] == "12.50"

    def test_insufficient_stock_is_400(self, client, seed, cashier_headers, db_session):
        resp = client.post(
            "/api/checks",
            json=_body(items=[{"upc": seed.juice, "quantity": 2}]),
            headers=cashier_headers,
        )

        assert resp.status_code == 400
        data = resp.get_json()
        assert "Not enough quantity" in data["error"]
        assert data["details"]["items"][0]["available"] == 1

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.juice).quantity == 1

    def test_unknown_upc_is_404(self, client, seed, cashier_headers):
        resp = client.post(
            "/api/checks",
            json=_body(items=[{"upc": "999999999999", "quantity": 1}]),
            headers=cashier_headers,
        )
        assert resp.status_code == 404

    def test_unknown_card_is_404(self, client, seed, cashier_headers):
        resp = client.post("/api/checks", json=_body(card_number="555555555555"), headers=cashier_headers)
        assert resp.status_code == 404

    def test_duplicate_check_number_is_409(self, client, seed, cashier_headers, db_session):
        assert client.post("/api/checks", json=_body(), headers=cashier_headers).status_code == 201

        resp = client.post(
            "/api/checks",
            json=_body(items=[{"upc": seed.milk, "quantity": 1}]),
            headers=cashier_headers,
        )
        assert resp.status_code == 409

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 2

    def test_malformed_body_is_400(self, client, seed, cashier_headers):
        assert client.post("/api/checks", json={"items": []}, headers=cashier_headers).status_code == 400
        assert client.post("/api/checks", json=_body(items=[]), headers=cashier_headers).status_code == 400
        assert client.post(
            "/api/checks",
            json=_body(items=[{"upc": seed.milk, "quantity": "many"}]),
            headers=cashier_headers,
        ).status_code == 400

    def test_malformed_check_number_wins_over_unknown_upc(self, client, seed, cashier_headers):
        resp = client.post(
            "/api/checks",
            json=_body(check_number="bad", items=[{"upc": "999999999999", "quantity": 1}]),
            headers=cashier_headers,
        )
        assert resp.status_code == 400
        assert "check_number" in resp.get_json()["error"]

    def test_bad_lines_rejected_before_shelf_lookup(self, client, seed, cashier_headers):
        for items in (
            [{"upc": "999999999999", "quantity": 0}],
            [{"upc": "999999999999", "quantity": 1}, {"upc": "999999999999", "quantity": 2}],
        ):
            resp = client.post("/api/checks", json=_body(items=items), headers=cashier_headers)
            assert resp.status_code == 400, items

    def test_body_employee_must_match_caller(self, client, seed, cashier_headers):
        resp = client.post("/api/checks", json=_body(id_employee="E001"), headers=cashier_headers)
        assert resp.status_code == 400

    def test_manager_cannot_sell(self, client, seed, manager_headers):
        resp = client.post("/api/checks", json=_body(), headers=manager_headers)
        assert resp.status_code == 403
        assert resp.get_json()["required_permission"] == "check:create"


# =============================================================================
# READ
# =============================================================================


class TestReadChecks:

    def _add_check(self, db_session, check_number, id_employee, print_date, total="10.00"):
        db_session.add(Check(
            check_number=check_number,
            id_employee=id_employee,
            print_date=print_date,
            sum_total=Decimal(total),
            vat=Decimal("0"),
        ))
        db_session.commit()

    def test_cashier_sees_only_own_checks(self, client, seed, other_cashier, cashier_headers, db_session):
        self._add_check(db_session, "CHECK001", "E002", datetime(2026, 3, 1, 10))
        self._add_check(db_session, "CHECK002", "E003", datetime(2026, 3, 1, 11))

        resp = client.get("/api/checks", headers=cashier_headers)

        assert resp.status_code == 200
        assert [c["check_number"] for c in resp.get_json()["items"]] == ["CHECK001"]

    def test_cashier_cannot_list_other_employee(self, client, seed, cashier_headers):
        resp = client.get("/api/checks?employee_id=E003", headers=cashier_headers)
        assert resp.status_code == 400

    def test_cashier_cannot_open_other_employee_check(self, client, seed, other_cashier, cashier_headers, db_session):
        self._add_check(db_session, "CHECK002", "E003", datetime(2026, 3, 1, 11))
        resp = client.get("/api/checks/CHECK002", headers=cashier_headers)
        assert resp.status_code == 404

    def test_manager_lists_all_newest_first(self, client, seed, other_cashier, manager_headers, db_session):
        self._add_check(db_session, "CHECK001", "E002", datetime(2026, 3, 1, 10))
        self._add_check(db_session, "CHECK002", "E003", datetime(2026, 3, 2, 11))

        resp = client.get("/api/checks", headers=manager_headers)

        assert [c["check_number"] for c in resp.get_json()["items"]] == ["CHECK002", "CHECK001"]

    def test_period_filter_includes_whole_end_day(self, client, seed, manager_headers, db_session):
        self._add_check(db_session, "CHECK001", "E002", datetime(2026, 3, 1, 23, 30))
        self._add_check(db_session, "CHECK002", "E002", datetime(2026, 3, 2, 0, 30))

        resp = client.get("/api/checks?start=2026-03-01&end=2026-03-01", headers=manager_headers)

        assert [c["check_number"] for c in resp.get_json()["items"]] == ["CHECK001"]

    def test_inverted_period_is_400(self, client, seed, manager_headers):
        resp = client.get("/api/checks?start=2026-03-05&end=2026-03-01", headers=manager_headers)
        assert resp.status_code == 400

    def test_pagination(self, client, seed, manager_headers, db_session):
        for i in range(3):
            self._add_check(db_session, f"CHECK00{i}", "E002", datetime(2026, 3, 1, 10 + i))

        resp = client.get("/api/checks?page=1&per_page=2", headers=manager_headers)

        data = resp.get_json()
        assert data["count"] == 2
        assert data["pagination"]["total"] == 3
        assert data["pagination"]["has_next"] is True

    def test_details_include_sales(self, client, seed, cashier_headers):
        client.post("/api/checks", json=_body(), headers=cashier_headers)

        resp = client.get("/api/checks/CHECK001", headers=cashier_headers)

        assert resp.status_code == 200
        assert resp.get_json()["sales"][0]["product_name"] == "Milk"

    def test_bad_check_number_is_400(self, client, seed, manager_headers):
        assert client.get("/api/checks/NOPE", headers=manager_headers).status_code == 400


# =============================================================================
# DELETE
# =============================================================================


class TestDeleteCheck:

    def test_manager_deletes_without_restoring_stock(self, client, seed, cashier_headers, manager_headers, db_session):
        client.post("/api/checks", json=_body(), headers=cashier_headers)

        resp = client.delete("/api/checks/CHECK001", headers=manager_headers)

        assert resp.status_code == 200
        db_session.expire_all()
        assert db_session.get(Check, "CHECK001") is None
        assert db_session.get(StoreProduct, seed.milk).quantity == 2

    def test_cashier_cannot_delete(self, client, seed, cashier_headers):
        client.post("/api/checks", json=_body(), headers=cashier_headers)
        assert client.delete("/api/checks/CHECK001", headers=cashier_headers).status_code == 403

    def test_missing_check_is_404(self, client, seed, manager_headers):
        assert client.delete("/api/checks/CHECK999", headers=manager_headers).status_code == 404
