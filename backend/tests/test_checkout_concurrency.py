"""
Concurrent checkout tests.

Two or more checkouts racing for the same stock must serialize: the
total sold never exceeds what was on the shelf and quantity never goes
negative. Each worker thread runs in its own app context, and therefore
its own database session.
"""

import threading
from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from zlagoda.errors import AppError, ConflictError, InsufficientStockError, LockTimeoutError, StorageError
from zlagoda.extensions import db
from zlagoda.models import Check, Sale, StoreProduct
from zlagoda.services.checkout_schemas import CheckoutHeader, CheckoutItem
from zlagoda.services.checkout_service import submit_checkout
from zlagoda.services.concurrency import UnitOfWork, translate_db_error


def _run_checkouts(app, requests):
    """Start one thread per (header, items) and wait for all of them."""
    results = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(len(requests))

    def worker(header, items):
        with app.app_context():
            try:
                barrier.wait()
                submit_checkout(header, items)
                outcome = ("ok", header.check_number)
            except AppError as e:
                outcome = (type(e).__name__, header.check_number)
            finally:
                db.session.remove()
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=worker, args=request) for request in requests]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    return results


def _request(check_number, upc, quantity, price):
    header = CheckoutHeader(
        check_number=check_number,
        id_employee="E002",
        print_date=datetime(2026, 3, 1, 12, 0),
        sum_total=Decimal(price) * quantity,
        vat=Decimal("0"),
    )
    return header, [CheckoutItem(upc=upc, quantity=quantity, selling_price=Decimal(price))]


class TestConcurrentCheckout:

    def test_last_unit_sold_once(self, app, db_session, seed):
        results = _run_checkouts(app, [
            _request("CHECK101", seed.juice, 1, "40.00"),
            _request("CHECK102", seed.juice, 1, "40.00"),
        ])

        outcomes = sorted(r[0] for r in results)
        assert outcomes == [InsufficientStockError.__name__, "ok"]

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.juice).quantity == 0
        assert db_session.query(Check).count() == 1
        assert db_session.query(Sale).count() == 1

    def test_many_cashiers_never_oversell(self, app, db_session, seed):
        # 5 units of milk, 8 checkouts of 1 unit each
        requests = [_request(f"CHECK2{i:02d}", seed.milk, 1, "10.00") for i in range(8)]
        results = _run_checkouts(app, requests)

        succeeded = [r for r in results if r[0] == "ok"]
        failed = [r for r in results if r[0] == InsufficientStockError.__name__]
        assert len(succeeded) == 5
        assert len(failed) == 3

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 0
        assert db_session.query(Check).count() == 5

    def test_overlapping_items_in_opposite_order(self, app, db_session, seed):
        # Opposite submission order; locks are still taken in UPC order
        results = _run_checkouts(app, [
            (
                CheckoutHeader("CHECK301", "E002", datetime(2026, 3, 1), sum_total=Decimal("35.50"), vat=Decimal("0")),
                [
                    CheckoutItem(seed.milk, 1, Decimal("10.00")),
                    CheckoutItem(seed.kefir, 1, Decimal("25.50")),
                ],
            ),
            (
                CheckoutHeader("CHECK302", "E002", datetime(2026, 3, 1), sum_total=Decimal("35.50"), vat=Decimal("0")),
                [
                    CheckoutItem(seed.kefir, 1, Decimal("25.50")),
                    CheckoutItem(seed.milk, 1, Decimal("10.00")),
                ],
            ),
        ])

        assert sorted(r[0] for r in results) == ["ok", "ok"]

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 3
        assert db_session.get(StoreProduct, seed.kefir).quantity == 8


class TestLockTimeout:

    def test_checkout_gives_up_when_store_is_locked(self, app, db_session, seed):
        holder = db.engine.connect()
        holder.exec_driver_sql("BEGIN IMMEDIATE")
        try:
            header, items = _request("CHECK401", seed.milk, 1, "10.00")
            with pytest.raises(LockTimeoutError) as exc_info:
                submit_checkout(header, items)
        finally:
            holder.rollback()
            holder.close()

        assert exc_info.value.status_code == 409
        assert exc_info.value.to_dict()["retryable"] is True

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 5
        assert db_session.get(Check, "CHECK401") is None

    def test_translate_db_error(self):
        locked = OperationalError("BEGIN IMMEDIATE", {}, Exception("database is locked"))
        assert isinstance(translate_db_error(locked), LockTimeoutError)

        duplicate = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        translated = translate_db_error(duplicate)
        assert isinstance(translated, ConflictError)
        assert not isinstance(translated, LockTimeoutError)

        other = OperationalError("SELECT", {}, Exception("disk I/O error"))
        assert isinstance(translate_db_error(other), StorageError)


class TestUnitOfWork:

    def test_runs_on_the_flask_scoped_session(self, app, db_session, seed):
        with UnitOfWork() as uow:
            assert isinstance(uow.session, Session)
            assert uow.session is db.session()
            uow.session.get(StoreProduct, seed.milk).quantity = 4

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 4

    def test_reads_before_entering_are_allowed(self, app, db_session, seed):
        assert db_session.get(StoreProduct, seed.kefir).quantity == 10

        with UnitOfWork(db.session) as uow:
            uow.session.get(StoreProduct, seed.kefir).quantity = 9

        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.kefir).quantity == 9

    def test_refuses_to_commit_pending_changes(self, app, db_session, seed):
        db_session.get(StoreProduct, seed.milk).quantity = 99

        with pytest.raises(RuntimeError):
            with UnitOfWork(db.session):
                pass

        db_session.rollback()
        db_session.expire_all()
        assert db_session.get(StoreProduct, seed.milk).quantity == 5
