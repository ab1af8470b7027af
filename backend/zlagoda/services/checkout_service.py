# Overview: Checkout transaction coordinator; turns a receipt draft into a committed receipt or nothing.

"""
Checkout runs as one unit of work:

    RECEIVED -> VALIDATING -(fail)-> REJECTED
             -> LOCKING -(NOT_FOUND | INSUFFICIENT_STOCK)-> ROLLED_BACK
             -> WRITING -(constraint / storage failure)-> ROLLED_BACK
             -> COMMITTED

Every inventory record in the request is locked (ascending UPC order, so
two checkouts sharing products always queue in the same order) and
verified before anything is written. On any failure the unit of work rolls
back, so inventory and receipts are left exactly as they were.

Nothing is retried here. A LockTimeoutError tells the caller it may resubmit.
"""

from __future__ import annotations

from enum import Enum

from flask import current_app

from ..errors import (
    AppError,
    InsufficientStockError,
    NotFoundError,
)
from ..extensions import db
from ..models import Check, CustomerCard, Employee
from .checkout_schemas import CheckoutHeader, CheckoutItem, validate_checkout
from .concurrency import UnitOfWork
from .inventory_store import InventoryStore
from .receipt_ledger import ReceiptLedger


class CheckoutState(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    REJECTED = "rejected"
    LOCKING = "locking"
    NOT_FOUND = "not_found"
    INSUFFICIENT_STOCK = "insufficient_stock"
    WRITING = "writing"
    ROLLED_BACK = "rolled_back"
    COMMITTED = "committed"


TERMINAL_STATES = frozenset({CheckoutState.REJECTED, CheckoutState.ROLLED_BACK, CheckoutState.COMMITTED})


class CheckoutAttempt:
    """State of one submit_checkout call, kept for logging."""

    def __init__(self, check_number: str | None):
        self.check_number = check_number
        self.state = CheckoutState.RECEIVED
        self.history = [CheckoutState.RECEIVED]

    def advance(self, state: CheckoutState) -> None:
        self.state = state
        self.history.append(state)
        logger = current_app.logger
        if state is CheckoutState.COMMITTED:
            logger.info("checkout committed check_number=%s", self.check_number)
        elif state in TERMINAL_STATES:
            logger.warning(
                "checkout %s check_number=%s path=%s",
                state.value.replace("_", " "),
                self.check_number,
                ">".join(s.value for s in self.history),
            )
        else:
            logger.debug("checkout check_number=%s state=%s", self.check_number, state.value)

    def fail(self, exc: Exception) -> None:
        if self.state is CheckoutState.VALIDATING:
            self.advance(CheckoutState.REJECTED)
            return
        if isinstance(exc, NotFoundError) and self.state is CheckoutState.LOCKING:
            self.advance(CheckoutState.NOT_FOUND)
        elif isinstance(exc, InsufficientStockError) and self.state is CheckoutState.LOCKING:
            self.advance(CheckoutState.INSUFFICIENT_STOCK)
        self.advance(CheckoutState.ROLLED_BACK)


def _verify_references(session, header: CheckoutHeader) -> None:
    if session.get(Employee, header.id_employee) is None:
        raise NotFoundError(
            f"Employee with ID {header.id_employee} not found",
            details={"id_employee": header.id_employee},
        )
    if header.card_number is not None and session.get(CustomerCard, header.card_number) is None:
        raise NotFoundError(
            f"Customer card with number {header.card_number} not found",
            details={"card_number": header.card_number},
        )


def _lock_and_verify(store: InventoryStore, items: list[CheckoutItem]) -> None:
    """Lock every requested record and check stock; raises before any write."""
    requested = {item.upc: item.quantity for item in items}

    short = []
    for upc in sorted(requested):
        record = store.lock_for_update(upc)
        if record.quantity < requested[upc]:
            short.append({"upc": upc, "requested": requested[upc], "available": record.quantity})

    if short:
        upcs = ", ".join(entry["upc"] for entry in short)
        raise InsufficientStockError(
            f"Not enough quantity for product with UPC {upcs}",
            details={"items": short},
        )


def submit_checkout(
    header: CheckoutHeader,
    items: list[CheckoutItem],
    *,
    lock_timeout_ms: int | None = None,
) -> Check:
    """
    Persist a receipt with its sale lines and decrement inventory, atomically.

    Raises:
        ValidationError: malformed header or items; nothing was touched
        NotFoundError: unknown UPC, employee or customer card
        InsufficientStockError: some item has less stock than requested
        ConflictError: check_number already used
        LockTimeoutError: a row lock was not granted in time (retryable)
        StorageError: any other database failure
    """
    attempt = CheckoutAttempt(getattr(header, "check_number", None))

    if lock_timeout_ms is None:
        lock_timeout_ms = current_app.config.get("CHECKOUT_LOCK_TIMEOUT_MS")

    try:
        attempt.advance(CheckoutState.VALIDATING)
        validate_checkout(header, items)

        with UnitOfWork(db.session, lock_timeout_ms=lock_timeout_ms) as uow:
            store = InventoryStore(uow)
            ledger = ReceiptLedger(uow)

            attempt.advance(CheckoutState.LOCKING)
            _lock_and_verify(store, items)
            _verify_references(uow.session, header)

            attempt.advance(CheckoutState.WRITING)
            check = ledger.insert_receipt(header)
            for item in items:
                ledger.insert_sale_line(check.check_number, item)
                store.decrement(item.upc, item.quantity)
    except Exception as exc:
        if not isinstance(exc, AppError):
            current_app.logger.exception("checkout failed unexpectedly check_number=%s", attempt.check_number)
        attempt.fail(exc)
        raise

    attempt.advance(CheckoutState.COMMITTED)
    return check
