# Overview: Transactional access to inventory records for the checkout coordinator.

from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.orm.attributes import set_committed_value

from ..errors import InsufficientStockError, NotFoundError
from ..models import StoreProduct
from .concurrency import UnitOfWork, lock_for_update


class InventoryStore:
    """
    Inventory records seen through one UnitOfWork.

    decrement() is only legal for a UPC this store has already locked in
    the same unit of work; the lock is held until the unit of work ends.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow
        self._locked: dict[str, StoreProduct] = {}

    def lock_for_update(self, upc: str) -> StoreProduct:
        """
        Lock the record for the rest of the transaction and return it.

        Blocks while another transaction holds the lock. Raises
        NotFoundError when no record has this UPC.
        """
        if upc in self._locked:
            return self._locked[upc]

        stmt = lock_for_update(select(StoreProduct).where(StoreProduct.upc == upc))
        record = self.uow.session.execute(stmt).scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"Product with UPC {upc} not found", details={"upc": upc})

        self._locked[upc] = record
        return record

    def decrement(self, upc: str, quantity: int) -> int:
        """
        Subtract quantity from a locked record. Returns the new quantity.

        The UPDATE is guarded by quantity >= n so the row can never go
        negative even if a caller skipped the availability check.
        """
        if upc not in self._locked:
            raise RuntimeError(f"decrement({upc!r}) called without holding its lock")

        result = self.uow.session.execute(
            update(StoreProduct)
            .where(StoreProduct.upc == upc, StoreProduct.quantity >= quantity)
            .values(quantity=StoreProduct.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        record = self._locked[upc]
        if result.rowcount != 1:
            raise InsufficientStockError(
                f"Not enough quantity for product with UPC {upc}",
                details={"items": [{"upc": upc, "requested": quantity, "available": record.quantity}]},
            )

        # Keep the in-session object in step with the row without marking it dirty
        set_committed_value(record, "quantity", record.quantity - quantity)
        return record.quantity

    def increment(self, upc: str, quantity: int) -> int:
        """Add quantity to a locked record (restock, promotion transfer)."""
        if upc not in self._locked:
            raise RuntimeError(f"increment({upc!r}) called without holding its lock")

        self.uow.session.execute(
            update(StoreProduct)
            .where(StoreProduct.upc == upc)
            .values(quantity=StoreProduct.quantity + quantity)
            .execution_options(synchronize_session=False)
        )
        record = self._locked[upc]
        set_committed_value(record, "quantity", record.quantity + quantity)
        return record.quantity
