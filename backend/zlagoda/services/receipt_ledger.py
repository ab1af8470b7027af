# Overview: Append-only writes of receipts and their sale lines inside a unit of work.

from __future__ import annotations

from sqlalchemy import select

from ..errors import ConflictError
from ..models import Check, Sale
from .checkout_schemas import CheckoutHeader, CheckoutItem
from .concurrency import UnitOfWork


class ReceiptLedger:
    """
    Writes receipts. Nothing here updates or deletes; a receipt row and its
    sale lines become visible only when the surrounding UnitOfWork commits.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    def receipt_exists(self, check_number: str) -> bool:
        stmt = select(Check.check_number).where(Check.check_number == check_number)
        return self.uow.session.execute(stmt).first() is not None

    def insert_receipt(self, header: CheckoutHeader) -> Check:
        """
        Insert the receipt header. Raises ConflictError if the number is taken.

        The flush surfaces a concurrent duplicate as an IntegrityError, which
        the unit of work translates to ConflictError as well.
        """
        if self.receipt_exists(header.check_number):
            raise ConflictError(
                f"Check with number {header.check_number} already exists",
                details={"check_number": header.check_number},
            )

        check = Check(
            check_number=header.check_number,
            id_employee=header.id_employee,
            card_number=header.card_number,
            print_date=header.print_date,
            sum_total=header.sum_total,
            vat=header.vat,
        )
        self.uow.session.add(check)
        self.uow.flush()
        return check

    def insert_sale_line(self, check_number: str, item: CheckoutItem) -> Sale:
        sale = Sale(
            upc=item.upc,
            check_number=check_number,
            quantity=item.quantity,
            selling_price=item.selling_price,
        )
        self.uow.session.add(sale)
        self.uow.flush()
        return sale
