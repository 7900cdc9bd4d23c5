"""Receipt service - receipt lookups and detail reconstruction."""
from dataclasses import dataclass
from decimal import Decimal
from typing import List

from canteen.exceptions import ReceiptNotFoundError
from canteen.models import Item, Receipt, ReceiptItem


@dataclass(frozen=True)
class ItemOrder:
    """An item together with the quantity bought on one receipt."""
    item: Item
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return Decimal(str(self.item.price)) * self.quantity

    def to_dict(self):
        return {
            'item': self.item.to_dict(),
            'quantity': self.quantity,
            'line_total': str(self.line_total),
        }


def get_receipt(session, receipt_id: int) -> Receipt:
    receipt = session.query(Receipt).filter(Receipt.id == receipt_id).first()
    if receipt is None:
        raise ReceiptNotFoundError(receipt_id)
    return receipt


def get_receipts_by_customer(session, customer_id: str) -> List[Receipt]:
    """All receipts of a customer, newest first."""
    return (
        session.query(Receipt)
        .filter(Receipt.customer_id == customer_id)
        .order_by(Receipt.datetime.desc(), Receipt.id.desc())
        .all()
    )


def get_receipt_details(session, receipt_id: int) -> List[ItemOrder]:
    """
    Rebuild the (item, quantity) pairs of a receipt, ordered by item id.

    Lines store no price of their own, so each ItemOrder carries the item's
    current catalog price, which may differ from what was paid. The paid
    amount is ``Receipt.total``.
    """
    get_receipt(session, receipt_id)

    rows = (
        session.query(ReceiptItem, Item)
        .join(Item, ReceiptItem.item_id == Item.id)
        .filter(ReceiptItem.receipt_id == receipt_id)
        .order_by(ReceiptItem.item_id)
        .all()
    )
    return [ItemOrder(item=item, quantity=line.amount) for line, item in rows]
