"""Models package - exports all SQLAlchemy models."""
from canteen.models.customer import Customer
from canteen.models.item import Item, ItemType
from canteen.models.receipt import Receipt, PaymentMethod, normalize_payment_method
from canteen.models.receipt_item import ReceiptItem

__all__ = [
    'Customer',
    'Item', 'ItemType',
    'Receipt', 'PaymentMethod', 'normalize_payment_method',
    'ReceiptItem',
]
