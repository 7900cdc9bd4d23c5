"""Catalog service - item lookups and catalog management."""
import logging
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError

from canteen.exceptions import BusinessRuleError, ItemNotFoundError, ValidationError
from canteen.models import Item, ItemType, ReceiptItem
from canteen.utils.number_format import parse_amount, parse_int

logger = logging.getLogger(__name__)


def find_item(session, item_id: int) -> Optional[Item]:
    """Return the item with ``item_id`` or None."""
    return session.query(Item).filter(Item.id == item_id).first()


def get_item(session, item_id: int) -> Item:
    """Like find_item, but raise ItemNotFoundError when absent."""
    item = find_item(session, item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    return item


def get_items_by_ids(session, item_ids: Iterable[int]) -> Dict[int, Item]:
    """Fetch items in one query, keyed by id. Missing ids are simply absent."""
    item_ids = list(item_ids)
    if not item_ids:
        return {}
    items = session.query(Item).filter(Item.id.in_(item_ids)).all()
    return {item.id: item for item in items}


def list_items_by_type(session, item_type: Optional[int] = None) -> List[Item]:
    """List catalog items, optionally restricted to one type tag."""
    query = session.query(Item)
    if item_type is not None:
        query = query.filter(Item.type == _validate_item_type(item_type))
    return query.order_by(Item.name, Item.id).all()


def _validate_item_type(item_type) -> int:
    try:
        return ItemType(parse_int(item_type)).value
    except ValueError:
        raise ValidationError(f"Invalid item type: {item_type!r}")


def _validate_price(price) -> Decimal:
    try:
        value = parse_amount(price)
    except ValueError:
        raise ValidationError(f"Invalid price: {price!r}")
    if value < 0:
        raise ValidationError('Price cannot be negative')
    return value


def _validate_stock(amount) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise ValidationError(f"Stock amount must be a non-negative integer, got {amount!r}")
    return amount


def create_item(session, item_type: int, name: str, price, description: str = '',
                amount: int = 0, item_id: Optional[int] = None) -> Item:
    """
    Add an item to the catalog.

    ``item_id`` forces an explicit identity, as when re-importing a catalog;
    otherwise the store assigns one.
    """
    name = (name or '').strip()
    if not name:
        raise ValidationError('Item name is required')

    item = Item(
        type=_validate_item_type(item_type),
        name=name,
        price=_validate_price(price),
        description=description or '',
        amount=_validate_stock(amount)
    )
    if item_id is not None:
        if find_item(session, item_id) is not None:
            raise BusinessRuleError(f"Item {item_id} already exists")
        item.id = item_id

    try:
        session.add(item)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessRuleError(f"Item {item_id} already exists")
    except Exception:
        session.rollback()
        raise

    logger.debug(f"Saved item {item.id} ('{item.name}')")
    return item


def update_item(session, item_id: int, name: str = None, price=None,
                description: str = None, amount: int = None) -> Item:
    """Update the mutable fields of an item; None leaves a field unchanged."""
    item = get_item(session, item_id)

    # Validate every field before assigning any of them
    changes = {}
    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError('Item name is required')
        changes['name'] = name
    if price is not None:
        changes['price'] = _validate_price(price)
    if description is not None:
        changes['description'] = description
    if amount is not None:
        changes['amount'] = _validate_stock(amount)

    for field, value in changes.items():
        setattr(item, field, value)

    try:
        session.commit()
    except Exception:
        session.rollback()
        raise

    logger.debug(f"Updated item {item_id}")
    return item


def delete_item(session, item_id: int) -> None:
    """
    Remove an item from the catalog.

    Items that appear on a receipt are kept: receipt lines must keep
    pointing at an existing item.
    """
    item = get_item(session, item_id)

    in_use = session.query(ReceiptItem).filter(ReceiptItem.item_id == item_id).first()
    if in_use is not None:
        raise BusinessRuleError(f"Item {item_id} appears on receipts and cannot be deleted")

    try:
        session.delete(item)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise BusinessRuleError(f"Item {item_id} appears on receipts and cannot be deleted")
    except Exception:
        session.rollback()
        raise

    logger.debug(f"Deleted item {item_id}")
