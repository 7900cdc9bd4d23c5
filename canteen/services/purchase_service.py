"""
Purchase service with transactional logic.

Turns a cart into a receipt, its receipt lines and a balance debit. All
validation happens before the first write; the writes themselves share one
transaction and are committed together or rolled back together.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, List, Optional
import logging
import time

from sqlalchemy import text, update
from sqlalchemy.exc import SQLAlchemyError

from canteen.exceptions import (
    CanteenError, EmptyCartError, InvalidQuantityError, InvalidPaymentMethodError,
    ItemNotFoundError, CustomerNotFoundError, InsufficientFundsError,
    InsufficientStockError, PurchaseTimeoutError, StoreError, ValidationError
)
from canteen.models import Item, Receipt, ReceiptItem, normalize_payment_method
from canteen.services.balance_service import apply_debit
from canteen.services.catalog_service import get_items_by_ids
from canteen.services.customer_service import find_customer
from canteen.utils.number_format import CENTS, parse_int, parse_quantity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartLine:
    """One requested (item, quantity) pair of a cart."""
    item_id: int
    quantity: int


def _coerce_line(line: Any) -> CartLine:
    if isinstance(line, CartLine):
        item_id, quantity = line.item_id, line.quantity
    elif isinstance(line, dict):
        item_id, quantity = line.get('item_id'), line.get('quantity')
    else:
        try:
            item_id, quantity = line
        except (TypeError, ValueError):
            raise ValidationError(f"Malformed cart line: {line!r}")

    try:
        quantity = parse_quantity(quantity)
    except ValueError:
        raise InvalidQuantityError(quantity)
    if quantity <= 0:
        raise InvalidQuantityError(quantity)

    try:
        item_id = parse_int(item_id)
    except ValueError:
        raise ValidationError(f"Invalid item id: {item_id!r}")

    return CartLine(item_id=item_id, quantity=quantity)


def normalize_cart(cart_lines: Optional[Iterable[Any]]) -> List[CartLine]:
    """
    Validate a cart and merge repeated items.

    Accepts CartLine objects, ``(item_id, quantity)`` pairs or mappings with
    ``item_id``/``quantity`` keys. Quantities of a repeated item are summed
    into its first occurrence, so the result holds one line per distinct item
    in first-seen order.

    Raises:
        EmptyCartError: no lines
        InvalidQuantityError: a quantity that is not a positive integer
    """
    lines = list(cart_lines or [])
    if not lines:
        raise EmptyCartError()

    merged = {}
    for raw in lines:
        line = _coerce_line(raw)
        merged[line.item_id] = merged.get(line.item_id, 0) + line.quantity

    return [CartLine(item_id=item_id, quantity=qty) for item_id, qty in merged.items()]


def calculate_total(lines: List[CartLine], items: dict) -> Decimal:
    """Sum of price x quantity over the cart, priced from ``items``."""
    total = Decimal('0.00')
    for line in lines:
        total += Decimal(str(items[line.item_id].price)) * line.quantity
    return total.quantize(CENTS)


def _check_deadline(session, deadline: Optional[float], timeout: Optional[float]):
    """
    Raise PurchaseTimeoutError once the deadline has passed.

    Otherwise cap how long the next statement may wait for a lock held by
    another writer to the time that is left.
    """
    if deadline is None:
        return
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise PurchaseTimeoutError(timeout)

    wait_ms = max(1, int(remaining * 1000))
    dialect = session.get_bind().dialect.name
    if dialect == 'sqlite':
        session.execute(text(f'PRAGMA busy_timeout = {wait_ms}'))
    elif dialect == 'postgresql':
        session.execute(text(f"SET LOCAL lock_timeout = '{wait_ms}ms'"))


def _decrement_stock(session, line: CartLine, item: Item):
    """Take ``line.quantity`` units out of stock, refusing to go below zero."""
    stmt = (
        update(Item)
        .where(Item.id == line.item_id, Item.amount >= line.quantity)
        .values(amount=Item.amount - line.quantity)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)
    if result.rowcount != 1:
        session.refresh(item)
        raise InsufficientStockError(item.name, line.quantity, item.amount)


def submit_purchase(
    session,
    customer_id: str,
    cart_lines: Iterable[Any],
    payment_method: Any = None,
    timeout: Optional[float] = None,
    track_stock: bool = False
) -> int:
    """
    Record a purchase: one receipt, its lines and the balance debit.

    Steps:
    1. Validate cart lines and payment method
    2. Resolve every item and compute the total from current prices
    3. Load (and lock) the customer and check the balance covers the total
    4. Insert the receipt and flush to get its id
    5. Insert one receipt line per distinct item
    6. Decrement stock when ``track_stock`` is set
    7. Debit the balance by the total
    8. Commit

    Args:
        session: SQLAlchemy session
        customer_id: Paying customer
        cart_lines: CartLine objects, (item_id, quantity) pairs or mappings
        payment_method: PaymentMethod, its name, or None for BALANCE
        timeout: Seconds the write phase may take; checked before every
            write step and before commit
        track_stock: Also take the bought units out of item stock

    Returns:
        The new receipt id

    Raises:
        EmptyCartError, InvalidQuantityError, InvalidPaymentMethodError,
        ItemNotFoundError, CustomerNotFoundError, InsufficientFundsError,
        InsufficientStockError: nothing was written
        PurchaseTimeoutError, StoreError: the transaction was rolled back
    """
    deadline = time.monotonic() + timeout if timeout is not None else None

    try:
        # 1. Validate input
        lines = normalize_cart(cart_lines)
        try:
            method = normalize_payment_method(payment_method)
        except ValueError:
            raise InvalidPaymentMethodError(payment_method)

        # 2. Resolve items in batch and price the cart
        items = get_items_by_ids(session, [line.item_id for line in lines])
        for line in lines:
            if line.item_id not in items:
                raise ItemNotFoundError(line.item_id)
        total = calculate_total(lines, items)

        # 3. Load customer and check funds
        customer = find_customer(session, customer_id, for_update=True)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        if customer.balance < total:
            raise InsufficientFundsError(customer_id, total, customer.balance)
        if track_stock:
            for line in lines:
                item = items[line.item_id]
                if item.amount < line.quantity:
                    raise InsufficientStockError(item.name, line.quantity, item.amount)

        # 4. Create Receipt
        _check_deadline(session, deadline, timeout)
        receipt = Receipt(
            customer_id=customer_id,
            payment_method=method,
            datetime=datetime.now(),
            total=total
        )
        session.add(receipt)
        session.flush()
        receipt_id = receipt.id

        # 5. Create receipt lines
        _check_deadline(session, deadline, timeout)
        session.add_all([
            ReceiptItem(receipt_id=receipt_id, item_id=line.item_id, amount=line.quantity)
            for line in lines
        ])
        session.flush()
        logger.debug(f"Saved receipt {receipt_id} with {len(lines)} receipt lines")

        # 6. Stock movement
        if track_stock:
            _check_deadline(session, deadline, timeout)
            for line in lines:
                _decrement_stock(session, line, items[line.item_id])

        # 7. Balance debit
        _check_deadline(session, deadline, timeout)
        apply_debit(session, customer_id, total)

        _check_deadline(session, deadline, timeout)
        session.commit()

    except CanteenError as e:
        session.rollback()
        logger.warning(f"Purchase rejected for customer {customer_id}: {e.message}")
        raise
    except SQLAlchemyError as e:
        session.rollback()
        if deadline is not None and time.monotonic() >= deadline:
            logger.error(f"Purchase for customer {customer_id} timed out: {e}")
            raise PurchaseTimeoutError(timeout) from e
        logger.error(f"Purchase failed for customer {customer_id}: {e}")
        raise StoreError(f"Purchase failed: {e}") from e
    except Exception:
        session.rollback()
        raise

    logger.info(f"Receipt {receipt_id} recorded for customer {customer_id}: total {total} ({method})")
    return receipt_id
