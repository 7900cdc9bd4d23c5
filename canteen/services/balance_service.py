"""
Balance service - top-ups and debits of customer prepaid balances.

Every adjustment is a single UPDATE that does the arithmetic in the
database, so concurrent adjustments of one customer serialize on the row
(or, on SQLite, on the database write lock) and never lose an update.
"""
from decimal import Decimal
import logging

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from canteen.exceptions import (
    CustomerNotFoundError, InsufficientFundsError, InvalidAmountError, StoreError
)
from canteen.models import Customer
from canteen.services.customer_service import find_customer
from canteen.utils.number_format import parse_amount

logger = logging.getLogger(__name__)


def validate_amount(amount) -> Decimal:
    """Return ``amount`` as Decimal cents; raise InvalidAmountError unless > 0."""
    try:
        value = parse_amount(amount)
    except ValueError:
        raise InvalidAmountError(amount)
    if value <= 0:
        raise InvalidAmountError(amount)
    return value


def get_balance(session, customer_id: str) -> Decimal:
    balance = session.query(Customer.balance).filter(Customer.id == customer_id).scalar()
    if balance is None:
        raise CustomerNotFoundError(customer_id)
    return Decimal(str(balance))


def apply_debit(session, customer_id: str, amount: Decimal) -> None:
    """
    Debit ``amount`` inside the caller's transaction (no commit).

    The UPDATE only matches while the balance still covers the amount, so a
    balance drained concurrently shows up as InsufficientFundsError rather
    than going negative. The caller owns rollback.
    """
    stmt = (
        update(Customer)
        .where(Customer.id == customer_id, Customer.balance >= amount)
        .values(balance=Customer.balance - amount)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)

    if result.rowcount != 1:
        customer = find_customer(session, customer_id)
        if customer is None:
            raise CustomerNotFoundError(customer_id)
        session.refresh(customer)
        raise InsufficientFundsError(customer_id, amount, customer.balance)

    logger.debug(f"{result.rowcount} rows in customer updated (debit {amount} from {customer_id})")


def apply_top_up(session, customer_id: str, amount: Decimal) -> None:
    """Credit ``amount`` inside the caller's transaction (no commit)."""
    stmt = (
        update(Customer)
        .where(Customer.id == customer_id)
        .values(balance=Customer.balance + amount)
        .execution_options(synchronize_session=False)
    )
    result = session.execute(stmt)

    if result.rowcount != 1:
        raise CustomerNotFoundError(customer_id)

    logger.debug(f"{result.rowcount} rows in customer updated (top-up {amount} to {customer_id})")


def top_up(session, customer_id: str, amount) -> Decimal:
    """
    Add ``amount`` to a customer's balance and commit.

    Returns:
        The balance right after this top-up

    Raises:
        InvalidAmountError: amount is not a number > 0
        CustomerNotFoundError: unknown customer
    """
    value = validate_amount(amount)

    try:
        apply_top_up(session, customer_id, value)
        new_balance = get_balance(session, customer_id)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Top-up for customer {customer_id} failed: {e}")
        raise StoreError(f"Top-up failed: {e}") from e
    except Exception:
        session.rollback()
        raise

    logger.info(f"Topped up {value} for customer {customer_id}, balance now {new_balance}")
    return new_balance


def debit(session, customer_id: str, amount) -> Decimal:
    """
    Subtract ``amount`` from a customer's balance and commit.

    Returns:
        The balance right after this debit

    Raises:
        InvalidAmountError: amount is not a number > 0
        CustomerNotFoundError: unknown customer
        InsufficientFundsError: balance lower than amount
    """
    value = validate_amount(amount)

    try:
        apply_debit(session, customer_id, value)
        new_balance = get_balance(session, customer_id)
        session.commit()
    except InsufficientFundsError as e:
        session.rollback()
        logger.warning(e.message)
        raise
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Debit for customer {customer_id} failed: {e}")
        raise StoreError(f"Debit failed: {e}") from e
    except Exception:
        session.rollback()
        raise

    logger.info(f"Debited {value} from customer {customer_id}, balance now {new_balance}")
    return new_balance
