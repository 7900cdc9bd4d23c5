"""Customer service - registration and lookup."""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from canteen.exceptions import BusinessRuleError, CustomerNotFoundError, ValidationError
from canteen.models import Customer

logger = logging.getLogger(__name__)


def find_customer(session, customer_id: str, for_update: bool = False) -> Optional[Customer]:
    """
    Return the customer with ``customer_id`` or None.

    With ``for_update`` the row is locked until the surrounding transaction
    ends (a no-op on SQLite, which locks the whole database on write).
    """
    query = session.query(Customer).filter(Customer.id == customer_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    return query.first()


def get_customer(session, customer_id: str) -> Customer:
    """Like find_customer, but raise CustomerNotFoundError when absent."""
    customer = find_customer(session, customer_id)
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    return customer


def register_customer(session, customer_id: str, name: str, customer_type: str = None) -> Customer:
    """
    Register a new customer with a zero balance.

    Args:
        session: SQLAlchemy session
        customer_id: Registration id chosen by staff (e.g. student number)
        name: Display name
        customer_type: Free-form tag such as 'student' or 'staff'

    Returns:
        The committed Customer

    Raises:
        ValidationError: blank id or name
        BusinessRuleError: a customer with this id already exists
    """
    customer_id = (customer_id or '').strip()
    name = (name or '').strip()
    if not customer_id:
        raise ValidationError('Customer id is required')
    if not name:
        raise ValidationError('Customer name is required')

    if find_customer(session, customer_id) is not None:
        raise BusinessRuleError(f"Customer {customer_id} already exists")

    try:
        customer = Customer(
            id=customer_id,
            name=name,
            customer_type=customer_type,
            balance=0
        )
        session.add(customer)
        session.commit()

    except IntegrityError:
        # Race condition: registered concurrently by another session
        session.rollback()
        raise BusinessRuleError(f"Customer {customer_id} already exists")
    except Exception:
        session.rollback()
        raise

    logger.info(f"Registered customer {customer_id} ({customer_type or 'untyped'})")
    return customer
