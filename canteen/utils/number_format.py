"""Parsing helpers for money amounts, quantities and ids."""
from decimal import Decimal, InvalidOperation

CENTS = Decimal('0.01')

# Largest amount a balance, price or total may hold
MAX_AMOUNT = Decimal('9999999999.99')

# Largest quantity of one item in a single cart
MAX_QUANTITY = 10000


def parse_amount(value) -> Decimal:
    """
    Parse a monetary amount to a Decimal rounded to cents.

    Accepts Decimal, int, float or numeric strings. Booleans, non-finite
    values, values beyond MAX_AMOUNT and unparseable input raise ValueError.
    Sign is not checked here.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f'Invalid amount: {value!r}')

    try:
        if isinstance(value, float):
            # str() avoids binary float noise (0.1 -> 0.1000000000000000055...)
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = Decimal(value.strip())
        else:
            amount = Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f'Invalid amount: {value!r}')

    if not amount.is_finite() or abs(amount) > MAX_AMOUNT:
        raise ValueError(f'Invalid amount: {value!r}')

    try:
        return amount.quantize(CENTS)
    except InvalidOperation:
        raise ValueError(f'Invalid amount: {value!r}')


def parse_int(value) -> int:
    """
    Parse a strict integer.

    Integers and digit-only strings are accepted; bools, floats and anything
    else raise ValueError rather than being truncated.
    """
    if isinstance(value, bool):
        raise ValueError(f'Invalid integer: {value!r}')
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip('-').isdigit():
        return int(value.strip())
    raise ValueError(f'Invalid integer: {value!r}')


def parse_quantity(value) -> int:
    """
    Parse a cart quantity: a strict integer no larger than MAX_QUANTITY.

    Sign is not checked here.
    """
    quantity = parse_int(value)
    if quantity > MAX_QUANTITY:
        raise ValueError(f'Quantity too large: {value!r}')
    return quantity
