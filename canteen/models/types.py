"""Column types shared by the models."""
from decimal import Decimal

from sqlalchemy.types import TypeDecorator, BigInteger

from canteen.utils.number_format import CENTS


class Money(TypeDecorator):
    """
    Money amount stored as an integer number of cents.

    SQLite keeps NUMERIC values as floating point, so balances and prices
    are stored in minor units on every backend. Python code sees Decimals
    with two places; literals compared with or added to a Money column are
    converted to cents as well, so in-database arithmetic stays exact.
    """
    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, float):
            value = str(value)
        return int(Decimal(value).quantize(CENTS) * 100)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(int(value)) / 100).quantize(CENTS)
