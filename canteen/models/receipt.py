"""Receipt model."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from canteen.database import Base
from canteen.models.types import Money
import enum


class PaymentMethod(enum.Enum):
    """Payment method tag recorded on each receipt."""
    BALANCE = "BALANCE"
    CASH = "CASH"
    CARD = "CARD"


def normalize_payment_method(value) -> str:
    """
    Normalize payment method value to string for DB storage.
    
    Args:
        value: Can be None, PaymentMethod enum, or string
    
    Returns:
        str: one of the PaymentMethod values ('BALANCE' when None)
    
    Raises:
        ValueError: If value is invalid
    """
    if value is None:
        return PaymentMethod.BALANCE.value
    
    if isinstance(value, PaymentMethod):
        return value.value
    
    if isinstance(value, str):
        normalized = value.upper().strip()
        if normalized in PaymentMethod.__members__:
            return normalized
        raise ValueError(f"Invalid payment method: {value}")
    
    raise ValueError(f"Cannot normalize payment method: {value} (type: {type(value).__name__})")


class Receipt(Base):
    """Receipt of one completed purchase."""
    
    __tablename__ = 'receipt'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(String(50), ForeignKey('customer.id'), nullable=False, index=True)
    payment_method = Column(String(20), nullable=False, default='BALANCE', server_default='BALANCE')
    datetime = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    total = Column(Money, nullable=False)
    
    # Relationships
    customer = relationship('Customer', back_populates='receipts')
    lines = relationship('ReceiptItem', back_populates='receipt', order_by='ReceiptItem.item_id')
    
    def to_dict(self):
        return {
            'id': self.id,
            'customer_id': self.customer_id,
            'payment_method': self.payment_method,
            'datetime': self.datetime.isoformat() if self.datetime else None,
            'total': str(self.total),
        }
    
    def __repr__(self):
        return f"<Receipt(id={self.id}, customer_id='{self.customer_id}', total={self.total})>"
