"""Customer model."""
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from canteen.database import Base
from canteen.models.types import Money


class Customer(Base):
    """Customer holding a prepaid balance."""
    
    __tablename__ = 'customer'
    
    id = Column(String(50), primary_key=True)
    name = Column(String(200), nullable=False)
    customer_type = Column(String(50), nullable=True)
    balance = Column(Money, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    
    # Relationships
    receipts = relationship('Receipt', back_populates='customer', order_by='Receipt.id')
    
    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'customer_type': self.customer_type,
            'balance': str(self.balance),
        }
    
    def __repr__(self):
        return f"<Customer(id='{self.id}', name='{self.name}', balance={self.balance})>"
