"""Item model."""
from sqlalchemy import Column, Integer, String, Text, DateTime
from sqlalchemy.sql import func
from canteen.database import Base
from canteen.models.types import Money
import enum


class ItemType(enum.IntEnum):
    """Catalog category tag stored as an integer."""
    FOOD = 0
    DRINK = 1
    OTHER = 2


class Item(Base):
    """Catalog item."""
    
    __tablename__ = 'item'
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Integer, nullable=False, default=ItemType.FOOD.value)
    name = Column(String(200), nullable=False)
    price = Column(Money, nullable=False)
    description = Column(Text, nullable=False, default='', server_default='')
    amount = Column(Integer, nullable=False, default=0, server_default='0')  # Units in stock
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
    
    def to_dict(self):
        return {
            'id': self.id,
            'type': self.type,
            'name': self.name,
            'price': str(self.price),
            'description': self.description,
            'amount': self.amount,
        }
    
    def __repr__(self):
        return f"<Item(id={self.id}, name='{self.name}', price={self.price})>"
