"""Receipt line model."""
from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship
from canteen.database import Base


class ReceiptItem(Base):
    """Receipt line: one (item, quantity) entry of a receipt."""
    
    __tablename__ = 'receipt_item'
    
    receipt_id = Column(Integer, ForeignKey('receipt.id'), primary_key=True)
    item_id = Column(Integer, ForeignKey('item.id'), primary_key=True)
    amount = Column(Integer, nullable=False)  # Quantity bought
    
    # Relationships
    receipt = relationship('Receipt', back_populates='lines')
    item = relationship('Item')
    
    def __repr__(self):
        return f"<ReceiptItem(receipt_id={self.receipt_id}, item_id={self.item_id}, amount={self.amount})>"
