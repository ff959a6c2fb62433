from sqlalchemy import Column, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from salesagent.core.database import Base


class OrderItem(Base):
    __tablename__ = "ai_order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("ai_orders.id"), index=True, nullable=False)
    product_id = Column(Integer, nullable=True)

    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)

    order = relationship("Order", back_populates="items")
