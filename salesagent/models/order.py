from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship

from salesagent.core.database import Base


class Order(Base):
    __tablename__ = "ai_orders"

    id = Column(Integer, primary_key=True)

    user_id = Column(String, index=True, nullable=False)
    page_id = Column(String, index=True, nullable=False)
    conversation_id = Column(Integer, ForeignKey("ai_conversations.id"), nullable=True)

    customer_name = Column(String, nullable=False)
    customer_phone = Column(String(30), nullable=False)
    customer_address = Column(Text, nullable=False)
    customer_fb_id = Column(String, nullable=False)

    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    payment_method = Column(String(30), nullable=False)

    fake_order_score = Column(Integer, nullable=False, default=0)
    invoice_number = Column(String(40), nullable=False, unique=True, index=True)
    order_status = Column(String(20), nullable=False)  # pending / confirmed
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
