from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, Text, func

from salesagent.core.database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (Index("ix_products_user_active", "user_id", "is_active"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String, index=True, nullable=False)
    name = Column(String, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    sku = Column(String, nullable=True)
    stock_quantity = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
