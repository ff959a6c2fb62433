from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func

from salesagent.core.database import Base


class PostLink(Base):
    __tablename__ = "post_product_links"
    __table_args__ = (UniqueConstraint("page_id", "post_id", name="uq_post_links_page_post"),)

    id = Column(Integer, primary_key=True)
    page_id = Column(String, index=True, nullable=False)
    post_id = Column(String, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    detected_product_name = Column(String, nullable=True)
    post_text = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
