from sqlalchemy import JSON, Column, DateTime, Integer, String, Text, func

from salesagent.core.database import Base


class PageRules(Base):
    __tablename__ = "page_rules"

    id = Column(Integer, primary_key=True)
    page_id = Column(String, index=True, nullable=False, unique=True)
    user_id = Column(String, index=True, nullable=False)

    business_description = Column(Text, nullable=True)
    products_summary = Column(Text, nullable=True)
    preferred_tone = Column(String, nullable=True)
    detected_language = Column(String, nullable=True)
    support_whatsapp_number = Column(String, nullable=True)

    # camelCase JSON blobs owned by the settings screens
    automation_settings = Column(JSON, nullable=False, default=dict)
    selling_rules = Column(JSON, nullable=False, default=dict)
    safety_rules = Column(JSON, nullable=False, default=dict)
    payment_rules = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
