from sqlalchemy import JSON, Column, DateTime, Integer, Numeric, String, Text, UniqueConstraint, func

from salesagent.core.database import Base
from salesagent.fsm import states


class Conversation(Base):
    __tablename__ = "ai_conversations"
    __table_args__ = (UniqueConstraint("page_id", "sender_id", name="uq_conversations_page_sender"),)

    id = Column(Integer, primary_key=True)

    user_id = Column(String, index=True, nullable=False)
    page_id = Column(String, index=True, nullable=False)
    sender_id = Column(String, index=True, nullable=False)
    sender_name = Column(String, nullable=True)

    state = Column(String, default=states.IDLE, nullable=False)

    current_product_id = Column(Integer, nullable=True)
    current_product_name = Column(String, nullable=True)
    current_product_price = Column(Numeric(12, 2), nullable=True)
    current_quantity = Column(Integer, default=1, nullable=False)

    # filled by the collection states of the FSM
    collected_name = Column(String, nullable=True)
    collected_phone = Column(String, nullable=True)
    collected_address = Column(Text, nullable=True)

    fake_order_score = Column(Integer, default=0, nullable=False)
    message_history = Column(JSON, nullable=False, default=list)
    customer_summary = Column(Text, nullable=True)
    last_products_discussed = Column(JSON, nullable=False, default=list)
    total_messages_count = Column(Integer, default=0, nullable=False)

    # avoids materializing the same cycle twice
    last_order_id = Column(Integer, nullable=True)

    last_message_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}
