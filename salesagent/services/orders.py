from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from salesagent.fsm import states
from salesagent.fsm.engine import COLLECTED_FIELDS, has_all_collected
from salesagent.models.conversation import Conversation
from salesagent.models.order import Order
from salesagent.models.order_item import OrderItem
from salesagent.schemas.rules import RulesConfig
from salesagent.services.fraud import needs_review

logger = logging.getLogger(__name__)

ORDER_STATUS_PENDING = "pending"
ORDER_STATUS_CONFIRMED = "confirmed"
PAYMENT_COD = "cod"
PAYMENT_ADVANCE = "advance"

_PRODUCT_FIELDS = ("current_product_id", "current_product_name", "current_product_price")


@dataclass(frozen=True)
class LineItem:
    product_id: int | None
    name: str
    unit_price: Decimal


def generate_invoice_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"INV{now:%Y%m%d}{secrets.token_hex(4).upper()}"


def resolve_line_item(conversation: Conversation, product: Any = None) -> LineItem | None:
    """Snapshot of the product being ordered, preferring the freshly resolved one."""
    if product is not None:
        return LineItem(product.id, product.name, Decimal(str(product.price)))
    if conversation.current_product_name and conversation.current_product_price is not None:
        return LineItem(
            conversation.current_product_id,
            conversation.current_product_name,
            Decimal(str(conversation.current_product_price)),
        )
    return None


def order_status_for(score: int | None) -> str:
    return ORDER_STATUS_PENDING if needs_review(int(score or 0)) else ORDER_STATUS_CONFIRMED


def payment_method_for(rules: RulesConfig) -> str:
    return PAYMENT_COD if rules.payment.cod_available else PAYMENT_ADVANCE


def reset_after_order(conversation: Conversation, order_id: int | None) -> None:
    for name in COLLECTED_FIELDS + _PRODUCT_FIELDS:
        setattr(conversation, name, None)
    conversation.current_quantity = 1
    conversation.last_order_id = order_id
    conversation.state = states.IDLE


def materialize_order(
    db: Session,
    conversation: Conversation,
    rules: RulesConfig,
    product: Any = None,
) -> Order | None:
    """Turn a completed collection dialogue into exactly one order.

    Returns ``None`` unless the conversation is ``completed`` with name, phone
    and address present. The conversation is reset in the same transaction,
    so calling this again on the same conversation creates nothing.
    """
    if conversation.state != states.COMPLETED or not has_all_collected(conversation):
        return None

    line = resolve_line_item(conversation, product)
    if line is None:
        logger.warning("completed dialogue has no product to order conversation_id=%s", conversation.id)
        return None

    quantity = max(1, int(conversation.current_quantity or 1))
    subtotal = line.unit_price * quantity
    score = int(conversation.fake_order_score or 0)

    order = Order(
        user_id=conversation.user_id,
        page_id=conversation.page_id,
        conversation_id=conversation.id,
        customer_name=conversation.collected_name.strip(),
        customer_phone=conversation.collected_phone.strip(),
        customer_address=conversation.collected_address.strip(),
        customer_fb_id=conversation.sender_id,
        subtotal=subtotal,
        total=subtotal,
        payment_method=payment_method_for(rules),
        fake_order_score=score,
        invoice_number=generate_invoice_number(),
        order_status=order_status_for(score),
    )
    order.items.append(
        OrderItem(
            product_id=line.product_id,
            name=line.name,
            quantity=quantity,
            unit_price=line.unit_price,
            subtotal=subtotal,
        )
    )

    db.add(order)
    try:
        db.flush()
        reset_after_order(conversation, order.id)
        db.commit()
        db.refresh(order)
    except Exception:
        db.rollback()
        raise

    logger.info(
        "order materialized order_id=%s invoice=%s status=%s score=%s",
        order.id,
        order.invoice_number,
        order.order_status,
        score,
    )
    return order
