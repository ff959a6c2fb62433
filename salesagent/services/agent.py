from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from salesagent.ai.client import CompletionClient
from salesagent.ai.prompt_builder import ConversationSnapshot, ResolvedPost, build_prompt
from salesagent.core.config import HISTORY_MAX_LENGTH
from salesagent.core.request_context import set_request_context
from salesagent.fsm import states
from salesagent.fsm.engine import Transition, advance, apply_transition
from salesagent.models.conversation import Conversation
from salesagent.models.page_rules import PageRules
from salesagent.models.processed_event import ProcessedEvent
from salesagent.schemas.events import AgentReply, InboundEvent
from salesagent.schemas.rules import RulesConfig
from salesagent.services import comments, history as history_service
from salesagent.services.fraud import score_message
from salesagent.services.intent import classify_intent
from salesagent.services.keyword_rules import RULES_VERSION
from salesagent.services.media import NormalizedMessage, normalize_message
from salesagent.services.orders import materialize_order, resolve_line_item
from salesagent.services.product_resolver import ProductResolver, match_by_name
from salesagent.services.sentiment import detect_sentiment, reaction_for

logger = logging.getLogger(__name__)

NOT_CONFIGURED_REPLY = "দুঃখিত, AI সেটআপ করা হয়নি।"
INTERNAL_ERROR_REPLY = "দুঃখিত, একটু সমস্যা হয়েছে।"


@dataclass
class AgentOutcome:
    status_code: int
    body: dict[str, Any]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AgentService:
    """Runs one inbound comment or message through the whole sales pipeline.

    Conversation state is written back at three checkpoints: after
    classification and extraction, after the reply is generated, and after
    an order is created. A failed checkpoint is logged and rolled back and
    the customer still gets a reply. When the first checkpoint fails
    nothing else is written for the request and the reply reports the
    stored conversation state.
    """

    def __init__(
        self,
        db: Session,
        completion: CompletionClient | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
        history_max_length: int = HISTORY_MAX_LENGTH,
    ) -> None:
        self.db = db
        self.completion = completion or CompletionClient()
        self._clock = clock
        self.history_max_length = history_max_length
        self._claimed_key: str | None = None

    def handle_event(self, event: InboundEvent) -> AgentOutcome:
        set_request_context(page_id=event.page_id, sender_id=event.sender_id)
        self._claimed_key = None
        try:
            return self._handle(event)
        except Exception:
            logger.exception("agent event failed")
            self._rollback()
            self._release_event()
            return AgentOutcome(500, {"error": "Internal error", "reply": INTERNAL_ERROR_REPLY})

    def _handle(self, event: InboundEvent) -> AgentOutcome:
        row = self.db.query(PageRules).filter(PageRules.page_id == event.page_id).first()
        if row is None:
            logger.warning("page not configured")
            return AgentOutcome(400, {"error": "Page not configured", "reply": NOT_CONFIGURED_REPLY})
        rules = RulesConfig.from_row(row)

        if not rules.channel_enabled(event.is_comment):
            reason = "Comment auto-reply disabled" if event.is_comment else "Inbox auto-reply disabled"
            return AgentOutcome(200, {"skip": True, "reason": reason})

        if not self._claim_event(event):
            logger.info("duplicate event skipped")
            return AgentOutcome(200, {"skip": True, "reason": "duplicate"})

        user_id = event.user_id or rules.user_id
        conversation = self._load_conversation(event, user_id)
        now = self._clock()

        message = normalize_message(
            event.message_type,
            event.message_text,
            event.attachments,
            ask_for_clearer_media=rules.safety.ask_for_clearer_photo_if_needed,
        )
        intent = classify_intent(message.text)
        sentiment = detect_sentiment(message.text)

        prior_state = conversation.state or states.IDLE
        prior_history = list(conversation.message_history or [])
        score = conversation.fake_order_score or 0
        if message.is_textual:
            score = score_message(score, message.text, prior_state, len(prior_history))

        resolver = ProductResolver(self.db, user_id)
        product = resolver.resolve(
            message.raw_text,
            page_id=event.page_id,
            is_comment=event.is_comment,
            post_id=event.post_id,
        )
        if product is None and event.post_content:
            product = match_by_name(resolver.catalog, event.post_content)
        post = self._resolve_post(resolver, event)

        if product is not None:
            conversation.current_product_id = product.id
            conversation.current_product_name = product.name
            conversation.current_product_price = product.price
        prompt_product = product or resolver.by_id(conversation.current_product_id)

        if event.is_comment:
            # public comments never drive the order dialogue
            transition = Transition(prior_state, prior_state)
        else:
            transition = advance(
                prior_state,
                intent,
                message.text,
                order_taking_enabled=rules.automation.order_taking,
                is_textual=message.is_textual,
            )
            if transition.next_state == states.COMPLETED and resolve_line_item(conversation, prompt_product) is None:
                logger.warning("confirmation without a known product, holding for product choice")
                transition = Transition(prior_state, states.ORDER_CONFIRMATION, transition.updates)
        apply_transition(conversation, transition)

        conversation.fake_order_score = score
        conversation.last_message_at = now
        conversation.total_messages_count = (conversation.total_messages_count or 0) + 1
        if event.sender_name:
            conversation.sender_name = event.sender_name

        logger.info(
            "event classified intent=%s sentiment=%s kind=%s state=%s->%s score=%s rules=%s",
            intent,
            sentiment,
            message.kind,
            transition.previous_state,
            transition.next_state,
            score,
            RULES_VERSION,
        )

        snapshot = ConversationSnapshot(
            state=transition.next_state,
            collected_name=conversation.collected_name,
            collected_phone=conversation.collected_phone,
            collected_address=conversation.collected_address,
            is_comment=event.is_comment,
            message_kind=message.kind,
            ask_for_clearer_media=rules.safety.ask_for_clearer_photo_if_needed,
            customer_summary=conversation.customer_summary,
            order_taking_enabled=rules.automation.order_taking,
        )
        existing_summary = conversation.customer_summary
        persisted = self._checkpoint("classified")
        user_entry = self._user_entry(message, intent, sentiment, product, now)

        analysis = None
        if event.is_comment:
            analysis = comments.analyze_comment(
                message,
                intent,
                product=product,
                replies_to_page=event.is_reply_to_page_comment or bool(event.parent_comment_id),
            )

        if analysis is not None and not analysis.needs_inbox:
            reply_text = analysis.comment_reply or ""
        else:
            prompt = build_prompt(rules, snapshot, prompt_product, post, catalog=resolver.catalog)
            reply_text = self.completion.complete(
                prompt,
                prior_history + [user_entry],
                page_id=event.page_id,
                image_urls=self._image_urls(message, rules),
            ).reply

        if not persisted:
            # the rollback reloaded another writer's version of the row
            logger.warning("conversation changed underneath the request, nothing else is written")
            return AgentOutcome(
                200,
                self._reply_body(
                    event,
                    reply_text,
                    intent,
                    sentiment,
                    conversation.state or states.IDLE,
                    conversation.fake_order_score or 0,
                    product,
                    analysis,
                ),
            )

        history = prior_history + [
            user_entry,
            history_service.make_entry("assistant", reply_text, self._clock().isoformat()),
        ]
        conversation.message_history = history_service.trim_message_history(history, self.history_max_length)
        conversation.customer_summary = history_service.generate_customer_summary(
            history, existing_summary, event.sender_name or conversation.sender_name
        )
        conversation.last_products_discussed = history_service.extract_products_discussed(history)
        self._checkpoint("replied")

        order = None
        if not event.is_comment and transition.next_state == states.COMPLETED:
            order = self._materialize(conversation, rules, prompt_product)

        return AgentOutcome(
            200,
            self._reply_body(
                event,
                reply_text,
                intent,
                sentiment,
                conversation.state,
                conversation.fake_order_score or 0,
                product,
                analysis,
                order,
            ),
        )

    def _user_entry(self, message: NormalizedMessage, intent: str, sentiment: str, product: Any, now: datetime):
        return history_service.make_entry(
            "user",
            message.text,
            now.isoformat(),
            intent=intent,
            sentiment=sentiment,
            message_type=message.kind,
            product_context=_product_context(product),
        )

    def _reply_body(
        self,
        event: InboundEvent,
        reply_text: str,
        intent: str,
        sentiment: str,
        state: str,
        score: int,
        product: Any,
        analysis: comments.CommentAnalysis | None,
        order: Any = None,
    ) -> dict[str, Any]:
        reply = AgentReply(
            reply=reply_text,
            intent=intent,
            sentiment=sentiment,
            conversation_state=state,
            should_react=event.is_comment,
            reaction_type=reaction_for(sentiment),
            fake_order_score=score,
            product_context=_product_context(product),
        )
        if analysis is not None:
            reply.comment_reply = analysis.comment_reply
            reply.should_send_inbox = analysis.needs_inbox
            if analysis.needs_inbox:
                reply.inbox_message = reply_text
        if order is not None:
            reply.order_id = order.id
            reply.invoice_number = order.invoice_number
        return reply.to_payload()

    def _claim_event(self, event: InboundEvent) -> bool:
        key = event.idempotency_key()
        if key is None:
            return True
        if self.db.query(ProcessedEvent).filter(ProcessedEvent.event_id == key).first() is not None:
            return False
        self.db.add(ProcessedEvent(event_id=key, page_id=event.page_id))
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            return False
        self._claimed_key = key
        return True

    def _release_event(self) -> None:
        """Drop this request's idempotency claim so a redelivery is processed."""
        key, self._claimed_key = self._claimed_key, None
        if key is None:
            return
        try:
            self.db.query(ProcessedEvent).filter(ProcessedEvent.event_id == key).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError:
            logger.exception("event claim release failed event=%s", key)
            self._rollback()

    def _load_conversation(self, event: InboundEvent, user_id: str) -> Conversation:
        conversation = self._find_conversation(event)
        if conversation is not None:
            return conversation

        conversation = Conversation(
            user_id=user_id,
            page_id=event.page_id,
            sender_id=event.sender_id,
            sender_name=event.sender_name,
            state=states.IDLE,
            fake_order_score=0,
            message_history=[],
            last_products_discussed=[],
            total_messages_count=0,
            current_quantity=1,
        )
        self.db.add(conversation)
        try:
            self.db.commit()
        except IntegrityError:
            # another delivery created it first
            self.db.rollback()
            conversation = self._find_conversation(event)
            if conversation is None:
                raise
        return conversation

    def _find_conversation(self, event: InboundEvent) -> Conversation | None:
        return (
            self.db.query(Conversation)
            .filter(Conversation.page_id == event.page_id, Conversation.sender_id == event.sender_id)
            .first()
        )

    def _resolve_post(self, resolver: ProductResolver, event: InboundEvent) -> ResolvedPost | None:
        if not event.is_comment or not event.post_id:
            return None
        link = resolver.find_post(event.page_id, event.post_id)
        if link is None:
            if not event.post_content:
                return None
            return ResolvedPost(post_id=event.post_id, text=event.post_content)
        return ResolvedPost(
            post_id=event.post_id,
            text=link.post_text or event.post_content,
            detected_product_name=link.detected_product_name,
        )

    def _image_urls(self, message: NormalizedMessage, rules: RulesConfig) -> list[str]:
        if not rules.automation.media_understanding:
            return []
        return list(message.image_urls)

    def _materialize(self, conversation: Conversation, rules: RulesConfig, product: Any):
        try:
            order = materialize_order(self.db, conversation, rules, product)
        except SQLAlchemyError:
            logger.exception("order materialization failed")
            # keep the dialogue one confirmation away from a retry
            conversation.state = states.ORDER_CONFIRMATION
            self._checkpoint("order_failed")
            return None
        if order is None:
            if conversation.state == states.COMPLETED:
                conversation.state = states.ORDER_CONFIRMATION
                self._checkpoint("order_held")
            return None

        entries = list(conversation.message_history or [])
        if entries:
            entries[-1] = {**entries[-1], "order_id": order.id}
            conversation.message_history = entries
            self._checkpoint("order_tagged")
        return order

    def _checkpoint(self, name: str) -> bool:
        try:
            self.db.commit()
        except SQLAlchemyError:
            logger.exception("conversation checkpoint failed checkpoint=%s", name)
            self._rollback()
            return False
        return True

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.exception("rollback failed")


def _product_context(product: Any) -> dict[str, Any] | None:
    if product is None:
        return None
    return {"name": product.name, "price": float(product.price)}
