from __future__ import annotations

from dataclasses import dataclass, field

from salesagent.fsm import states
from salesagent.services.keyword_rules import (
    CANCELLATION,
    CONFIRMATION,
    INFO_REQUEST,
    ORDER_INTENT,
    PRICE_INQUIRY,
    find_phone,
)

COLLECTED_FIELDS = ("collected_name", "collected_phone", "collected_address")

_INQUIRY_INTENTS = {PRICE_INQUIRY, INFO_REQUEST}


@dataclass
class Transition:
    previous_state: str
    next_state: str
    # field name -> new value; None means "clear"
    updates: dict[str, str | None] = field(default_factory=dict)
    cancelled: bool = False

    @property
    def changed(self) -> bool:
        return self.previous_state != self.next_state


def _clear_collected() -> dict[str, str | None]:
    return {name: None for name in COLLECTED_FIELDS}


def advance(
    state: str | None,
    intent: str,
    text: str,
    *,
    order_taking_enabled: bool = True,
    is_textual: bool = True,
) -> Transition:
    """Compute the next dialogue state for one classified message.

    ``text`` is the normalized message. Collection states only extract
    fields from textual messages; media keeps the current state.
    """
    current = state if state in states.ALL_STATES else states.IDLE
    # completed is consumed by the order step; a leftover one restarts the cycle
    if current == states.COMPLETED:
        current = states.IDLE

    if intent == CANCELLATION:
        return Transition(current, states.IDLE, _clear_collected(), cancelled=True)

    if not order_taking_enabled:
        return _advance_without_orders(current, intent)

    if current == states.IDLE:
        if intent == ORDER_INTENT:
            return Transition(current, states.COLLECTING_NAME)
        if intent in _INQUIRY_INTENTS:
            return Transition(current, states.PRODUCT_INQUIRY)
        return Transition(current, states.GREETING)

    if current in (states.GREETING, states.PRODUCT_INQUIRY):
        if intent == ORDER_INTENT:
            return Transition(current, states.COLLECTING_NAME)
        if intent in _INQUIRY_INTENTS:
            return Transition(current, states.PRODUCT_INQUIRY)
        if current == states.PRODUCT_INQUIRY and intent == CONFIRMATION:
            return Transition(current, states.COLLECTING_NAME)
        return Transition(current, current)

    if current == states.COLLECTING_NAME:
        name = text.strip()
        if not is_textual or not name:
            return Transition(current, current)
        return Transition(current, states.COLLECTING_PHONE, {"collected_name": name})

    if current == states.COLLECTING_PHONE:
        phone = find_phone(text) if is_textual else None
        if phone is None:
            return Transition(current, current)
        return Transition(current, states.COLLECTING_ADDRESS, {"collected_phone": phone})

    if current == states.COLLECTING_ADDRESS:
        address = text.strip()
        if not is_textual or not address:
            return Transition(current, current)
        return Transition(current, states.ORDER_CONFIRMATION, {"collected_address": address})

    if current == states.ORDER_CONFIRMATION and intent == CONFIRMATION:
        return Transition(current, states.COMPLETED)

    return Transition(current, current)


def _advance_without_orders(current: str, intent: str) -> Transition:
    if current in states.ORDER_FLOW_STATES:
        return Transition(current, states.IDLE, _clear_collected())
    if intent == ORDER_INTENT or intent in _INQUIRY_INTENTS:
        return Transition(current, states.PRODUCT_INQUIRY)
    if current == states.IDLE:
        return Transition(current, states.GREETING)
    return Transition(current, current)


def apply_transition(conversation, transition: Transition) -> None:
    """Write the transition onto a Conversation-like object."""
    for name, value in transition.updates.items():
        setattr(conversation, name, value)
    conversation.state = transition.next_state


def has_all_collected(conversation) -> bool:
    return all((getattr(conversation, name, None) or "").strip() for name in COLLECTED_FIELDS)
