from types import SimpleNamespace

import pytest

from salesagent.fsm import states
from salesagent.fsm.engine import advance, apply_transition, has_all_collected
from salesagent.services import keyword_rules as rules
from salesagent.services.intent import classify_intent


def _conversation(**overrides):
    data = {
        "state": states.IDLE,
        "collected_name": None,
        "collected_phone": None,
        "collected_address": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def _step(conversation, text, **kwargs):
    transition = advance(conversation.state, classify_intent(text), text, **kwargs)
    apply_transition(conversation, transition)
    return transition


@pytest.mark.parametrize(
    ("state", "intent", "expected"),
    [
        (states.IDLE, rules.ORDER_INTENT, states.COLLECTING_NAME),
        (states.IDLE, rules.PRICE_INQUIRY, states.PRODUCT_INQUIRY),
        (states.IDLE, rules.INFO_REQUEST, states.PRODUCT_INQUIRY),
        (states.IDLE, rules.GREETING, states.GREETING),
        (states.IDLE, rules.GENERAL, states.GREETING),
        (states.GREETING, rules.ORDER_INTENT, states.COLLECTING_NAME),
        (states.GREETING, rules.PRICE_INQUIRY, states.PRODUCT_INQUIRY),
        (states.GREETING, rules.GENERAL, states.GREETING),
        (states.PRODUCT_INQUIRY, rules.ORDER_INTENT, states.COLLECTING_NAME),
        (states.PRODUCT_INQUIRY, rules.CONFIRMATION, states.COLLECTING_NAME),
        (states.PRODUCT_INQUIRY, rules.GENERAL, states.PRODUCT_INQUIRY),
        (states.ORDER_CONFIRMATION, rules.CONFIRMATION, states.COMPLETED),
        (states.ORDER_CONFIRMATION, rules.GENERAL, states.ORDER_CONFIRMATION),
        (states.COMPLETED, rules.ORDER_INTENT, states.COLLECTING_NAME),
        (None, rules.ORDER_INTENT, states.COLLECTING_NAME),
    ],
)
def test_transition_table(state, intent, expected):
    assert advance(state, intent, "some text").next_state == expected


def test_order_intent_from_idle_always_starts_collection():
    conversation = _conversation(collected_name="Old Name")

    transition = _step(conversation, "order korbo")

    assert transition.next_state == states.COLLECTING_NAME
    assert conversation.state == states.COLLECTING_NAME


def test_name_is_collected_verbatim():
    conversation = _conversation(state=states.COLLECTING_NAME)

    _step(conversation, "  Rahim Uddin ")

    assert conversation.collected_name == "Rahim Uddin"
    assert conversation.state == states.COLLECTING_PHONE


def test_phone_is_extracted_from_sentence():
    conversation = _conversation(state=states.COLLECTING_PHONE, collected_name="Rahim Uddin")

    _step(conversation, "call me at 01712345678")

    assert conversation.state == states.COLLECTING_ADDRESS
    assert conversation.collected_phone == "01712345678"


def test_missing_phone_keeps_state_and_value():
    conversation = _conversation(state=states.COLLECTING_PHONE, collected_phone=None)

    transition = _step(conversation, "call me")

    assert transition.changed is False
    assert conversation.state == states.COLLECTING_PHONE
    assert conversation.collected_phone is None


def test_address_moves_to_confirmation():
    conversation = _conversation(state=states.COLLECTING_ADDRESS)

    _step(conversation, "House 12, Road 5, Dhanmondi")

    assert conversation.collected_address == "House 12, Road 5, Dhanmondi"
    assert conversation.state == states.ORDER_CONFIRMATION


@pytest.mark.parametrize(
    "state",
    [
        states.GREETING,
        states.PRODUCT_INQUIRY,
        states.COLLECTING_NAME,
        states.COLLECTING_PHONE,
        states.COLLECTING_ADDRESS,
        states.ORDER_CONFIRMATION,
    ],
)
def test_cancellation_resets_from_any_state(state):
    conversation = _conversation(
        state=state,
        collected_name="Rahim Uddin",
        collected_phone="01712345678",
        collected_address="Dhaka",
    )

    transition = _step(conversation, "cancel")

    assert transition.cancelled is True
    assert conversation.state == states.IDLE
    assert conversation.collected_name is None
    assert conversation.collected_phone is None
    assert conversation.collected_address is None


def test_non_textual_message_never_fills_fields():
    conversation = _conversation(state=states.COLLECTING_NAME)

    transition = advance(conversation.state, rules.GENERAL, "[IMAGE_RECEIVED]", is_textual=False)
    apply_transition(conversation, transition)

    assert conversation.state == states.COLLECTING_NAME
    assert conversation.collected_name is None


def test_disabled_order_taking_leaves_collection():
    assert advance(states.COLLECTING_PHONE, rules.GENERAL, "x", order_taking_enabled=False).next_state == states.IDLE
    assert advance(states.IDLE, rules.ORDER_INTENT, "order", order_taking_enabled=False).next_state == states.PRODUCT_INQUIRY
    assert advance(states.IDLE, rules.GREETING, "hi", order_taking_enabled=False).next_state == states.GREETING


def test_full_dialogue_collects_everything():
    conversation = _conversation()

    for text in ["order korbo", "Rahim Uddin", "01712345678", "Dhanmondi, Dhaka", "yes"]:
        _step(conversation, text)

    assert conversation.state == states.COMPLETED
    assert has_all_collected(conversation) is True
