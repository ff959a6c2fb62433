from __future__ import annotations

from salesagent.fsm import states
from salesagent.services import keyword_rules as rules

MIN_SCORE = 0
MAX_SCORE = 100
PENDING_REVIEW_THRESHOLD = 50


def score_deltas(text: str, state: str, history_length: int) -> list[tuple[str, int]]:
    """Return the ``(reason, delta)`` pairs triggered by one inbound message."""
    text = text or ""
    deltas: list[tuple[str, int]] = []

    if rules.any_match(rules.TEST_ORDER_PATTERNS, text):
        deltas.append(("test_order_keywords", rules.TEST_ORDER_DELTA))
    if rules.any_match(rules.RANDOM_PATTERNS, text):
        deltas.append(("random_keywords", rules.RANDOM_DELTA))
    if state == states.COLLECTING_ADDRESS and history_length < rules.EARLY_ADDRESS_MIN_HISTORY:
        deltas.append(("early_address", rules.EARLY_ADDRESS_DELTA))
    if state in states.COLLECTION_STATES and len(text.strip()) < rules.SHORT_MESSAGE_MIN_LENGTH:
        deltas.append(("short_message", rules.SHORT_MESSAGE_DELTA))
    if state == states.COLLECTING_PHONE and rules.find_phone(text) is None:
        deltas.append(("malformed_phone", rules.MALFORMED_PHONE_DELTA))
    return deltas


def score_message(prior_score: int | None, text: str, state: str, history_length: int) -> int:
    """Accumulate the fake-order score for a conversation.

    The result stays in ``[0, 100]`` and is never lower than ``prior_score``.
    """
    prior = clamp(int(prior_score or 0))
    total = prior + sum(delta for _reason, delta in score_deltas(text, state, history_length))
    return max(prior, clamp(total))


def clamp(score: int) -> int:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def needs_review(score: int) -> bool:
    return score > PENDING_REVIEW_THRESHOLD
