from __future__ import annotations

from salesagent.services.keyword_rules import (
    NEGATIVE,
    NEGATIVE_PATTERNS,
    NEUTRAL,
    POSITIVE,
    POSITIVE_PATTERNS,
    any_match,
)


def detect_sentiment(text: str) -> str:
    if not text:
        return NEUTRAL
    if any_match(POSITIVE_PATTERNS, text):
        return POSITIVE
    if any_match(NEGATIVE_PATTERNS, text):
        return NEGATIVE
    return NEUTRAL


def reaction_for(sentiment: str) -> str:
    return "LOVE" if sentiment == POSITIVE else "LIKE"
