from __future__ import annotations

from salesagent.services.keyword_rules import GENERAL, INTENT_RULES, any_match


def classify_intent(text: str) -> str:
    if not text:
        return GENERAL
    for intent, patterns in INTENT_RULES.items():
        if any_match(patterns, text):
            return intent
    return GENERAL
