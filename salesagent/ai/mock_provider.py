from __future__ import annotations

from typing import Any

from salesagent.services import keyword_rules as rules
from salesagent.services.intent import classify_intent

_REPLIES = {
    rules.PRICE_INQUIRY: "জি ভাই, দাম প্রোডাক্ট তালিকায় দেওয়া আছে। অর্ডার করবেন?",
    rules.ORDER_INTENT: "অবশ্যই ভাই! অর্ডারের জন্য আপনার পুরো নামটা বলবেন?",
    rules.INFO_REQUEST: "জি ভাই, স্টকে আছে। আর কিছু জানতে চান?",
    rules.GREETING: "ওয়ালাইকুম আসসালাম ভাই! কোন প্রোডাক্টটা দেখছেন?",
    rules.CONFIRMATION: "ধন্যবাদ ভাই! আপনার অর্ডার নেওয়া হয়েছে।",
    rules.CANCELLATION: "ঠিক আছে ভাই, কোনো সমস্যা নেই। পরে লাগলে জানাবেন।",
}
_DEFAULT_REPLY = "জি ভাই, বলুন কীভাবে সাহায্য করতে পারি?"


def _last_user_text(messages: list[dict[str, Any]]) -> str:
    for message in reversed(messages):
        if message.get("role") != "user":
            continue
        content = message.get("content")
        if isinstance(content, list):
            return " ".join(part.get("text", "") for part in content if part.get("type") == "text")
        return str(content or "")
    return ""


class MockProvider:
    """Deterministic local replies, used in development and tests."""

    name = "mock"

    def complete(self, messages: list[dict[str, Any]], *, model: str) -> str:
        intent = classify_intent(_last_user_text(messages))
        return _REPLIES.get(intent, _DEFAULT_REPLY)
