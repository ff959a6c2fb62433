from __future__ import annotations

import re
from typing import Any

from salesagent.services.keyword_rules import CANCELLATION, CONFIRMATION, ORDER_INTENT

SUMMARY_MAX_LENGTH = 500
PRODUCTS_DISCUSSED_LIMIT = 10

_IMPORTANT_INTENTS = {ORDER_INTENT, CONFIRMATION, CANCELLATION}

# (pattern, topic label, flag)
_SUMMARY_TOPICS: tuple[tuple[re.Pattern, str, str | None], ...] = (
    (re.compile(r"দাম|price|কত", re.IGNORECASE), "দাম জিজ্ঞেস করেছে", None),
    (re.compile(r"order|অর্ডার|কিনব|নিব", re.IGNORECASE), "অর্ডার করতে চায়", None),
    (re.compile(r"delivery|ডেলিভারি", re.IGNORECASE), "ডেলিভারি জানতে চায়", None),
    (re.compile(r"discount|ছাড়|কমাও", re.IGNORECASE), "ডিসকাউন্ট চায়", "wants_discount"),
    (re.compile(r"problem|complaint|সমস্যা", re.IGNORECASE), "সমস্যা আছে", "has_complaint"),
)
_ORDERED_PATTERN = re.compile(r"confirmed|হবে|নিলাম", re.IGNORECASE)


def make_entry(
    role: str,
    content: str,
    timestamp: str,
    *,
    intent: str | None = None,
    sentiment: str | None = None,
    message_type: str | None = None,
    product_context: dict[str, Any] | None = None,
    order_id: int | None = None,
) -> dict[str, Any]:
    entry: dict[str, Any] = {"role": role, "content": content, "timestamp": timestamp}
    optional = {
        "intent": intent,
        "sentiment": sentiment,
        "message_type": message_type,
        "product_context": product_context,
        "order_id": order_id,
    }
    entry.update({key: value for key, value in optional.items() if value is not None})
    return entry


def is_important(entry: dict[str, Any]) -> bool:
    return bool(
        entry.get("intent") in _IMPORTANT_INTENTS
        or entry.get("product_context")
        or entry.get("order_id")
    )


def trim_message_history(history: list[dict[str, Any]], max_length: int = 15) -> list[dict[str, Any]]:
    """Keep at most ``max_length`` entries, favouring order-relevant ones.

    Entries tagged with an order, confirmation or cancellation intent, a
    product context or an order id survive ahead of plain chatter; the
    result stays in chronological order.
    """
    if len(history) <= max_length:
        return list(history)

    important = [index for index, entry in enumerate(history) if is_important(entry)]
    room = max_length - len(important)
    recent = list(range(len(history) - room, len(history))) if room > 0 else []
    keep = sorted(set(important) | set(recent))
    return [history[index] for index in keep][-max_length:]


def recent_turns(history: list[dict[str, Any]], limit: int = 10) -> list[dict[str, str]]:
    """Role/content pairs of the last ``limit`` entries, as sent to the completion service."""
    turns = []
    for entry in history[-limit:] if limit > 0 else []:
        role = entry.get("role")
        content = entry.get("content")
        if role in {"user", "assistant"} and content:
            turns.append({"role": role, "content": str(content)})
    return turns


def generate_customer_summary(
    history: list[dict[str, Any]],
    existing_summary: str | None = None,
    sender_name: str | None = None,
) -> str:
    topics: list[str] = []
    products: list[str] = []
    flags: set[str] = set()
    has_ordered = False

    for entry in history:
        if entry.get("role") != "user":
            continue
        content = str(entry.get("content") or "")
        for pattern, topic, flag in _SUMMARY_TOPICS:
            if pattern.search(content):
                if topic not in topics:
                    topics.append(topic)
                if flag:
                    flags.add(flag)
        if _ORDERED_PATTERN.search(content):
            has_ordered = True
        product_name = (entry.get("product_context") or {}).get("name")
        if product_name and product_name not in products:
            products.append(product_name)

    parts = []
    if sender_name:
        parts.append(f"নাম: {sender_name}।")
    if existing_summary:
        parts.append("আগেও কথা হয়েছে।")
    if products:
        parts.append(f"প্রোডাক্ট: {', '.join(products[-3:])}।")
    if topics:
        parts.append(f"বিষয়: {', '.join(topics[-4:])}।")
    if has_ordered:
        parts.append("আগে অর্ডার করেছে।")
    if "has_complaint" in flags:
        parts.append("⚠️ সমস্যা ছিল।")
    if "wants_discount" in flags:
        parts.append("দাম কমাতে চায়।")
    return " ".join(parts)[:SUMMARY_MAX_LENGTH]


def extract_products_discussed(history: list[dict[str, Any]]) -> list[str]:
    products: list[str] = []
    for entry in history:
        name = (entry.get("product_context") or {}).get("name")
        if name and name not in products:
            products.append(name)
    return products[-PRODUCTS_DISCUSSED_LIMIT:]
