from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from salesagent.ai.prompt_builder import format_price
from salesagent.services import media
from salesagent.services.keyword_rules import (
    GREETING,
    INFO_REQUEST,
    ORDER_INTENT,
    PRICE_INQUIRY,
)

INBOX_INTENTS = frozenset({PRICE_INQUIRY, ORDER_INTENT, INFO_REQUEST})
SHORT_COMMENT_LENGTH = 15

STICKER = "sticker"
AUDIO = "audio"
PHOTO = "photo"
POSITIVE_FEEDBACK = "positive_feedback"
GOING_TO_INBOX = "going_to_inbox"
ACKNOWLEDGMENT = "acknowledgment"
QUESTION = "question"
UNCLEAR = "unclear"
GENERAL = "general"

_EMOJI_ONLY = re.compile(r"^\s*[^\w\sঀ-৿]{1,5}\s*$")
_PRAISE = re.compile(
    r"\b(great|good|nice|awesome|excellent|best|amazing)\b|দারুণ|চমৎকার|অসাধারণ|সুন্দর|মাশাল্লাহ"
    r"|❤️|❤|👍|🔥|💯|💕|😍|🥰|😊|👏|💪|🙌",
    re.IGNORECASE,
)
_THANKS = re.compile(r"\b(thanks|thank you|ty|thx)\b|ধন্যবাদ", re.IGNORECASE)
_PHOTO_CONTEXT = re.compile(r"এটা|এই|দাম|price|কত|available|\?", re.IGNORECASE)
_MOVING_TO_INBOX = re.compile(r"\b(sms|message|inbox|msg|dm)\b|মেসেজ|ইনবক্স|দিচ্ছি|করছি", re.IGNORECASE)
_ACKNOWLEDGMENT = re.compile(
    r"^(ok|okay|yes|hmm|ji|ওকে|ঠিক আছে|বুঝলাম|আচ্ছা|হ্যাঁ|হা|জি|হুম|হবে|করব)[\s!.]*$",
    re.IGNORECASE,
)

# meaning -> public reply; negative stickers get none
_STICKER_REPLIES = {"love": "💕", "sadness": None, "anger": None}


@dataclass(frozen=True)
class CommentAnalysis:
    comment_type: str
    comment_reply: str | None
    needs_inbox: bool


def needs_inbox(intent: str) -> bool:
    return intent in INBOX_INTENTS


def public_acknowledgement(intent: str, product: Any = None) -> str:
    """Short public reply for a comment whose full answer goes to the inbox."""
    if intent == PRICE_INQUIRY:
        if product is not None:
            return f"৳{format_price(product.price)} ভাই, inbox দেখেন"
        return "inbox দেখেন ভাই"
    if intent == ORDER_INTENT:
        return "ভাই inbox এ order নিচ্ছি"
    if intent == INFO_REQUEST:
        return "inbox দেখেন ভাই"
    return "ভাই inbox দেখেন"


def analyze_comment(
    message: media.NormalizedMessage,
    intent: str,
    *,
    product: Any = None,
    replies_to_page: bool = False,
) -> CommentAnalysis:
    """Decide the public reply for a comment and whether it needs an inbox message.

    Comments asking about price, ordering or details always move to the
    inbox. Everything else (stickers, praise, greetings, short
    acknowledgements) is answered publicly and never reaches the
    completion service.
    """
    raw = message.raw_text
    wants_inbox = needs_inbox(intent)

    if message.kind in (media.STICKER, media.EMOJI) or (not wants_inbox and _EMOJI_ONLY.match(raw)):
        meaning = message.meaning or media.sticker_meaning(raw)
        return CommentAnalysis(STICKER, _STICKER_REPLIES.get(meaning, "😊"), False)

    if message.kind == media.AUDIO:
        return CommentAnalysis(AUDIO, "🎤 ভয়েস মেসেজ পেয়েছি!", True)

    if message.kind == media.IMAGE:
        if wants_inbox or _PHOTO_CONTEXT.search(raw):
            return CommentAnalysis(PHOTO, "ছবিটা দেখলাম! 👀 ইনবক্সে বিস্তারিত পাঠাচ্ছি 📩", True)
        return CommentAnalysis(PHOTO, "ধন্যবাদ ছবিটা পাঠানোর জন্য! 📷 কী জানতে চাইছেন বলুন? 🙂", False)

    if wants_inbox:
        kind = QUESTION if intent == INFO_REQUEST else intent
        return CommentAnalysis(kind, public_acknowledgement(intent, product), True)

    if (_PRAISE.search(raw) or _THANKS.search(raw)) and "?" not in raw:
        reply = "আপনাকেও ভাই" if _THANKS.search(raw) else "ধন্যবাদ ভাই"
        return CommentAnalysis(POSITIVE_FEEDBACK, reply, False)

    if replies_to_page:
        if _MOVING_TO_INBOX.search(raw):
            return CommentAnalysis(GOING_TO_INBOX, "ওকে ভাই, inbox এ কথা বলি", False)
        if _ACKNOWLEDGMENT.match(raw):
            return CommentAnalysis(ACKNOWLEDGMENT, "জি ভাই", False)

    if "?" in raw:
        return CommentAnalysis(QUESTION, public_acknowledgement(INFO_REQUEST), True)

    if intent == GREETING:
        return CommentAnalysis(GREETING, "জি ভাই বলুন", False)

    if len(raw) < SHORT_COMMENT_LENGTH:
        return CommentAnalysis(UNCLEAR, "জি ভাই বলুন", False)

    return CommentAnalysis(GENERAL, public_acknowledgement(GENERAL), True)
