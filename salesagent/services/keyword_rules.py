"""Static keyword tables used by the intent, sentiment and fraud heuristics.

Every table is plain data so the classifiers can be tested on their own. Bump
``RULES_VERSION`` whenever a pattern changes; the version is logged with every
classified event.
"""
from __future__ import annotations

import re

RULES_VERSION = "2024.06.2"

PRICE_INQUIRY = "price_inquiry"
ORDER_INTENT = "order_intent"
INFO_REQUEST = "info_request"
GREETING = "greeting"
CONFIRMATION = "confirmation"
CANCELLATION = "cancellation"
GENERAL = "general"

POSITIVE = "positive"
NEUTRAL = "neutral"
NEGATIVE = "negative"


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(pattern, re.IGNORECASE) for pattern in patterns)


# Evaluation order matters: the first intent with a matching pattern wins.
INTENT_RULES: dict[str, tuple[re.Pattern, ...]] = {
    PRICE_INQUIRY: _compile(
        r"\b(price|prices|cost|rate|amount|dam|daam|koto|kot[ao]|how much)\b",
        r"দাম|কত|টাকা",
    ),
    ORDER_INTENT: _compile(
        r"(?<!cancel )(?<!cancel my )(?<!cancel the )\border\b(?!\s+cancel)",
        r"\b(buy|purchase|nibo|nebo|kinbo|lagbe)\b",
        r"(?<!don't )(?<!do not )\bwant\b",
        r"অর্ডার(?!\s*(বাদ|বাতিল))|নিব|নেব|কিনব|কিনতে|লাগবে",
        r"চাই(?!\s*না)",
    ),
    INFO_REQUEST: _compile(
        r"\b(details?|info|available|availability|stock|size|colou?r)\b",
        # bare "ache" is also the tail of the "thik ache" confirmation
        r"\b(ache|ase)\s*\?|\bki (ache|ase)\b",
        r"বিস্তারিত|জানতে|আছে\?|কি\?|কী\?|সাইজ",
    ),
    GREETING: _compile(
        r"^\s*(hi|hello|hey|assalamu ?alaikum|salam|bhai|vai|apu|sis)[\s!,.]*$",
        r"^\s*(হাই|হ্যালো|আসসালামু আলাইকুম|সালাম|ভাই|আপু)[\s!,.]*$",
    ),
    CONFIRMATION: _compile(
        r"^\s*(yes|yeah|ok|okay|confirm|confirmed|done|ji|hobe|thik ache)[\s!.]*$",
        r"^\s*(হ্যাঁ|হা|জি|ঠিক আছে|হবে|কনফার্ম)[\s!.]*$",
    ),
    CANCELLATION: _compile(
        r"^\s*(no|nope|cancel|later|na|thak|pore)[\s!.]*$",
        r"\b(cancel|don't want|do not want)\b",
        r"^\s*(না|থাক|পরে)[\s!.]*$",
        r"বাতিল|বাদ দাও|অর্ডার বাদ|চাই না",
    ),
}

POSITIVE_PATTERNS = _compile(
    r"\b(thanks|thank you|great|awesome|good|love|excellent|best|amazing|wonderful|nice|beautiful|perfect|super|fantastic|wow)\b",
    r"ধন্যবাদ|ভালো|সুন্দর|মাশাল্লাহ|দারুণ|চমৎকার|অসাধারণ|বেস্ট|নাইস",
    r"❤️|❤|👍|🔥|💯|💕|😍|🥰|😊|👏|💪|🙌",
)

NEGATIVE_PATTERNS = _compile(
    r"\b(bad|worst|terrible|hate|poor|fraud|fake|scam|cheat|cheater)\b",
    r"\b(fuck|fck|shit|bitch|bastard|idiot|stupid|moron|wtf|stfu)\b",
    r"খারাপ|বাজে|চোর|প্রতারক|ফেক|ধোকা",
    r"😡|👎|😤|💔",
)

# Fraud heuristics: each pattern set carries the score delta it adds.
TEST_ORDER_PATTERNS = _compile(r"\b(test|testing|checking|check)\b", r"পরীক্ষা|চেক")
TEST_ORDER_DELTA = 20

RANDOM_PATTERNS = _compile(r"\b(random|anything|whatever)\b", r"যেকোনো")
RANDOM_DELTA = 15

EARLY_ADDRESS_DELTA = 25
EARLY_ADDRESS_MIN_HISTORY = 2

SHORT_MESSAGE_DELTA = 10
SHORT_MESSAGE_MIN_LENGTH = 3

MALFORMED_PHONE_DELTA = 15

# Local mobile number, optionally prefixed with the country code.
PHONE_PATTERN = re.compile(r"(?:\+?88)?01[3-9]\d{8}")
PHONE_SEPARATORS = re.compile(r"[\s-]")
COUNTRY_PREFIX = re.compile(r"^\+?88")


def any_match(patterns: tuple[re.Pattern, ...], text: str) -> bool:
    return any(pattern.search(text) for pattern in patterns)


def find_phone(text: str) -> str | None:
    """Return the first local mobile number in ``text`` without country prefix."""
    compact = PHONE_SEPARATORS.sub("", text or "")
    match = PHONE_PATTERN.search(compact)
    if not match:
        return None
    return COUNTRY_PREFIX.sub("", match.group(0))
