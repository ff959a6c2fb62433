from types import SimpleNamespace

import pytest

from salesagent.services import comments, keyword_rules as rules, media
from salesagent.services.intent import classify_intent


def _analyze(text, kind="text", replies_to_page=False, product=None):
    message = media.normalize_message(kind, text)
    return comments.analyze_comment(
        message,
        classify_intent(message.text),
        product=product,
        replies_to_page=replies_to_page,
    )


@pytest.mark.parametrize(
    ("text", "kind", "replies_to_page", "comment_type", "reply", "inbox"),
    [
        ("❤️", "sticker", False, comments.STICKER, "💕", False),
        ("👍", "sticker", False, comments.STICKER, "😊", False),
        ("😡", "sticker", False, comments.STICKER, None, False),
        ("🔥🔥", "text", False, comments.STICKER, "😊", False),
        ("", "audio", False, comments.AUDIO, "🎤 ভয়েস মেসেজ পেয়েছি!", True),
        ("এটা কত?", "image", False, comments.PHOTO, "ছবিটা দেখলাম! 👀 ইনবক্সে বিস্তারিত পাঠাচ্ছি 📩", True),
        ("", "image", False, comments.PHOTO, "ধন্যবাদ ছবিটা পাঠানোর জন্য! 📷 কী জানতে চাইছেন বলুন? 🙂", False),
        ("order korbo", "text", False, rules.ORDER_INTENT, "ভাই inbox এ order নিচ্ছি", True),
        ("Is it available?", "text", False, comments.QUESTION, "inbox দেখেন ভাই", True),
        ("awesome collection", "text", False, comments.POSITIVE_FEEDBACK, "ধন্যবাদ ভাই", False),
        ("thanks", "text", False, comments.POSITIVE_FEEDBACK, "আপনাকেও ভাই", False),
        ("inbox e message dilam", "text", True, comments.GOING_TO_INBOX, "ওকে ভাই, inbox এ কথা বলি", False),
        ("ok", "text", True, comments.ACKNOWLEDGMENT, "জি ভাই", False),
        ("delivery kobe hobe?", "text", False, comments.QUESTION, "inbox দেখেন ভাই", True),
        ("hello", "text", False, rules.GREETING, "জি ভাই বলুন", False),
        ("hmm", "text", False, comments.UNCLEAR, "জি ভাই বলুন", False),
        ("ami ekta nibo", "text", False, rules.ORDER_INTENT, "ভাই inbox এ order নিচ্ছি", True),
        ("Dhaka theke pathano jay naki janaben", "text", False, comments.GENERAL, "ভাই inbox দেখেন", True),
    ],
)
def test_analyze_comment(text, kind, replies_to_page, comment_type, reply, inbox):
    analysis = _analyze(text, kind, replies_to_page)

    assert analysis.comment_type == comment_type
    assert analysis.comment_reply == reply
    assert analysis.needs_inbox is inbox


def test_price_comment_quotes_the_product_price():
    product = SimpleNamespace(name="Cotton Panjabi", price=1200)

    analysis = _analyze("dam koto?", product=product)

    assert analysis.comment_type == rules.PRICE_INQUIRY
    assert analysis.comment_reply == "৳1200 ভাই, inbox দেখেন"
    assert analysis.needs_inbox is True


def test_acknowledgement_outside_a_page_thread_is_not_special():
    analysis = _analyze("ok")

    assert analysis.comment_type == comments.UNCLEAR
    assert analysis.needs_inbox is False


@pytest.mark.parametrize("intent", sorted(comments.INBOX_INTENTS))
def test_inbox_intents_always_hand_off(intent):
    assert comments.needs_inbox(intent)
    assert comments.public_acknowledgement(intent)
