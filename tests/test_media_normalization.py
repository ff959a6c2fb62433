from salesagent.services import media
from salesagent.services.intent import classify_intent
from salesagent.services.keyword_rules import GENERAL

IMAGE_ATTACHMENTS = [
    {"type": "image", "payload": {"url": "https://cdn.example.com/1.jpg"}},
    {"type": "image", "url": "https://cdn.example.com/2.jpg"},
    {"type": "image", "payload": {"url": "ftp://bad/3.jpg"}},
    {"type": "image", "payload": {"url": "https://cdn.example.com/4.jpg"}},
    {"type": "image", "payload": {"url": "https://cdn.example.com/5.jpg"}},
]


def test_text_passes_through():
    message = media.normalize_message("text", "  dam koto?  ")

    assert message.kind == media.TEXT
    assert message.text == "dam koto?"
    assert message.is_textual is True


def test_image_becomes_sentinel_and_keeps_caption():
    message = media.normalize_message("image", "eta ache?", IMAGE_ATTACHMENTS)

    assert message.text == f"{media.IMAGE_SENTINEL} eta ache?"
    assert message.is_textual is False
    assert message.image_urls == [
        "https://cdn.example.com/1.jpg",
        "https://cdn.example.com/2.jpg",
        "https://cdn.example.com/4.jpg",
    ]


def test_image_asks_for_clearer_media_when_enabled():
    message = media.normalize_message("image", "", IMAGE_ATTACHMENTS, ask_for_clearer_media=True)

    assert message.text == f"{media.IMAGE_SENTINEL} {media.CLEARER_IMAGE_SENTINEL}"


def test_audio_asks_customer_to_type():
    message = media.normalize_message("audio", "")

    assert message.text == media.AUDIO_SENTINEL
    assert message.is_textual is False


def test_sticker_carries_detected_meaning():
    message = media.normalize_message("sticker", "👍")

    assert message.meaning == "approval"
    assert message.text == "[STICKER_RECEIVED: approval]"


def test_emoji_keeps_raw_characters():
    message = media.normalize_message("emoji", "😍")

    assert message.text == "😍"
    assert message.meaning == "love"
    assert message.is_textual is False


def test_unknown_type_is_treated_as_text():
    message = media.normalize_message("video", "hello")

    assert message.kind == media.TEXT


def test_sentinels_do_not_trigger_intents():
    for sentinel in (media.IMAGE_SENTINEL, media.CLEARER_IMAGE_SENTINEL, media.AUDIO_SENTINEL):
        assert classify_intent(sentinel) == GENERAL
