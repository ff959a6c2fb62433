from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable

TEXT = "text"
IMAGE = "image"
AUDIO = "audio"
STICKER = "sticker"
EMOJI = "emoji"

MESSAGE_TYPES = (TEXT, IMAGE, AUDIO, STICKER, EMOJI)

IMAGE_SENTINEL = "[IMAGE_RECEIVED]"
CLEARER_IMAGE_SENTINEL = "[ASK_FOR_CLEARER_IMAGE]"
AUDIO_SENTINEL = "[AUDIO_RECEIVED: ASK_CUSTOMER_TO_TYPE]"
STICKER_SENTINEL = "[STICKER_RECEIVED: {meaning}]"

_STICKER_MEANINGS: tuple[tuple[str, re.Pattern], ...] = (
    ("approval", re.compile(r"👍|💪|👏|🙌|✌️|🤝|💯")),
    ("love", re.compile(r"❤️|❤|💕|💖|💗|💓|💞|💝|🥰|😍|😘")),
    ("laughter", re.compile(r"😂|🤣|😆|😄|😁|😀|😃|😅")),
    ("surprise", re.compile(r"😮|😲|🤯|😱|🔥|⚡|💥")),
    ("sadness", re.compile(r"😢|😭|😔|😞|😟|🙁")),
    ("anger", re.compile(r"😡|😤|👎|💔")),
    ("question", re.compile(r"🤔|🤷|❓|⁉️")),
)


@dataclass(frozen=True)
class NormalizedMessage:
    """Plain-text view of one inbound message, ready for the classifiers."""

    kind: str
    text: str
    raw_text: str
    is_textual: bool
    image_urls: list[str] = field(default_factory=list)
    meaning: str | None = None


def sticker_meaning(text: str) -> str:
    for meaning, pattern in _STICKER_MEANINGS:
        if pattern.search(text or ""):
            return meaning
    return "general_reaction"


def _attachment_urls(attachments: list[dict[str, Any]] | None) -> list[str]:
    urls: list[str] = []
    for attachment in attachments or []:
        if not isinstance(attachment, dict):
            continue
        payload = attachment.get("payload") or {}
        url = payload.get("url") or attachment.get("url")
        if isinstance(url, str) and url.startswith("http"):
            urls.append(url)
    return urls


def _normalize_text(raw: str, _attachments, _ask_for_clearer_media: bool) -> NormalizedMessage:
    return NormalizedMessage(kind=TEXT, text=raw, raw_text=raw, is_textual=bool(raw))


def _normalize_image(raw: str, attachments, ask_for_clearer_media: bool) -> NormalizedMessage:
    parts = [IMAGE_SENTINEL]
    if ask_for_clearer_media:
        parts.append(CLEARER_IMAGE_SENTINEL)
    if raw:
        parts.append(raw)
    return NormalizedMessage(
        kind=IMAGE,
        text=" ".join(parts),
        raw_text=raw,
        is_textual=False,
        image_urls=_attachment_urls(attachments)[:3],
    )


def _normalize_audio(raw: str, _attachments, _ask_for_clearer_media: bool) -> NormalizedMessage:
    return NormalizedMessage(kind=AUDIO, text=AUDIO_SENTINEL, raw_text=raw, is_textual=False)


def _normalize_sticker(raw: str, _attachments, _ask_for_clearer_media: bool) -> NormalizedMessage:
    meaning = sticker_meaning(raw)
    return NormalizedMessage(
        kind=STICKER,
        text=STICKER_SENTINEL.format(meaning=meaning),
        raw_text=raw,
        is_textual=False,
        meaning=meaning,
    )


def _normalize_emoji(raw: str, attachments, ask_for_clearer_media: bool) -> NormalizedMessage:
    # Emoji keep their characters so the sentiment table can see them.
    meaning = sticker_meaning(raw)
    return NormalizedMessage(kind=EMOJI, text=raw, raw_text=raw, is_textual=False, meaning=meaning)


_NORMALIZERS: dict[str, Callable[..., NormalizedMessage]] = {
    TEXT: _normalize_text,
    IMAGE: _normalize_image,
    AUDIO: _normalize_audio,
    STICKER: _normalize_sticker,
    EMOJI: _normalize_emoji,
}


def normalize_message(
    message_type: str | None,
    message_text: str | None,
    attachments: list[dict[str, Any]] | None = None,
    *,
    ask_for_clearer_media: bool = False,
) -> NormalizedMessage:
    kind = (message_type or TEXT).strip().lower()
    normalizer = _NORMALIZERS.get(kind, _normalize_text)
    return normalizer((message_text or "").strip(), attachments, ask_for_clearer_media)
