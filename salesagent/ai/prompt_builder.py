"""Render the instruction text sent to the completion service.

``build_prompt`` is a pure function of its arguments: no clock reads, no
randomness and no database access, so identical inputs always render the
same bytes. Sections are emitted in a fixed order and a section whose input
is missing is skipped entirely.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

from salesagent.fsm import states
from salesagent.schemas.rules import RulesConfig
from salesagent.services import media

CATALOG_PROMPT_LIMIT = 30
REPLY_MAX_SENTENCES = 3

BANGLA = "bangla"
ENGLISH = "english"
MIXED = "mixed"

_LANGUAGE_ALIASES = {
    BANGLA: {"bn", "bangla", "bengali", "বাংলা"},
    ENGLISH: {"en", "english", "ইংরেজি"},
    MIXED: {"mixed", "mix", "banglish"},
}
_TONE_ALIASES = {
    "formal": {"formal", "professional", "সম্মানজনক"},
    "casual": {"casual", "বন্ধুত্বপূর্ণ"},
}

_TONE_DIRECTIVES = {
    "formal": "সম্মানজনক ভঙ্গি, 'আপনি' ব্যবহার করুন",
    "casual": "Casual ভঙ্গি, 'তুমি' ব্যবহার করা যাবে",
    "friendly": "Friendly ভঙ্গি, 'ভাই/আপু' বলে কথা বলুন",
}
_LANGUAGE_DIRECTIVES = {
    BANGLA: "শুধুমাত্র বাংলায় উত্তর দিন, brand name ছাড়া English শব্দ নয়",
    ENGLISH: "Reply ONLY in English",
    MIXED: "Banglish mix: বাংলা + English মিশিয়ে উত্তর দিন",
}

_STATE_INSTRUCTIONS = {
    states.IDLE: "Customer এর প্রশ্নের সরাসরি ও ছোট উত্তর দিন।",
    states.GREETING: "সংক্ষেপে সালাম দিন এবং জিজ্ঞেস করুন কোন প্রোডাক্ট লাগবে।",
    states.PRODUCT_INQUIRY: "প্রোডাক্ট তালিকার সঠিক দাম ও তথ্য দিন, তারপর জিজ্ঞেস করুন অর্ডার করবেন কিনা।",
    states.COLLECTING_NAME: "অর্ডারের জন্য Customer এর পুরো নাম জিজ্ঞেস করুন।",
    states.COLLECTING_PHONE: "Customer এর ১১ ডিজিটের মোবাইল নম্বর (01XXXXXXXXX) চান। নম্বর ছাড়া আর কিছু চাইবেন না।",
    states.COLLECTING_ADDRESS: "ডেলিভারির জন্য পূর্ণ ঠিকানা (এলাকা, থানা, জেলা) চান।",
    states.ORDER_CONFIRMATION: "নাম, ফোন, ঠিকানা ও প্রোডাক্ট সংক্ষেপে দেখিয়ে Customer কে confirm করতে বলুন।",
    states.COMPLETED: "অর্ডার নেওয়া হয়েছে। ধন্যবাদ দিন এবং জানান শীঘ্রই যোগাযোগ করা হবে।",
}
_ORDERS_DISABLED_INSTRUCTION = (
    "এখন অর্ডার নেওয়া হচ্ছে না। নাম, ফোন বা ঠিকানা চাইবেন না; "
    "Customer চাইলে বলুন \"ভাই এখন order নেওয়া হচ্ছে না, পরে জানাবেন\"।"
)

_MISSING_PRODUCT_INSTRUCTION = "কোন প্রোডাক্টটি নিতে চান তা এখনো জানা নেই; তালিকা থেকে প্রোডাক্টটি জিজ্ঞেস করুন।"

_MEDIA_INSTRUCTIONS = {
    media.IMAGE: "Customer একটি ছবি পাঠিয়েছে। ছবির প্রোডাক্ট তালিকায় থাকলে সেই তথ্য দিন।",
    media.AUDIO: "Customer voice message পাঠিয়েছে। বিনয়ের সাথে লিখে পাঠাতে বলুন।",
    media.STICKER: "Customer sticker পাঠিয়েছে। তার অনুভূতি বুঝে ছোট করে উত্তর দিন।",
    media.EMOJI: "Customer emoji পাঠিয়েছে। তার অনুভূতি বুঝে ছোট করে উত্তর দিন।",
}


@dataclass(frozen=True)
class ConversationSnapshot:
    state: str = states.IDLE
    collected_name: Optional[str] = None
    collected_phone: Optional[str] = None
    collected_address: Optional[str] = None
    is_comment: bool = False
    message_kind: str = media.TEXT
    ask_for_clearer_media: bool = False
    customer_summary: Optional[str] = None
    order_taking_enabled: bool = True


@dataclass(frozen=True)
class ResolvedPost:
    post_id: str
    text: Optional[str] = None
    detected_product_name: Optional[str] = None


def format_price(price: Any) -> str:
    """Render a catalog price as stored, dropping a zero fractional part."""
    if price is None:
        return ""
    try:
        value = Decimal(str(price))
    except InvalidOperation:
        return str(price)
    if value == value.to_integral_value():
        return str(value.quantize(Decimal(1)))
    return f"{value:.2f}"


def stock_status(stock_quantity: Optional[int]) -> str:
    if stock_quantity is None:
        return "স্টক তথ্য নেই"
    if stock_quantity <= 0:
        return "স্টক নেই (out of stock)"
    return f"স্টকে আছে ({stock_quantity} পিস)"


def normalize_language(value: Optional[str]) -> str:
    normalized = (value or "").strip().lower()
    for language, aliases in _LANGUAGE_ALIASES.items():
        if normalized in aliases:
            return language
    return BANGLA


def normalize_tone(value: Optional[str]) -> str:
    normalized = (value or "").strip().lower()
    for tone, aliases in _TONE_ALIASES.items():
        if normalized in aliases:
            return tone
    return "friendly"


def _role_section(language: str) -> str:
    if language == ENGLISH:
        return "You are a sales assistant for a Bangladeshi business, chatting with customers on its Facebook Page."
    return "আপনি একজন বাংলাদেশী ব্যবসার সহায়ক AI। আপনি Facebook Page এ Customer দের সাথে কথা বলছেন।"


def _business_section(rules: RulesConfig) -> str:
    description = (rules.business_description or "").strip() or "ব্যবসার বিবরণ সেট করা হয়নি"
    return f"## ব্যবসার তথ্য:\n{description}"


def _catalog_section(rules: RulesConfig, catalog: Sequence[Any]) -> str:
    summary = (rules.products_summary or "").strip()
    if not summary and catalog:
        summary = "\n".join(
            f"- {item.name}: ৳{format_price(item.price)}" for item in list(catalog)[:CATALOG_PROMPT_LIMIT]
        )
    if not summary:
        return (
            "## প্রোডাক্ট তালিকা:\n"
            "কোনো প্রোডাক্ট যুক্ত করা হয়নি। কোনো প্রোডাক্টের নাম বা দাম বলবেন না, "
            "বলুন প্রোডাক্ট লিস্ট এখনো আপডেট হয়নি।"
        )
    return f"## প্রোডাক্ট তালিকা:\n{summary}\nশুধু এই তালিকার প্রোডাক্ট ও দাম বলুন।"


def _product_section(product: Any) -> str:
    lines = [
        "## বর্তমান আলোচনার প্রোডাক্ট:",
        f"- নাম: {product.name}",
        f"- দাম: ৳{format_price(product.price)}",
        f"- স্টক: {stock_status(getattr(product, 'stock_quantity', None))}",
    ]
    description = (getattr(product, "description", None) or "").strip()
    if description:
        lines.append(f"- বিবরণ: {description}")
    lines.append("দাম ও স্টক ঠিক উপরের মতো বলুন, নিজে থেকে পরিবর্তন করবেন না।")
    return "\n".join(lines)


def _post_section(post: ResolvedPost) -> str:
    lines = ["## যে পোস্টে কমেন্ট এসেছে:", f"- Post ID: {post.post_id}"]
    if post.detected_product_name:
        lines.append(f"- পোস্টের প্রোডাক্ট: {post.detected_product_name}")
    if post.text:
        lines.append(f"- পোস্টের লেখা: {post.text.strip()}")
    return "\n".join(lines)


def _style_section(rules: RulesConfig) -> str:
    tone = normalize_tone(rules.preferred_tone)
    language = normalize_language(rules.detected_language)
    return (
        f"## কথা বলার ধরন: {_TONE_DIRECTIVES[tone]}\n"
        f"## ভাষা (STRICTLY FOLLOW): {_LANGUAGE_DIRECTIVES[language]}"
    )


def _safety_section(rules: RulesConfig) -> str | None:
    safety = rules.safety
    bullets = []
    if safety.never_hallucinate:
        bullets.append("- মনগড়া তথ্য দেবেন না, না জানলে বলুন \"check করে বলছি\"")
    if safety.ask_clarification_if_unsure:
        bullets.append("- অনিশ্চিত হলে Customer কে জিজ্ঞেস করুন")
    if safety.ask_for_clearer_photo_if_needed:
        bullets.append("- ছবি অস্পষ্ট হলে আরেকটি পরিষ্কার ছবি চান")
    if safety.confirm_before_order:
        bullets.append("- অর্ডার নেওয়ার আগে সব তথ্য Customer কে দিয়ে confirm করান")
    if not bullets:
        return None
    return "## নিরাপত্তা নিয়ম:\n" + "\n".join(bullets)


def _selling_section(rules: RulesConfig) -> str:
    selling = rules.selling
    bullets = []
    if selling.use_price_from_product:
        bullets.append("- সবসময় প্রোডাক্ট তালিকার দাম বলুন")
    if selling.allow_discount:
        bullets.append(f"- সর্বোচ্চ {format_price(selling.max_discount_percent)}% ছাড় দেওয়া যাবে, এর বেশি কোনোভাবেই না")
    else:
        bullets.append("- কোনো discount/ছাড় দেওয়া যাবে না (no discounts); দাম fixed")
    if selling.allow_low_profit_sale:
        bullets.append("- Customer জোর করলে কম লাভে বিক্রি করা যাবে")
    else:
        bullets.append("- তালিকার দামের নিচে বিক্রি করবেন না")
    return "## বিক্রির নিয়ম:\n" + "\n".join(bullets)


def _payment_section(rules: RulesConfig) -> str:
    payment = rules.payment
    bullets = []
    if payment.cod_available:
        bullets.append("- ক্যাশ অন ডেলিভারি (COD) চালু আছে")
        if payment.advance_required_above > 0:
            bullets.append(
                f"- ৳{format_price(payment.advance_required_above)} এর বেশি অর্ডারে "
                f"{format_price(payment.advance_percentage)}% advance লাগবে"
            )
    else:
        bullets.append("- COD বন্ধ: আগে bKash/Nagad/Bank এ payment করতে হবে")
    if rules.support_whatsapp_number:
        bullets.append(f"- জরুরি প্রয়োজনে WhatsApp: {rules.support_whatsapp_number}")
    return "## পেমেন্ট:\n" + "\n".join(bullets)


def _snapshot_section(snapshot: ConversationSnapshot) -> str:
    lines = ["## বর্তমান অবস্থা:", f"- State: {snapshot.state}"]
    collected = (
        ("নাম", snapshot.collected_name),
        ("ফোন", snapshot.collected_phone),
        ("ঠিকানা", snapshot.collected_address),
    )
    for label, value in collected:
        if value:
            lines.append(f"- {label}: {value}")
    if snapshot.customer_summary:
        lines.append(f"- Customer সম্পর্কে: {snapshot.customer_summary}")
    return "\n".join(lines)


def _instruction_section(snapshot: ConversationSnapshot, has_product: bool) -> str:
    if not snapshot.order_taking_enabled:
        instruction = _ORDERS_DISABLED_INSTRUCTION
    else:
        instruction = _STATE_INSTRUCTIONS.get(snapshot.state, _STATE_INSTRUCTIONS[states.IDLE])
    lines = ["## এখন যা করবেন:", instruction]
    if snapshot.order_taking_enabled and snapshot.state in states.ORDER_FLOW_STATES and not has_product:
        lines.append(_MISSING_PRODUCT_INSTRUCTION)
    media_instruction = _MEDIA_INSTRUCTIONS.get(snapshot.message_kind)
    if media_instruction:
        lines.append(media_instruction)
    if snapshot.message_kind == media.IMAGE and snapshot.ask_for_clearer_media:
        lines.append(f"{media.CLEARER_IMAGE_SENTINEL} থাকলে আরেকটি পরিষ্কার ছবি চাইতে পারেন।")
    if snapshot.is_comment:
        lines.append("এটি একটি public comment; ব্যক্তিগত তথ্য comment এ চাইবেন না।")
    return "\n".join(lines)


def _closing_section() -> str:
    return (
        "## উত্তরের ধরন:\n"
        f"- সর্বোচ্চ {REPLY_MAX_SENTENCES}টি ছোট বাক্যে উত্তর দিন\n"
        "- emoji খুব কম ব্যবহার করুন\n"
        "- প্রতিটি message এ সালাম দেবেন না, robotic কথা বলবেন না\n"
        "- কোনো চাপ বা ভয় দেখিয়ে বিক্রি করবেন না"
    )


def build_prompt(
    rules: RulesConfig,
    snapshot: ConversationSnapshot,
    product: Any = None,
    post: ResolvedPost | None = None,
    *,
    catalog: Sequence[Any] = (),
) -> str:
    language = normalize_language(rules.detected_language)
    sections: list[str | None] = [
        _role_section(language),
        _business_section(rules),
        _catalog_section(rules, catalog),
        _product_section(product) if product is not None else None,
        _post_section(post) if post is not None and snapshot.is_comment else None,
        _style_section(rules),
        _safety_section(rules),
        _selling_section(rules),
        _payment_section(rules),
        _snapshot_section(snapshot),
        _instruction_section(snapshot, product is not None),
        _closing_section(),
    ]
    return "\n\n".join(section for section in sections if section)
