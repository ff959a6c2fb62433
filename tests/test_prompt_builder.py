from decimal import Decimal
from types import SimpleNamespace

import pytest

from salesagent.ai.prompt_builder import (
    ConversationSnapshot,
    ResolvedPost,
    build_prompt,
    format_price,
    normalize_language,
    stock_status,
)
from salesagent.fsm import states
from salesagent.schemas.rules import RulesConfig
from salesagent.services import media
from tests.fixtures_data import HAPPY_PATH_RULES


def _rules(**overrides):
    data = {
        "page_id": HAPPY_PATH_RULES["page_id"],
        "user_id": HAPPY_PATH_RULES["user_id"],
        "business_description": HAPPY_PATH_RULES["business_description"],
        "preferred_tone": "friendly",
        "detected_language": "bangla",
        "automation": HAPPY_PATH_RULES["automation_settings"],
        "selling": HAPPY_PATH_RULES["selling_rules"],
        "safety": HAPPY_PATH_RULES["safety_rules"],
        "payment": HAPPY_PATH_RULES["payment_rules"],
    }
    data.update(overrides)
    return RulesConfig(**data)


PANJABI = SimpleNamespace(name="Cotton Panjabi", price=Decimal("1200.00"), stock_quantity=5, description=None)
POST = ResolvedPost(post_id="post-9", text="Eid collection is live", detected_product_name="Cotton Panjabi")


def test_build_prompt_is_deterministic():
    snapshot = ConversationSnapshot(state=states.PRODUCT_INQUIRY)

    first = build_prompt(_rules(), snapshot, PANJABI, catalog=[PANJABI])
    second = build_prompt(_rules(), snapshot, PANJABI, catalog=[PANJABI])

    assert first == second


def test_sections_follow_fixed_order():
    snapshot = ConversationSnapshot(state=states.PRODUCT_INQUIRY, is_comment=True)

    prompt = build_prompt(_rules(), snapshot, PANJABI, POST, catalog=[PANJABI])

    headings = [
        "## ব্যবসার তথ্য:",
        "## প্রোডাক্ট তালিকা:",
        "## বর্তমান আলোচনার প্রোডাক্ট:",
        "## যে পোস্টে কমেন্ট এসেছে:",
        "## কথা বলার ধরন:",
        "## নিরাপত্তা নিয়ম:",
        "## বিক্রির নিয়ম:",
        "## পেমেন্ট:",
        "## বর্তমান অবস্থা:",
        "## এখন যা করবেন:",
        "## উত্তরের ধরন:",
    ]
    positions = [prompt.index(heading) for heading in headings]
    assert positions == sorted(positions)


def test_product_price_and_stock_rendered_verbatim():
    prompt = build_prompt(_rules(), ConversationSnapshot(), PANJABI)

    assert "- দাম: ৳1200\n" in prompt
    assert "স্টকে আছে (5 পিস)" in prompt


def test_out_of_stock_product_is_flagged():
    jacket = SimpleNamespace(name="Denim Jacket", price=Decimal("2450.50"), stock_quantity=0)

    prompt = build_prompt(_rules(), ConversationSnapshot(), jacket)

    assert "৳2450.50" in prompt
    assert "স্টক নেই" in prompt


def test_post_block_only_for_comments():
    inbox = build_prompt(_rules(), ConversationSnapshot(is_comment=False), PANJABI, POST)
    comment = build_prompt(_rules(), ConversationSnapshot(is_comment=True), PANJABI, POST)

    assert "post-9" not in inbox
    assert "- Post ID: post-9" in comment
    assert "Eid collection is live" in comment


def test_discount_ceiling_when_allowed():
    rules = _rules(selling={"allowDiscount": True, "maxDiscountPercent": 15})

    prompt = build_prompt(rules, ConversationSnapshot())

    assert "সর্বোচ্চ 15% ছাড়" in prompt
    assert "no discounts" not in prompt


def test_no_discount_statement_when_disallowed():
    prompt = build_prompt(_rules(), ConversationSnapshot())

    assert "no discounts" in prompt


def test_safety_section_absent_when_every_flag_off():
    rules = _rules(
        safety={
            "neverHallucinate": False,
            "askClarificationIfUnsure": False,
            "askForClearerPhotoIfNeeded": False,
            "confirmBeforeOrder": False,
        }
    )

    prompt = build_prompt(rules, ConversationSnapshot())

    assert "## নিরাপত্তা নিয়ম:" not in prompt


def test_collecting_phone_instruction_asks_for_mobile_number():
    snapshot = ConversationSnapshot(state=states.COLLECTING_PHONE, collected_name="Rahim Uddin")

    prompt = build_prompt(_rules(), snapshot, PANJABI)

    instruction = prompt.split("## এখন যা করবেন:", 1)[1]
    assert "মোবাইল নম্বর" in instruction
    assert "- নাম: Rahim Uddin" in prompt


def test_order_flow_without_product_asks_which_product():
    snapshot = ConversationSnapshot(state=states.ORDER_CONFIRMATION)

    prompt = build_prompt(_rules(), snapshot)

    assert "কোন প্রোডাক্টটি নিতে চান" in prompt


def test_orders_disabled_instruction_replaces_collection():
    snapshot = ConversationSnapshot(state=states.IDLE, order_taking_enabled=False)

    prompt = build_prompt(_rules(), snapshot)

    assert "এখন অর্ডার নেওয়া হচ্ছে না" in prompt


def test_image_instruction_mentions_clearer_photo():
    snapshot = ConversationSnapshot(message_kind=media.IMAGE, ask_for_clearer_media=True)

    prompt = build_prompt(_rules(), snapshot)

    assert "ছবি পাঠিয়েছে" in prompt
    assert media.CLEARER_IMAGE_SENTINEL in prompt


def test_empty_catalog_forbids_inventing_products():
    prompt = build_prompt(_rules(), ConversationSnapshot(), catalog=[])

    assert "কোনো প্রোডাক্ট যুক্ত করা হয়নি" in prompt


def test_catalog_lines_use_stored_prices():
    prompt = build_prompt(_rules(), ConversationSnapshot(), catalog=[PANJABI])

    assert "- Cotton Panjabi: ৳1200" in prompt


def test_english_language_switches_role_and_directive():
    prompt = build_prompt(_rules(detected_language="en"), ConversationSnapshot())

    assert prompt.startswith("You are a sales assistant")
    assert "Reply ONLY in English" in prompt


@pytest.mark.parametrize(
    "price, expected",
    [
        (Decimal("1200.00"), "1200"),
        (Decimal("2450.50"), "2450.50"),
        (99.9, "99.90"),
        (500, "500"),
        (None, ""),
    ],
)
def test_format_price(price, expected):
    assert format_price(price) == expected


def test_stock_status_unknown():
    assert stock_status(None) == "স্টক তথ্য নেই"


def test_unknown_language_defaults_to_bangla():
    assert normalize_language("klingon") == "bangla"
