"""Reusable data for the backend test scenarios."""
from decimal import Decimal

PAGE_ID = "page-1"
OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"

HAPPY_PATH_RULES = {
    "page_id": PAGE_ID,
    "user_id": OWNER_ID,
    "business_description": "Dhaka based clothing shop",
    "products_summary": None,
    "preferred_tone": "friendly",
    "detected_language": "bangla",
    "support_whatsapp_number": "01811111111",
    "automation_settings": {
        "autoCommentReply": True,
        "autoInboxReply": True,
        "orderTaking": True,
        "mediaUnderstanding": True,
    },
    "selling_rules": {
        "usePriceFromProduct": True,
        "allowDiscount": False,
        "maxDiscountPercent": 10,
        "allowLowProfitSale": False,
    },
    "safety_rules": {
        "neverHallucinate": True,
        "askClarificationIfUnsure": True,
        "askForClearerPhotoIfNeeded": True,
        "confirmBeforeOrder": True,
    },
    "payment_rules": {
        "codAvailable": True,
        "advanceRequiredAbove": 5000,
        "advancePercentage": 20,
    },
}

CATALOG = [
    {"user_id": OWNER_ID, "name": "Cotton Panjabi", "price": Decimal("1200.00"), "stock_quantity": 5, "is_active": True},
    {"user_id": OWNER_ID, "name": "Denim Jacket", "price": Decimal("2450.50"), "stock_quantity": 0, "is_active": True},
    {"user_id": OWNER_ID, "name": "Silk Saree", "price": Decimal("5400.00"), "stock_quantity": 2, "is_active": False},
    {"user_id": OTHER_OWNER_ID, "name": "Leather Wallet", "price": Decimal("800.00"), "stock_quantity": 9, "is_active": True},
]

INBOX_EVENT = {
    "pageId": PAGE_ID,
    "senderId": "customer-1",
    "senderName": "Rahim",
    "messageText": "",
    "messageType": "text",
    "isComment": False,
    "userId": OWNER_ID,
}

ORDER_DIALOGUE = [
    ("Cotton Panjabi er dam koto?", "product_inquiry"),
    ("order korbo", "collecting_name"),
    ("Rahim Uddin", "collecting_phone"),
    ("call me at 01712345678", "collecting_address"),
    ("House 12, Road 5, Dhanmondi, Dhaka", "order_confirmation"),
    ("yes", "idle"),
]
