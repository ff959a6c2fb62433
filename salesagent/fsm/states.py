IDLE = "idle"
GREETING = "greeting"
PRODUCT_INQUIRY = "product_inquiry"
COLLECTING_NAME = "collecting_name"
COLLECTING_PHONE = "collecting_phone"
COLLECTING_ADDRESS = "collecting_address"
ORDER_CONFIRMATION = "order_confirmation"
COMPLETED = "completed"

ALL_STATES = (
    IDLE,
    GREETING,
    PRODUCT_INQUIRY,
    COLLECTING_NAME,
    COLLECTING_PHONE,
    COLLECTING_ADDRESS,
    ORDER_CONFIRMATION,
    COMPLETED,
)

COLLECTION_STATES = frozenset({COLLECTING_NAME, COLLECTING_PHONE, COLLECTING_ADDRESS})
ORDER_FLOW_STATES = COLLECTION_STATES | {ORDER_CONFIRMATION}
