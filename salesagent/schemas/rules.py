from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class AutomationSettings(_CamelModel):
    # toggles are opt-in: anything but an explicit true is off
    auto_comment_reply: bool = Field(False, alias="autoCommentReply")
    auto_inbox_reply: bool = Field(False, alias="autoInboxReply")
    order_taking: bool = Field(False, alias="orderTaking")
    media_understanding: bool = Field(False, alias="mediaUnderstanding")


class SellingRules(_CamelModel):
    use_price_from_product: bool = Field(True, alias="usePriceFromProduct")
    allow_discount: bool = Field(False, alias="allowDiscount")
    max_discount_percent: float = Field(10, alias="maxDiscountPercent", ge=0, le=100)
    allow_low_profit_sale: bool = Field(False, alias="allowLowProfitSale")


class SafetyRules(_CamelModel):
    never_hallucinate: bool = Field(True, alias="neverHallucinate")
    ask_clarification_if_unsure: bool = Field(True, alias="askClarificationIfUnsure")
    ask_for_clearer_photo_if_needed: bool = Field(False, alias="askForClearerPhotoIfNeeded")
    confirm_before_order: bool = Field(True, alias="confirmBeforeOrder")


class PaymentRules(_CamelModel):
    cod_available: bool = Field(True, alias="codAvailable")
    advance_required_above: float = Field(0, alias="advanceRequiredAbove", ge=0)
    advance_percentage: float = Field(50, alias="advancePercentage", ge=0, le=100)


class RulesConfig(_CamelModel):
    """Typed view of one page's PageRules row."""

    page_id: str
    user_id: str
    business_description: Optional[str] = None
    products_summary: Optional[str] = None
    preferred_tone: Optional[str] = None
    detected_language: Optional[str] = None
    support_whatsapp_number: Optional[str] = None
    automation: AutomationSettings = Field(default_factory=AutomationSettings)
    selling: SellingRules = Field(default_factory=SellingRules)
    safety: SafetyRules = Field(default_factory=SafetyRules)
    payment: PaymentRules = Field(default_factory=PaymentRules)

    @field_validator("automation", "selling", "safety", "payment", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return value if value is not None else {}

    @classmethod
    def from_row(cls, row) -> "RulesConfig":
        return cls(
            page_id=row.page_id,
            user_id=row.user_id,
            business_description=row.business_description,
            products_summary=row.products_summary,
            preferred_tone=row.preferred_tone,
            detected_language=row.detected_language,
            support_whatsapp_number=row.support_whatsapp_number,
            automation=row.automation_settings,
            selling=row.selling_rules,
            safety=row.safety_rules,
            payment=row.payment_rules,
        )

    def channel_enabled(self, is_comment: bool) -> bool:
        if is_comment:
            return self.automation.auto_comment_reply
        return self.automation.auto_inbox_reply
