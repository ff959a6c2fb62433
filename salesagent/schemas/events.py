from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class InboundEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_id: str = Field(..., alias="pageId", min_length=1)
    sender_id: str = Field(..., alias="senderId", min_length=1)
    sender_name: Optional[str] = Field(None, alias="senderName")
    message_text: str = Field("", alias="messageText")
    message_type: Literal["text", "image", "audio", "sticker", "emoji"] = Field("text", alias="messageType")
    attachments: list[dict[str, Any]] = Field(default_factory=list)
    is_comment: bool = Field(False, alias="isComment")
    comment_id: Optional[str] = Field(None, alias="commentId")
    parent_comment_id: Optional[str] = Field(None, alias="parentCommentId")
    is_reply_to_page_comment: bool = Field(False, alias="isReplyToPageComment")
    post_id: Optional[str] = Field(None, alias="postId")
    post_content: Optional[str] = Field(None, alias="postContent")
    user_id: Optional[str] = Field(None, alias="userId")
    event_id: Optional[str] = Field(None, alias="eventId")

    def idempotency_key(self) -> str | None:
        if self.event_id:
            return f"event:{self.event_id}"
        if self.is_comment and self.comment_id:
            return f"comment:{self.comment_id}"
        return None


class ProductContext(BaseModel):
    name: str
    price: float


class AgentReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    intent: str
    sentiment: str
    conversation_state: str = Field(..., alias="conversationState")
    should_react: bool = Field(False, alias="shouldReact")
    reaction_type: Literal["LIKE", "LOVE"] = Field("LIKE", alias="reactionType")
    fake_order_score: int = Field(0, alias="fakeOrderScore", ge=0, le=100)
    product_context: Optional[ProductContext] = Field(None, alias="productContext")
    comment_reply: Optional[str] = Field(None, alias="commentReply")
    should_send_inbox: Optional[bool] = Field(None, alias="shouldSendInbox")
    inbox_message: Optional[str] = Field(None, alias="inboxMessage")
    order_id: Optional[int] = Field(None, alias="orderId")
    invoice_number: Optional[str] = Field(None, alias="invoiceNumber")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
