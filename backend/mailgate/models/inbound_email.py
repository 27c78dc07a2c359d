"""
Inbound email models.

InboundEmailMessage is the envelope/header metadata of one delivery, as
handed over by the mail relay. Only the adapter layer knows the relay's
wire format; the filter and router work exclusively with these models.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class InboundEmailMessage(BaseModel):
    """Read-only metadata for a single inbound delivery."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str = Field(alias="from")
    recipient: str = Field(alias="to")
    subject: str = ""
    message_id: Optional[str] = Field(default=None, alias="messageId")
    raw_size: int = Field(alias="rawSize", ge=0)
    auto_submitted: Optional[str] = Field(default=None, alias="autoSubmittedHeader")


class EmailForwardPayload(BaseModel):
    """The subset of an accepted message that is sent to the action processor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sender: str = Field(alias="from")
    recipient: str = Field(alias="to")
    subject: str
    message_id: Optional[str] = Field(default=None, alias="messageId")

    @classmethod
    def from_message(cls, message: InboundEmailMessage) -> "EmailForwardPayload":
        return cls(
            sender=message.sender,
            recipient=message.recipient,
            subject=message.subject,
            message_id=message.message_id,
        )

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True)


class IntakeResponse(BaseModel):
    """Webhook response telling the relay what to do with the message."""

    disposition: Literal["accept", "drop", "reject"]
    reason: Optional[str] = None
    temporary: bool = False
