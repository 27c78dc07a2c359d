"""
Inbound email adapter.

Normalizes the mail relay's webhook body into an InboundEmailMessage.

Relay webhook field assumptions
-------------------------------
The relay posts one JSON object per delivery:

  from      str   envelope sender
  to        str   envelope recipient
  rawSize   int   size of the raw message in bytes
  headers   dict  header name -> value (names in any case)

Only Subject, Message-ID and Auto-Submitted are read from headers. If the
relay's schema changes, only this file needs updating.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from mailgate.models.inbound_email import InboundEmailMessage


class RelayWebhookPayload(BaseModel):
    """Subset of the relay webhook body mailgate cares about."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    sender: str = Field(alias="from")
    recipient: str = Field(alias="to")
    raw_size: int = Field(alias="rawSize", ge=0)
    headers: dict[str, Optional[str]] = {}


def _header(headers: dict[str, Optional[str]], name: str) -> Optional[str]:
    """Case-insensitive header lookup."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def normalize_relay(payload: RelayWebhookPayload) -> InboundEmailMessage:
    headers = payload.headers or {}
    return InboundEmailMessage(
        sender=payload.sender,
        recipient=payload.recipient,
        subject=_header(headers, "subject") or "",
        message_id=_header(headers, "message-id"),
        raw_size=payload.raw_size,
        auto_submitted=_header(headers, "auto-submitted"),
    )
