"""
Per-message intake pipeline: classify, then dispatch accepted mail.

Every message resolves to exactly one Disposition. Failures of the dispatch
step never escape; they become a temporary reject with a generic reason.
"""

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

import httpx

from mailgate.config import Settings
from mailgate.models.inbound_email import (
    EmailForwardPayload,
    InboundEmailMessage,
    IntakeResponse,
)
from mailgate.services.action_dispatcher import DispatchOutcome, dispatch
from mailgate.services.intake_filter import (
    IntakeRule,
    Reject,
    SilentDrop,
    build_rules,
    classify,
)

logger = logging.getLogger(__name__)

CONFIG_ERROR_REASON = "Internal Configuration Error"
TRANSIENT_ERROR_REASON = "Temporary System Error"


@dataclass(frozen=True)
class Disposition:
    kind: Literal["accept", "drop", "reject"]
    reason: Optional[str] = None
    temporary: bool = False

    def to_response(self) -> IntakeResponse:
        return IntakeResponse(
            disposition=self.kind, reason=self.reason, temporary=self.temporary
        )


ACCEPTED = Disposition("accept")
DROPPED = Disposition("drop")


async def handle(
    message: InboundEmailMessage,
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
    rules: Optional[Sequence[IntakeRule]] = None,
) -> Disposition:
    """Run one inbound message through the filter and, if accepted, the dispatcher."""
    decision = classify(message, rules if rules is not None else build_rules(settings))

    if isinstance(decision, Reject):
        return Disposition("reject", decision.reason)
    if isinstance(decision, SilentDrop):
        return DROPPED

    payload = EmailForwardPayload.from_message(message)
    try:
        outcome = await dispatch(payload, settings, client)
    except Exception:
        logger.exception("Failed to process email (message_id=%s)", message.message_id)
        outcome = DispatchOutcome.TRANSIENT_ERROR

    if outcome is DispatchOutcome.CONFIG_ERROR:
        return Disposition("reject", CONFIG_ERROR_REASON, temporary=True)
    if outcome is DispatchOutcome.TRANSIENT_ERROR:
        return Disposition("reject", TRANSIENT_ERROR_REASON, temporary=True)
    return ACCEPTED
