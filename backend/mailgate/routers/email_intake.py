"""
Email intake router.

The mail relay calls this webhook once per inbound delivery and applies the
returned disposition:

  accept  message was forwarded to the action processor
  drop    discard silently (auto-replies, bounces); no reply to the sender
  reject  protocol-level reject with `reason`; `temporary` asks the relay
          to signal a temporary failure so the sender may retry

Environment variables
---------------------
INBOUND_WEBHOOK_SECRET    Shared secret checked in the X-Webhook-Secret header.

Endpoints:
  POST /inbound  relay webhook (auth: X-Webhook-Secret)
"""

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from mailgate.config import Settings
from mailgate.models.inbound_email import IntakeResponse
from mailgate.services import email_router
from mailgate.services.inbound_email_adapter import RelayWebhookPayload, normalize_relay

logger = logging.getLogger(__name__)

router = APIRouter()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# ---------------------------------------------------------------------------
# Webhook authentication dependency
# ---------------------------------------------------------------------------

def _verify_webhook_secret(
    x_webhook_secret: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Verify that the webhook request carries the relay's shared secret.

    Raises 401 if the secret is missing, unconfigured, or does not match.
    """
    expected = settings.inbound_webhook_secret
    if not expected:
        logger.warning(
            "No webhook secret configured (INBOUND_WEBHOOK_SECRET); "
            "all inbound webhook requests will be rejected"
        )
        raise HTTPException(status_code=401, detail="Webhook secret not configured")

    if not x_webhook_secret or not hmac.compare_digest(
        x_webhook_secret.encode(), expected.encode()
    ):
        raise HTTPException(status_code=401, detail="Invalid webhook secret")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("/inbound", response_model=IntakeResponse)
async def receive_inbound_email(
    payload: RelayWebhookPayload,
    request: Request,
    _auth: None = Depends(_verify_webhook_secret),
    settings: Settings = Depends(get_settings),
) -> IntakeResponse:
    """Decide the fate of one inbound message."""
    message = normalize_relay(payload)
    disposition = await email_router.handle(
        message, settings, client=request.app.state.http_client
    )
    if disposition.kind == "reject":
        logger.info(
            "Rejecting email from %s: %s (temporary=%s)",
            message.sender,
            disposition.reason,
            disposition.temporary,
        )
    return disposition.to_response()
