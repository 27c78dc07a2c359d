"""
Action dispatcher.

Forwards an accepted message's metadata to the downstream action processor:

    POST <ACTION_ENDPOINT_URL>
    Authorization: Bearer <ACTION_SECRET>
    Content-Type: application/json

    {"from": ..., "to": ..., "subject": ..., "messageId": ...}

Exactly one attempt is made per call. Redelivery after a reject is the mail
relay's job, not ours.
"""

import enum
import logging
from typing import Optional

import httpx

from mailgate.config import Settings
from mailgate.models.inbound_email import EmailForwardPayload

logger = logging.getLogger(__name__)

# Longest slice of a downstream error body kept in logs
_MAX_LOGGED_BODY = 500


class DispatchOutcome(enum.Enum):
    FORWARDED = "forwarded"
    CONFIG_ERROR = "config_error"
    TRANSIENT_ERROR = "transient_error"


async def dispatch(
    payload: EmailForwardPayload,
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> DispatchOutcome:
    """
    POST the payload to the action processor.

    Args:
        payload:  Metadata of the accepted message.
        settings: Supplies endpoint URL, bearer secret and timeout.
        client:   Optional shared AsyncClient. A short-lived one is created
                  when omitted.

    Returns:
        FORWARDED on any 2xx; CONFIG_ERROR when endpoint or secret is
        missing (no request is sent); TRANSIENT_ERROR on non-2xx, timeout
        or any other transport failure.
    """
    if not settings.dispatch_configured:
        logger.error(
            "Missing configuration: ACTION_ENDPOINT_URL or ACTION_SECRET is not set"
        )
        return DispatchOutcome.CONFIG_ERROR

    headers = {
        "Authorization": f"Bearer {settings.action_secret}",
        "Content-Type": "application/json",
    }

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.action_timeout_seconds) as owned:
                response = await _post(owned, payload, settings, headers)
        else:
            response = await _post(client, payload, settings, headers)
    except httpx.TimeoutException:
        logger.error(
            "Action processor timed out after %.1fs (message_id=%s)",
            settings.action_timeout_seconds,
            payload.message_id,
        )
        return DispatchOutcome.TRANSIENT_ERROR
    except httpx.HTTPError as e:
        logger.error(
            "Action processor unreachable (message_id=%s): %s",
            payload.message_id,
            type(e).__name__,
        )
        return DispatchOutcome.TRANSIENT_ERROR

    if not response.is_success:
        logger.error(
            "Action processor error: %s %s (message_id=%s)",
            response.status_code,
            response.text[:_MAX_LOGGED_BODY],
            payload.message_id,
        )
        return DispatchOutcome.TRANSIENT_ERROR

    logger.info("Forwarded email from %s (message_id=%s)", payload.sender, payload.message_id)
    return DispatchOutcome.FORWARDED


async def _post(
    client: httpx.AsyncClient,
    payload: EmailForwardPayload,
    settings: Settings,
    headers: dict,
) -> httpx.Response:
    return await client.post(
        settings.action_endpoint_url,
        json=payload.to_json(),
        headers=headers,
        timeout=settings.action_timeout_seconds,
    )
