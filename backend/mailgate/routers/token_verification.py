"""
Action token verification endpoint.

Called cross-origin from the browser (e.g. the unsubscribe page) before any
account-affecting action. Every response carries permissive CORS headers,
including 4xx responses, so the browser can read the error body.

  OPTIONS /verify-token  -> 200, empty body
  POST    /verify-token  {"token": "..."}
      200 {"payload": {...}}
      400 {"error": "Token is required"}
      401 {"error": "Invalid or expired token", "details": "..."}
  other   /verify-token  -> 405 {"error": "Method not allowed"}
"""

import json
import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from mailgate.config import Settings
from mailgate.models.action_token import Rejected
from mailgate.services import token_codec

logger = logging.getLogger(__name__)

router = APIRouter()

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}

INVALID_TOKEN = "Invalid or expired token"
GENERIC_DETAILS = "Token could not be verified"

_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _json(status_code: int, body: dict) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=CORS_HEADERS)


def _unauthorized(settings: Settings, details: str) -> JSONResponse:
    shown = details if settings.expose_token_error_details else GENERIC_DETAILS
    return _json(401, {"error": INVALID_TOKEN, "details": shown})


@router.api_route("/verify-token", methods=_ALL_METHODS)
async def verify_token(request: Request) -> Response:
    """Verify an action token presented by an end user."""
    settings: Settings = request.app.state.settings

    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    if request.method != "POST":
        return _json(405, {"error": "Method not allowed"})

    try:
        body = json.loads(await request.body() or b"null")
    except (ValueError, RecursionError):
        body = None

    token = body.get("token") if isinstance(body, dict) else None
    if not token:
        return _json(400, {"error": "Token is required"})

    if not settings.token_secret:
        logger.error(
            "Token verification error: ACTION_TOKEN_SECRET (or JWT_SECRET) is not set"
        )
        return _json(401, {"error": INVALID_TOKEN, "details": GENERIC_DETAILS})

    outcome = token_codec.evaluate(
        token, settings.token_secret, leeway=settings.token_leeway_seconds
    )
    if isinstance(outcome, Rejected):
        logger.warning("Token verification error: %s", outcome.reason)
        return _unauthorized(settings, outcome.reason)

    return _json(200, {"payload": outcome.payload.model_dump()})
