"""
Action token verification.

Tokens are compact HS256 JWTs. Verification uses python-jose for the
signature check only; expiry is enforced here so the rule is explicit and
does not depend on the library's defaults:

    rejected  iff  signature invalid  OR  now >= exp + leeway

The secret is opaque: it is never logged and never included in an error
message.
"""

import time
from typing import Optional

from jose import JWTError, jwt
from pydantic import ValidationError

from mailgate.models.action_token import (
    ActionTokenPayload,
    Rejected,
    VerificationOutcome,
    Verified,
)

ALGORITHM = "HS256"


class TokenVerificationError(Exception):
    """Base class for every reason a token is not accepted."""


class TokenConfigurationError(TokenVerificationError):
    pass


class MalformedTokenError(TokenVerificationError):
    pass


class TokenExpiredError(TokenVerificationError):
    pass


def verify(
    token: str,
    secret: Optional[str],
    leeway: int = 0,
    now: Optional[float] = None,
) -> ActionTokenPayload:
    """
    Verify a signed action token and return its payload.

    Args:
        token:  Compact JWT string.
        secret: HS256 signing key.
        leeway: Seconds of grace applied to exp.
        now:    Verification time (Unix seconds). Defaults to time.time().

    Raises:
        TokenConfigurationError: secret is empty or missing.
        MalformedTokenError:     bad structure, bad signature, or claims
                                 that do not match ActionTokenPayload.
        TokenExpiredError:       now >= exp + leeway.
    """
    if not secret:
        raise TokenConfigurationError("Signing secret is not configured")
    if not isinstance(token, str) or not token:
        raise MalformedTokenError("Token must be a non-empty string")

    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": False, "verify_aud": False},
        )
    except JWTError as e:
        raise MalformedTokenError(str(e) or "Invalid token")
    except Exception:
        raise MalformedTokenError("Invalid token")

    try:
        payload = ActionTokenPayload.model_validate(claims)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"])
        raise MalformedTokenError(f"Invalid token claims: {fields}")

    current = time.time() if now is None else now
    if current >= payload.exp + leeway:
        raise TokenExpiredError("Token has expired")

    return payload


def evaluate(
    token: str,
    secret: Optional[str],
    leeway: int = 0,
    now: Optional[float] = None,
) -> VerificationOutcome:
    """Same as verify(), but returns Verified/Rejected instead of raising."""
    try:
        return Verified(verify(token, secret, leeway=leeway, now=now))
    except TokenVerificationError as e:
        return Rejected(str(e))
