"""
Runtime configuration.

All settings are read from the environment (and a local .env file, if
present) exactly once, when the app is built. Components never read
os.environ themselves; they receive a Settings instance.

Environment variables
---------------------
ACTION_ENDPOINT_URL          URL of the downstream action processor.
ACTION_SECRET                Bearer credential sent to the action processor.
ACTION_TIMEOUT_SECONDS       Upper bound for the outbound dispatch call (default 10).
MAX_MESSAGE_SIZE             Largest accepted message in bytes (default 256 KiB).
BLOCKED_SUBJECTS             Comma-separated auto-reply subject fragments.
ACTION_TOKEN_SECRET          HS256 key for action tokens. Falls back to the
                             legacy JWT_SECRET when not set.
ACTION_TOKEN_LEEWAY_SECONDS  Grace period applied to the token exp claim (default 0).
EXPOSE_TOKEN_ERROR_DETAILS   Return the underlying verification error to
                             callers (default false).
INBOUND_WEBHOOK_SECRET       Shared secret the mail relay sends in X-Webhook-Secret.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_MAX_MESSAGE_SIZE = 256 * 1024
DEFAULT_BLOCKED_SUBJECTS = ("out of office", "automatic reply", "undelivered")
DEFAULT_ACTION_TIMEOUT_SECONDS = 10.0

_TRUTHY = {"1", "true", "yes", "on"}


def _env(name: str) -> Optional[str]:
    """Return the stripped value of an env var, or None when unset or blank."""
    value = os.getenv(name, "").strip()
    return value or None


def _env_number(name: str, cast, default, minimum=0, inclusive=True):
    raw = _env(name)
    if raw is None:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value < minimum or (not inclusive and value == minimum):
        bound = ">=" if inclusive else ">"
        raise ValueError(f"{name} must be {bound} {minimum}, got {raw!r}")
    return value


class Settings(BaseModel):
    """Explicit configuration passed into every component."""

    model_config = ConfigDict(frozen=True)

    action_endpoint_url: Optional[str] = None
    action_secret: Optional[str] = None
    action_timeout_seconds: float = Field(default=DEFAULT_ACTION_TIMEOUT_SECONDS, gt=0)

    max_message_size: int = Field(default=DEFAULT_MAX_MESSAGE_SIZE, ge=0)
    blocked_subjects: tuple[str, ...] = DEFAULT_BLOCKED_SUBJECTS

    token_secret: Optional[str] = None
    token_leeway_seconds: int = Field(default=0, ge=0)
    expose_token_error_details: bool = False

    inbound_webhook_secret: Optional[str] = None

    @property
    def dispatch_configured(self) -> bool:
        return bool(self.action_endpoint_url and self.action_secret)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build Settings from the process environment.

        Blank values count as unset. Raises ValueError naming the variable
        when a numeric value cannot be parsed or is out of range.
        """
        load_dotenv()

        blocked_raw = _env("BLOCKED_SUBJECTS")
        if blocked_raw:
            blocked = tuple(
                s.strip().lower() for s in blocked_raw.split(",") if s.strip()
            )
        else:
            blocked = DEFAULT_BLOCKED_SUBJECTS

        return cls(
            action_endpoint_url=_env("ACTION_ENDPOINT_URL"),
            action_secret=_env("ACTION_SECRET"),
            action_timeout_seconds=_env_number(
                "ACTION_TIMEOUT_SECONDS", float, DEFAULT_ACTION_TIMEOUT_SECONDS, inclusive=False
            ),
            max_message_size=_env_number(
                "MAX_MESSAGE_SIZE", int, DEFAULT_MAX_MESSAGE_SIZE
            ),
            blocked_subjects=blocked,
            token_secret=_env("ACTION_TOKEN_SECRET") or _env("JWT_SECRET"),
            token_leeway_seconds=_env_number("ACTION_TOKEN_LEEWAY_SECONDS", int, 0),
            expose_token_error_details=(
                (_env("EXPOSE_TOKEN_ERROR_DETAILS") or "").lower() in _TRUTHY
            ),
            inbound_webhook_secret=_env("INBOUND_WEBHOOK_SECRET"),
        )
