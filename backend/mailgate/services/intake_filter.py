"""
Inbound email intake filter.

Decides, from envelope/header metadata alone, whether an inbound message is
accepted, silently dropped, or rejected back to the sending mail system.

Guards are an ordered list of rules evaluated top-to-bottom; the first rule
whose predicate matches decides. A message that matches no rule is accepted.

Default rule order:
  1. size           rawSize > max_message_size          -> Reject("message too large")
  2. auto_subject   subject contains an auto-reply phrase -> SilentDrop
  3. auto_submitted Auto-Submitted header present, not "no" -> SilentDrop

classify() is pure: same message and rules in, same decision out.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from mailgate.config import Settings
from mailgate.models.inbound_email import InboundEmailMessage

logger = logging.getLogger(__name__)

MESSAGE_TOO_LARGE = "message too large"


# ---------------------------------------------------------------------------
# Decisions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Accept:
    pass


@dataclass(frozen=True)
class SilentDrop:
    cause: str = ""


@dataclass(frozen=True)
class Reject:
    reason: str


IntakeDecision = Union[Accept, SilentDrop, Reject]


@dataclass(frozen=True)
class IntakeRule:
    """A named predicate and the decision it produces when it matches."""

    name: str
    matches: Callable[[InboundEmailMessage], bool]
    decision: IntakeDecision


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def exceeds_size(max_size: int) -> Callable[[InboundEmailMessage], bool]:
    def _check(message: InboundEmailMessage) -> bool:
        return message.raw_size > max_size
    return _check


def subject_contains_any(
    fragments: Sequence[str],
) -> Callable[[InboundEmailMessage], bool]:
    lowered = tuple(f.lower() for f in fragments if f)

    def _check(message: InboundEmailMessage) -> bool:
        subject = (message.subject or "").lower()
        return any(fragment in subject for fragment in lowered)
    return _check


def is_auto_submitted(message: InboundEmailMessage) -> bool:
    """
    True when the Auto-Submitted header marks the message as automated.

    An absent header means a human sent it. Any present value other than
    "no" (after trimming and lowercasing) means a machine did.
    """
    if message.auto_submitted is None:
        return False
    return message.auto_submitted.strip().lower() != "no"


# ---------------------------------------------------------------------------
# Rule set and classifier
# ---------------------------------------------------------------------------

def build_rules(settings: Settings) -> list[IntakeRule]:
    """Return the default guard chain for the given settings."""
    return [
        IntakeRule(
            name="size",
            matches=exceeds_size(settings.max_message_size),
            decision=Reject(MESSAGE_TOO_LARGE),
        ),
        IntakeRule(
            name="auto_subject",
            matches=subject_contains_any(settings.blocked_subjects),
            decision=SilentDrop("auto-response subject"),
        ),
        IntakeRule(
            name="auto_submitted",
            matches=is_auto_submitted,
            decision=SilentDrop("auto-submitted header"),
        ),
    ]


def classify(
    message: InboundEmailMessage,
    rules: Optional[Sequence[IntakeRule]] = None,
) -> IntakeDecision:
    """
    Run the guard chain over a message and return the first matching decision.

    Args:
        message: Inbound message metadata.
        rules:   Ordered guard chain. Defaults to build_rules(Settings()).

    Returns:
        Accept(), SilentDrop(cause) or Reject(reason).
    """
    if rules is None:
        rules = build_rules(Settings())

    for rule in rules:
        if rule.matches(message):
            logger.info(
                "Intake %s: rule=%s from=%s message_id=%s size=%d",
                type(rule.decision).__name__,
                rule.name,
                message.sender,
                message.message_id,
                message.raw_size,
            )
            return rule.decision

    logger.info(
        "Intake Accept: from=%s message_id=%s size=%d",
        message.sender,
        message.message_id,
        message.raw_size,
    )
    return Accept()
