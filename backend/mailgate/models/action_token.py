"""
Action token models.

Action tokens are HS256 JWTs minted elsewhere (e.g. for unsubscribe links);
mailgate only verifies them.
"""

from dataclasses import dataclass
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class ActionTokenPayload(BaseModel):
    """Claims carried by a verified action token. Extra claims are dropped."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    userId: Union[int, str]
    email: str
    type: Literal["reminder", "all"]
    exp: int


@dataclass(frozen=True)
class Verified:
    payload: ActionTokenPayload


@dataclass(frozen=True)
class Rejected:
    reason: str


VerificationOutcome = Union[Verified, Rejected]
