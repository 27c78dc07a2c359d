"""mailgate: inbound email intake filter and action token verifier."""

__version__ = "0.1.0"
