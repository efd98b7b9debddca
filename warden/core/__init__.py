"""Core abstractions for Warden."""

from warden.core.clock import Clock, FixedClock, SystemClock
from warden.core.key_transport import KeyFetchTransport
from warden.core.token_verifier import TokenVerifier

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "KeyFetchTransport",
    "TokenVerifier",
]
