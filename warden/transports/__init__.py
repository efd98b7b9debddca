"""Key fetch transport implementations."""

from warden.transports.http import HTTPKeyTransport
from warden.transports.static import StaticKeyTransport

__all__ = [
    "HTTPKeyTransport",
    "StaticKeyTransport",
]
