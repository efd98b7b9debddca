"""In-memory key transport for local development and testing."""

from __future__ import annotations

from typing import Dict, Optional

import structlog

from warden.core.key_transport import KeyFetchTransport
from warden.models import KeyFetchResult

log = structlog.get_logger()


class StaticKeyTransport(KeyFetchTransport):
    """Serves a fixed certificate set, whatever the URL.

    Example:
        transport = StaticKeyTransport({"key-1": cert_pem}, max_age=3600)
        store = KeyStore("https://example.com/certs", transport)
    """

    def __init__(self, keys: Optional[Dict[str, str]] = None, max_age: Optional[int] = None):
        self.keys: Dict[str, str] = dict(keys or {})
        self.max_age = max_age
        self.fetch_count = 0

    def set_keys(self, keys: Dict[str, str], max_age: Optional[int] = None) -> None:
        """Replace the served key set, as a provider does on rotation."""
        self.keys = dict(keys)
        self.max_age = max_age

    def fetch(self, url: str) -> KeyFetchResult:
        self.fetch_count += 1
        log.debug("Serving static certificates", url=url, count=len(self.keys))
        return KeyFetchResult(keys=dict(self.keys), max_age=self.max_age)
