"""HTTP transport for the provider's published certificates."""

from __future__ import annotations

import re
from typing import Optional

import requests
import structlog

from warden.core.key_transport import KeyFetchTransport
from warden.exceptions import KeySourceUnavailableError
from warden.models import KeyFetchResult

log = structlog.get_logger()

_MAX_AGE = re.compile(r"(?:^|[,\s])max-age\s*=\s*(\d+)", re.IGNORECASE)


def parse_max_age(cache_control: Optional[str]) -> Optional[int]:
    """Return the max-age directive of a Cache-Control header, if any."""
    if not cache_control:
        return None
    match = _MAX_AGE.search(cache_control)
    return int(match.group(1)) if match else None


class HTTPKeyTransport(KeyFetchTransport):
    """Fetches certificates over HTTP(S) using requests.

    The response must be a JSON object mapping key id to PEM certificate.
    Its Cache-Control max-age becomes the cache lifetime.

    Args:
        session: Optional requests.Session for connection pooling or
            custom adapters. Defaults to module-level requests calls.
        timeout: Request timeout in seconds (default: 10.0)
    """

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self._http = session if session is not None else requests
        self.timeout = timeout

    def fetch(self, url: str) -> KeyFetchResult:
        try:
            response = self._http.get(url, timeout=self.timeout)
            response.raise_for_status()
            keys = response.json()
        except (requests.RequestException, ValueError) as e:
            raise KeySourceUnavailableError(f"Failed to fetch certificates from {url}: {e}") from e

        if not isinstance(keys, dict) or not all(
            isinstance(kid, str) and isinstance(pem, str) for kid, pem in keys.items()
        ):
            log.error("invalid_certificate_response", url=url, response_type=type(keys).__name__)
            raise KeySourceUnavailableError(
                f"Certificates from {url} must be a JSON object of key id to PEM"
            )

        max_age = parse_max_age(response.headers.get("Cache-Control"))
        return KeyFetchResult(keys=keys, max_age=max_age)
