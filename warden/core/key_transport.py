"""Abstract interface for fetching verification keys.

The KeyStore does not know how keys reach it. A transport fetches the
provider's current certificate set from a URL and reports how long the
result may be cached.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from warden.models import KeyFetchResult


class KeyFetchTransport(ABC):
    """Fetches the identity provider's public certificates.

    Implementations:
        - HTTPKeyTransport: fetches over HTTPS with requests
        - StaticKeyTransport: serves an in-memory key set
    """

    @abstractmethod
    def fetch(self, url: str) -> KeyFetchResult:
        """Fetch the current certificate set.

        Args:
            url: Location of the certificate set

        Returns:
            KeyFetchResult mapping key id to PEM certificate, with the
            cache lifetime hint if the source provided one

        Raises:
            KeySourceUnavailableError: If the keys cannot be fetched
        """
