"""Verification key cache.

KeyStore fetches the identity provider's public certificates, indexes them
by key id and keeps them until the fetch's cache lifetime runs out:
- Concurrent callers that find the cache stale share a single fetch
- A missing key id forces a refresh (key rotation), unless the cache was
  fetched moments ago
- A failed refresh keeps serving the previous keys while they are unexpired
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Optional

import structlog
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

from warden.core.clock import Clock, SystemClock
from warden.core.key_transport import KeyFetchTransport
from warden.exceptions import KeyNotFoundError, KeySourceUnavailableError
from warden.keys import load_verification_key

log = structlog.get_logger()

DEFAULT_CACHE_TTL = 300  # seconds, when the source sends no max-age
DEFAULT_MIN_REFRESH_INTERVAL = 60


@dataclass(frozen=True)
class _KeyCache:
    keys: Dict[str, RSAPublicKey]
    fetched_at: float
    valid_until: float


class _Refresh:
    """A fetch in flight; callers that lose the race wait on it."""

    def __init__(self):
        self.done = threading.Event()
        self.error: Optional[KeySourceUnavailableError] = None


class KeyStore:
    """Caches verification keys fetched from a single URL.

    Args:
        url: Location of the provider's certificate set
        transport: KeyFetchTransport used to fetch the certificates
        clock: Time source for cache expiry. Defaults to the system clock.
        default_ttl: Cache lifetime in seconds when the fetch carries no
            max-age hint. Defaults to 5 minutes.
        min_refresh_interval: A cache younger than this many seconds is
            trusted to be current; an unknown key id is then reported as
            not found without fetching again. Defaults to 60.
    """

    def __init__(
        self,
        url: str,
        transport: KeyFetchTransport,
        clock: Optional[Clock] = None,
        default_ttl: int = DEFAULT_CACHE_TTL,
        min_refresh_interval: int = DEFAULT_MIN_REFRESH_INTERVAL,
    ):
        self.url = url
        self.transport = transport
        self.clock = clock or SystemClock()
        self.default_ttl = default_ttl
        self.min_refresh_interval = min_refresh_interval

        self._cache: Optional[_KeyCache] = None
        self._inflight: Optional[_Refresh] = None
        self._lock = threading.Lock()

    def get_key(self, key_id: str) -> RSAPublicKey:
        """Return the verification key for a key id.

        Raises:
            KeyNotFoundError: If no current key has this id
            KeySourceUnavailableError: If keys cannot be fetched and no
                unexpired cache remains
        """
        cache = self._current()
        if cache is None:
            cache = self._refresh_and_get()

        key = cache.keys.get(key_id)
        if key is not None:
            return key

        if self.clock.now() - cache.fetched_at < self.min_refresh_interval:
            log.warning("signing_key_not_found", kid=key_id, available_kids=list(cache.keys))
            raise KeyNotFoundError(key_id)

        # Key not found in an older cache - refresh once (handles key rotation)
        log.debug("key_not_found_refreshing", kid=key_id, url=self.url)
        cache = self._refresh_and_get(stale=cache)
        key = cache.keys.get(key_id)
        if key is None:
            log.warning("signing_key_not_found", kid=key_id, available_kids=list(cache.keys))
            raise KeyNotFoundError(key_id)
        return key

    def refresh(self) -> List[str]:
        """Force a refresh and return the key ids now cached."""
        return sorted(self._refresh_and_get(stale=self._snapshot()).keys)

    def key_ids(self) -> List[str]:
        """Return the key ids in the cache without fetching."""
        cache = self._snapshot()
        return sorted(cache.keys) if cache else []

    def _snapshot(self) -> Optional[_KeyCache]:
        with self._lock:
            return self._cache

    def _current(self) -> Optional[_KeyCache]:
        cache = self._snapshot()
        if cache is not None and self.clock.now() < cache.valid_until:
            return cache
        return None

    def _refresh_and_get(self, stale: Optional[_KeyCache] = None) -> _KeyCache:
        """Refresh the cache, sharing any fetch already in flight.

        Args:
            stale: The cache the caller found wanting. If the cache has
                been replaced since, the newer one is used without fetching.
        """
        with self._lock:
            cache = self._cache
            if cache is not None and cache is not stale and self.clock.now() < cache.valid_until:
                return cache

            call = self._inflight
            leader = call is None
            if leader:
                call = self._inflight = _Refresh()

        if leader:
            try:
                self._fetch()
            except KeySourceUnavailableError as e:
                call.error = e
            finally:
                with self._lock:
                    self._inflight = None
                call.done.set()
        else:
            call.done.wait()

        if call.error is None:
            # Freshly installed keys are used even with a zero max-age.
            cache = self._snapshot()
            if cache is not None:
                return cache

        cache = self._current()
        if cache is not None:
            log.warning("key_refresh_failed_using_cache", url=self.url, error=str(call.error))
            return cache
        if call.error is None:
            raise KeySourceUnavailableError(f"No verification keys available from {self.url}")
        # Each waiter gets its own exception; the shared one is only the cause.
        raise KeySourceUnavailableError(call.error.message) from call.error

    def _fetch(self) -> None:
        """Fetch keys and install them. Caller must hold the refresh slot."""
        log.debug("fetching_verification_keys", url=self.url)
        try:
            result = self.transport.fetch(self.url)
            keys = {kid: load_verification_key(pem) for kid, pem in result.keys.items()}
        except KeySourceUnavailableError as e:
            log.error("key_fetch_failed", url=self.url, error=str(e))
            raise
        except Exception as e:
            log.error("key_fetch_failed", url=self.url, error=str(e))
            raise KeySourceUnavailableError(f"Failed to fetch verification keys: {e}") from e

        if not keys:
            log.error("key_fetch_empty", url=self.url)
            raise KeySourceUnavailableError(f"No verification keys returned by {self.url}")

        ttl = result.max_age if result.max_age is not None else self.default_ttl
        now = self.clock.now()
        with self._lock:
            self._cache = _KeyCache(keys=keys, fetched_at=now, valid_until=now + ttl)

        log.debug("verification_keys_cached", url=self.url, key_count=len(keys), ttl=ttl)
