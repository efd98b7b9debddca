"""Client configuration.

AuthConfig carries everything create_client() needs: the project id that
ID tokens must be issued for, and optionally the service account whose
key signs custom tokens.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from warden.constants import DEFAULT_CERT_URL
from warden.exceptions import ConfigurationError
from warden.keystore import DEFAULT_CACHE_TTL, DEFAULT_MIN_REFRESH_INTERVAL

PROJECT_ID_ENV = "WARDEN_PROJECT_ID"
FALLBACK_PROJECT_ID_ENV = "GOOGLE_CLOUD_PROJECT"
CREDENTIALS_ENV = "WARDEN_CREDENTIALS"
CERT_URL_ENV = "WARDEN_CERT_URL"
FETCH_TIMEOUT_ENV = "WARDEN_FETCH_TIMEOUT"


@dataclass(frozen=True)
class ServiceAccount:
    """Signer identity read from a service-account JSON document."""

    client_email: str
    private_key: str = ""
    project_id: Optional[str] = None

    def __repr__(self) -> str:
        return f"ServiceAccount(client_email={self.client_email!r})"

    @classmethod
    def from_json(cls, document: Union[str, bytes]) -> "ServiceAccount":
        """Parse a service-account JSON document.

        Raises:
            ConfigurationError: If the document is not a JSON object
        """
        try:
            data = json.loads(document)
        except ValueError as e:
            raise ConfigurationError(f"Invalid service account JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Service account JSON must be an object")

        return cls(
            client_email=data.get("client_email") or "",
            private_key=data.get("private_key") or "",
            project_id=data.get("project_id"),
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ServiceAccount":
        """Read a service-account JSON file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            document = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read service account file {path}: {e}") from e
        return cls.from_json(document)


@dataclass
class AuthConfig:
    """Configuration for an AuthClient.

    Args:
        project_id: Project that ID tokens must be issued for. Verification
            is unavailable without it.
        service_account: Signer credentials. Minting is unavailable without
            them.
        cert_url: Where the provider publishes its signing certificates
        fetch_timeout: Certificate fetch timeout in seconds
        default_cache_ttl: Certificate cache lifetime in seconds when the
            fetch carries no max-age
        min_refresh_interval: Seconds during which a fetched certificate set
            is trusted to be current (see KeyStore)
    """

    project_id: str = ""
    service_account: Optional[ServiceAccount] = None
    cert_url: str = DEFAULT_CERT_URL
    fetch_timeout: float = 10.0
    default_cache_ttl: int = DEFAULT_CACHE_TTL
    min_refresh_interval: int = DEFAULT_MIN_REFRESH_INTERVAL

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AuthConfig":
        """Build a config from environment variables.

        Reads WARDEN_PROJECT_ID (falling back to GOOGLE_CLOUD_PROJECT, then to
        the service account's own project), WARDEN_CREDENTIALS (path to a
        service-account JSON file), WARDEN_CERT_URL and WARDEN_FETCH_TIMEOUT.

        Raises:
            ConfigurationError: If a variable holds an unusable value
        """
        env = os.environ if environ is None else environ

        service_account = None
        credentials_path = env.get(CREDENTIALS_ENV)
        if credentials_path:
            service_account = ServiceAccount.from_file(credentials_path)

        project_id = env.get(PROJECT_ID_ENV) or env.get(FALLBACK_PROJECT_ID_ENV) or ""
        if not project_id and service_account is not None:
            project_id = service_account.project_id or ""

        timeout = env.get(FETCH_TIMEOUT_ENV)
        try:
            fetch_timeout = float(timeout) if timeout else 10.0
        except ValueError as e:
            raise ConfigurationError(
                f"{FETCH_TIMEOUT_ENV} must be a number, got '{timeout}'"
            ) from e

        return cls(
            project_id=project_id,
            service_account=service_account,
            cert_url=env.get(CERT_URL_ENV) or DEFAULT_CERT_URL,
            fetch_timeout=fetch_timeout,
        )
