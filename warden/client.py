"""Custom token minting and ID token verification.

AuthClient signs custom tokens with a service account's private key and
verifies ID tokens issued by the identity provider:

    >>> from warden import AuthConfig, ServiceAccount, create_client
    >>> client = create_client(AuthConfig(
    ...     project_id="my-project",
    ...     service_account=ServiceAccount.from_file("service-account.json"),
    ... ))
    >>> custom_token = client.mint("user-123", {"premium": True})
    >>> token = client.verify(id_token)
    >>> token.uid
    'user-123'
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

import structlog
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from warden.codec import decode_token, encode_token
from warden.config import AuthConfig
from warden.constants import (
    ALGORITHM,
    CUSTOM_TOKEN_AUDIENCE,
    DEFAULT_CERT_URL,
    MAX_UID_LENGTH,
    RESERVED_CLAIMS,
    TOKEN_LIFETIME_SECONDS,
)
from warden.core.clock import Clock, SystemClock
from warden.core.key_transport import KeyFetchTransport
from warden.core.token_verifier import TokenVerifier
from warden.exceptions import (
    ConfigurationError,
    InputError,
    ReservedClaimError,
    TokenVerificationError,
)
from warden.keys import load_private_key
from warden.keystore import KeyStore
from warden.models import CustomTokenPayload, JWTHeader, Token, UnverifiedToken
from warden.transports.http import HTTPKeyTransport
from warden.verification import ClaimValidator, SignatureVerifier

log = structlog.get_logger()


class AuthClient(TokenVerifier):
    """Mints custom tokens and verifies ID tokens.

    Args:
        project_id: Project that ID tokens must be issued for. Required
            for verify().
        key_store: KeyStore holding the provider's verification keys.
            Defaults to one fetching DEFAULT_CERT_URL over HTTP.
        signer_email: Service account email; issuer and subject of custom
            tokens. Required for mint().
        signing_key: Service account private key. Required for mint().
        clock: Time source. Defaults to the system clock.
    """

    def __init__(
        self,
        project_id: str = "",
        key_store: Optional[KeyStore] = None,
        signer_email: str = "",
        signing_key: Optional[RSAPrivateKey] = None,
        clock: Optional[Clock] = None,
    ):
        self.project_id = project_id
        self.signer_email = signer_email
        self.clock = clock or SystemClock()
        self.key_store = key_store or KeyStore(
            DEFAULT_CERT_URL, HTTPKeyTransport(), clock=self.clock
        )
        self._signing_key = signing_key
        self._signature_verifier = SignatureVerifier(self.key_store)
        self._claim_validator = ClaimValidator(project_id, clock=self.clock)

    @property
    def can_mint(self) -> bool:
        return bool(self.signer_email) and self._signing_key is not None

    # ==================== Custom Tokens ====================

    def mint(self, uid: str, claims: Optional[Mapping[str, Any]] = None) -> str:
        """Create a signed custom token for a user.

        The result is exchanged by a client SDK for an ID token; it is not
        itself an ID token and verify() rejects it.

        Args:
            uid: User id, 1 to 128 characters
            claims: Optional developer claims, carried under 'claims'

        Returns:
            Compact JWT signed with the service account key

        Raises:
            ConfigurationError: If no signer email or private key is loaded
            InputError: If uid is out of bounds or claims are not a
                JSON-serializable mapping
            ReservedClaimError: If claims use reserved names; every
                offending name is reported
        """
        if not self.signer_email:
            raise ConfigurationError("service account email not available")
        if self._signing_key is None:
            raise ConfigurationError("private key not available")

        if not isinstance(uid, str) or not 0 < len(uid) <= MAX_UID_LENGTH:
            raise InputError(
                f"uid must be non-empty, and not longer than {MAX_UID_LENGTH} characters"
            )

        if claims is not None and not isinstance(claims, Mapping):
            raise InputError("developer claims must be a mapping")
        disallowed = [name for name in RESERVED_CLAIMS if claims and name in claims]
        if disallowed:
            raise ReservedClaimError(disallowed)

        now = int(self.clock.now())
        payload = CustomTokenPayload(
            issuer=self.signer_email,
            subject=self.signer_email,
            audience=CUSTOM_TOKEN_AUDIENCE,
            uid=uid,
            issued_at=now,
            expires_at=now + TOKEN_LIFETIME_SECONDS,
            claims=dict(claims) if claims else None,
        )
        try:
            header = JWTHeader(algorithm=ALGORITHM)
            return encode_token(header, payload.to_dict(), self._signing_key)
        except (TypeError, ValueError) as e:
            raise InputError(f"developer claims must be JSON-serializable: {e}") from e

    def custom_token(self, uid: str) -> str:
        """Create a custom token with no developer claims."""
        return self.mint(uid)

    def custom_token_with_claims(self, uid: str, claims: Optional[Mapping[str, Any]]) -> str:
        """Create a custom token carrying developer claims."""
        return self.mint(uid, claims)

    # ==================== ID Tokens ====================

    def verify(self, token: str) -> Token:
        """Verify an ID token issued by the provider.

        Checks that the token is well formed, signed by one of the
        provider's current keys, issued for this project and currently
        valid. The uid of the returned Token is the token's subject.

        Raises:
            ConfigurationError: If no project id is configured
            InputError: If token is not a non-empty string
            TokenVerificationError: If the token is malformed, badly
                signed or fails a claim rule
            KeySourceUnavailableError: If verification keys cannot be
                fetched and none are cached
        """
        if not self.project_id:
            raise ConfigurationError("project id not available")
        if not isinstance(token, str) or not token:
            raise InputError("ID token must be a non-empty string")

        try:
            unverified = decode_token(token)
            self._signature_verifier.check(unverified)
            verified = self._claim_validator.validate(unverified)
        except TokenVerificationError as e:
            log.info("id_token_rejected", code=e.code, project_id=self.project_id)
            raise

        log.debug("token_verified", uid=verified.uid, project_id=self.project_id)
        return verified

    def verify_id_token(self, token: str) -> Token:
        """Alias of verify()."""
        return self.verify(token)

    def get_unverified_claims(self, token: str) -> UnverifiedToken:
        """Decode a token WITHOUT verifying it. Never use for authorization."""
        return decode_token(token)


def create_client(
    config: AuthConfig,
    transport: Optional[KeyFetchTransport] = None,
    clock: Optional[Clock] = None,
) -> AuthClient:
    """Create an AuthClient from configuration.

    A config without a service account, or with one lacking a private key,
    yields a client that can verify but not mint.

    Args:
        config: Client configuration
        transport: Certificate transport. Defaults to HTTPKeyTransport
            with the configured timeout.
        clock: Time source. Defaults to the system clock.

    Raises:
        ConfigurationError: If the service account's private key cannot be
            parsed
    """
    clock = clock or SystemClock()
    key_store = KeyStore(
        config.cert_url,
        transport or HTTPKeyTransport(timeout=config.fetch_timeout),
        clock=clock,
        default_ttl=config.default_cache_ttl,
        min_refresh_interval=config.min_refresh_interval,
    )

    signer_email = ""
    signing_key = None
    account = config.service_account
    if account is not None:
        signer_email = account.client_email
        if account.private_key:
            signing_key = load_private_key(account.private_key)

    if signing_key is None or not signer_email:
        log.info("client_created_without_signing_credentials", project_id=config.project_id)

    return AuthClient(
        project_id=config.project_id,
        key_store=key_store,
        signer_email=signer_email,
        signing_key=signing_key,
        clock=clock,
    )
