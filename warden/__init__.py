"""Warden - custom token minting and ID token verification.

Warden signs custom authentication tokens for a backend-as-a-service
identity provider and verifies the ID tokens the provider issues.

Features:
- RS256 custom tokens with developer claims
- ID token verification against the provider's rotating certificates
- Certificate caching driven by Cache-Control, with single-flight refresh
- Ordered, individually testable claim rules
"""

from warden.client import AuthClient, create_client
from warden.codec import decode_token, encode_token
from warden.config import AuthConfig, ServiceAccount
from warden.constants import (
    CUSTOM_TOKEN_AUDIENCE,
    DEFAULT_CERT_URL,
    ISSUER_PREFIX,
    RESERVED_CLAIMS,
)
from warden.core import Clock, FixedClock, KeyFetchTransport, SystemClock, TokenVerifier
from warden.exceptions import (
    AudienceMismatchError,
    ConfigurationError,
    EmptySubjectError,
    InputError,
    InvalidSignatureError,
    IssuedInFutureError,
    IssuerMismatchError,
    KeyNotFoundError,
    KeySourceUnavailableError,
    MalformedTokenError,
    MissingKeyIdError,
    ReservedClaimError,
    SubjectTooLongError,
    TokenExpiredError,
    TokenVerificationError,
    UnsupportedAlgorithmError,
    WardenError,
    WrongTokenTypeError,
)
from warden.keys import load_private_key, load_verification_key
from warden.keystore import KeyStore
from warden.models import (
    CustomTokenPayload,
    JWTHeader,
    KeyFetchResult,
    Token,
    UnverifiedToken,
)
from warden.transports import HTTPKeyTransport, StaticKeyTransport
from warden.verification import (
    DEFAULT_RULES,
    ClaimRule,
    ClaimValidator,
    SignatureVerifier,
)

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "AuthClient",
    "create_client",
    "AuthConfig",
    "ServiceAccount",
    # Core interfaces
    "Clock",
    "FixedClock",
    "SystemClock",
    "KeyFetchTransport",
    "TokenVerifier",
    # Engine
    "encode_token",
    "decode_token",
    "KeyStore",
    "SignatureVerifier",
    "ClaimValidator",
    "ClaimRule",
    "DEFAULT_RULES",
    "load_private_key",
    "load_verification_key",
    # Transports
    "HTTPKeyTransport",
    "StaticKeyTransport",
    # Models
    "CustomTokenPayload",
    "JWTHeader",
    "KeyFetchResult",
    "Token",
    "UnverifiedToken",
    # Constants
    "CUSTOM_TOKEN_AUDIENCE",
    "DEFAULT_CERT_URL",
    "ISSUER_PREFIX",
    "RESERVED_CLAIMS",
    # Exceptions - Base
    "WardenError",
    "ConfigurationError",
    # Exceptions - Input
    "InputError",
    "ReservedClaimError",
    # Exceptions - Key source
    "KeySourceUnavailableError",
    # Exceptions - Token
    "TokenVerificationError",
    "MalformedTokenError",
    "UnsupportedAlgorithmError",
    "MissingKeyIdError",
    "WrongTokenTypeError",
    "InvalidSignatureError",
    "KeyNotFoundError",
    "AudienceMismatchError",
    "IssuerMismatchError",
    "IssuedInFutureError",
    "TokenExpiredError",
    "EmptySubjectError",
    "SubjectTooLongError",
]
