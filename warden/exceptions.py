"""Warden exceptions.

All exceptions inherit from WardenError for easy catching. Trust failures
raised while verifying an ID token inherit from TokenVerificationError.
"""

from __future__ import annotations

from typing import Any, Sequence

VERIFY_TOKEN_HINT = (
    "See https://firebase.google.com/docs/auth/admin/verify-id-tokens for details "
    "on how to retrieve a valid ID token."
)
PROJECT_ID_HINT = (
    "Make sure the ID token comes from the same project as the credential used "
    "to authenticate this client."
)


class WardenError(Exception):
    """Base exception for Warden errors."""

    def __init__(self, message: str, code: str):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(WardenError):
    """Raised when the client is missing credentials or a project id."""

    def __init__(self, message: str):
        super().__init__(message=message, code="CONFIGURATION_ERROR")


# ==================== Input Errors ====================


class InputError(WardenError):
    """Raised when caller-supplied input is invalid."""

    def __init__(self, message: str, code: str = "INVALID_INPUT"):
        super().__init__(message=message, code=code)


class ReservedClaimError(InputError):
    """Raised when developer claims use one or more reserved names."""

    def __init__(self, claims: Sequence[str]):
        self.claims = list(claims)
        if len(self.claims) == 1:
            message = f"developer claim '{self.claims[0]}' is reserved and cannot be specified"
        else:
            message = (
                f"developer claims '{', '.join(self.claims)}' are reserved "
                "and cannot be specified"
            )
        super().__init__(message=message, code="RESERVED_CLAIM")


# ==================== Key Source Errors ====================


class KeySourceUnavailableError(WardenError):
    """Raised when verification keys cannot be fetched and no usable cache remains."""

    def __init__(self, message: str = "Verification keys are unavailable"):
        super().__init__(message=message, code="KEY_SOURCE_UNAVAILABLE")


# ==================== Token Errors ====================


class TokenVerificationError(WardenError):
    """Base class for ID token trust failures."""

    def __init__(self, message: str = "Invalid token", code: str = "INVALID_TOKEN"):
        super().__init__(message=message, code=code)


class MalformedTokenError(TokenVerificationError):
    """Raised when a token is not a well-formed compact JWT."""

    def __init__(self, message: str = "Token is not a well-formed JWT"):
        super().__init__(message=message, code="MALFORMED_TOKEN")


class UnsupportedAlgorithmError(TokenVerificationError):
    """Raised when a token announces an algorithm other than RS256."""

    def __init__(self, algorithm: Any):
        super().__init__(
            message=(
                f"ID token has incorrect algorithm. Expected 'RS256' but got "
                f"'{algorithm}'. {VERIFY_TOKEN_HINT}"
            ),
            code="UNSUPPORTED_ALGORITHM",
        )
        self.algorithm = algorithm


class MissingKeyIdError(TokenVerificationError):
    """Raised when an ID token has no 'kid' header."""

    def __init__(self, message: str = "ID token has no 'kid' header"):
        super().__init__(message=message, code="MISSING_KEY_ID")


class WrongTokenTypeError(TokenVerificationError):
    """Raised when a custom token is passed where an ID token is expected."""

    def __init__(self):
        super().__init__(
            message="verify_id_token() expects an ID token, but was given a custom token",
            code="WRONG_TOKEN_TYPE",
        )


class InvalidSignatureError(TokenVerificationError):
    """Raised when token signature verification fails."""

    def __init__(self, message: str = "Token signature verification failed"):
        super().__init__(message=message, code="INVALID_SIGNATURE")


class KeyNotFoundError(TokenVerificationError):
    """Raised when no verification key matches the token's key id."""

    def __init__(self, key_id: str):
        super().__init__(
            message=f"No verification key found for kid '{key_id}'",
            code="KEY_NOT_FOUND",
        )
        self.key_id = key_id


class AudienceMismatchError(TokenVerificationError):
    """Raised when the 'aud' claim is not the expected project id."""

    def __init__(self, expected: str, actual: Any):
        super().__init__(
            message=(
                f"ID token has invalid 'aud' (audience) claim. Expected '{expected}' "
                f"but got '{actual}'. {PROJECT_ID_HINT} {VERIFY_TOKEN_HINT}"
            ),
            code="AUDIENCE_MISMATCH",
        )
        self.expected = expected
        self.actual = actual


class IssuerMismatchError(TokenVerificationError):
    """Raised when the 'iss' claim does not name the expected project."""

    def __init__(self, expected: str, actual: Any):
        super().__init__(
            message=(
                f"ID token has invalid 'iss' (issuer) claim. Expected '{expected}' "
                f"but got '{actual}'. {PROJECT_ID_HINT} {VERIFY_TOKEN_HINT}"
            ),
            code="ISSUER_MISMATCH",
        )
        self.expected = expected
        self.actual = actual


class IssuedInFutureError(TokenVerificationError):
    """Raised when the 'iat' claim is later than the current time."""

    def __init__(self, issued_at: int, now: int):
        super().__init__(
            message=f"ID token issued at future timestamp: {issued_at}",
            code="ISSUED_IN_FUTURE",
        )
        self.issued_at = issued_at
        self.now = now


class TokenExpiredError(TokenVerificationError):
    """Raised when token has expired."""

    def __init__(self, expires_at: int, now: int):
        super().__init__(
            message=f"ID token has expired. Expired at: {expires_at}",
            code="TOKEN_EXPIRED",
        )
        self.expires_at = expires_at
        self.now = now


class EmptySubjectError(TokenVerificationError):
    """Raised when the 'sub' claim is missing or empty."""

    def __init__(self):
        super().__init__(
            message=f"ID token has empty 'sub' (subject) claim. {VERIFY_TOKEN_HINT}",
            code="EMPTY_SUBJECT",
        )


class SubjectTooLongError(TokenVerificationError):
    """Raised when the 'sub' claim is longer than 128 characters."""

    def __init__(self, length: int):
        super().__init__(
            message=(
                "ID token has a 'sub' (subject) claim longer than 128 characters. "
                f"{VERIFY_TOKEN_HINT}"
            ),
            code="SUBJECT_TOO_LONG",
        )
        self.length = length
