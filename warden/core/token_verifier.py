"""Abstract token verifier interface.

This module defines the interface for ID token verification. Services that
only verify tokens depend on this interface and never need signing
credentials.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from warden.models import Token, UnverifiedToken


class TokenVerifier(ABC):
    """Abstract interface for ID token verification.

    Implementations handle:
    - Verification key fetching and caching
    - Token signature verification
    - Claim validation

    Implementations:
        - AuthClient: provider-issued ID tokens
    """

    @abstractmethod
    def verify(self, token: str) -> Token:
        """Verify an ID token and return its trusted claims.

        Args:
            token: The compact JWT to verify (without 'Bearer ' prefix)

        Returns:
            Token holding the verified claims

        Raises:
            TokenVerificationError: If the token is malformed, badly signed,
                or fails claim validation
            KeySourceUnavailableError: If verification keys cannot be fetched
        """

    @abstractmethod
    def get_unverified_claims(self, token: str) -> UnverifiedToken:
        """Decode a token WITHOUT verifying the signature or claims.

        WARNING: Only use this for debugging or logging purposes.
        Never trust unverified claims for authorization decisions.

        Args:
            token: The compact JWT

        Returns:
            UnverifiedToken with decoded (but unverified) header and payload
        """
