"""Signature and claim verification for provider-issued ID tokens.

SignatureVerifier checks the RS256 signature against the key named by the
token's 'kid'. ClaimValidator then applies an ordered list of claim rules;
the first rule that fails decides the error. A Token is only built once
every rule has passed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from jwt.algorithms import RSAAlgorithm

from warden.constants import ALGORITHM, CUSTOM_TOKEN_AUDIENCE, ISSUER_PREFIX, MAX_UID_LENGTH
from warden.core.clock import Clock, SystemClock
from warden.exceptions import (
    AudienceMismatchError,
    EmptySubjectError,
    InvalidSignatureError,
    IssuedInFutureError,
    IssuerMismatchError,
    MissingKeyIdError,
    SubjectTooLongError,
    TokenExpiredError,
    TokenVerificationError,
    UnsupportedAlgorithmError,
    WrongTokenTypeError,
)
from warden.keystore import KeyStore
from warden.models import Token, UnverifiedToken

_rs256 = RSAAlgorithm(RSAAlgorithm.SHA256)


def _missing_key_id_error(token: UnverifiedToken) -> TokenVerificationError:
    # Custom tokens are self-signed and carry no kid.
    if token.audience == CUSTOM_TOKEN_AUDIENCE:
        return WrongTokenTypeError()
    return MissingKeyIdError()


class SignatureVerifier:
    """Checks a decoded token's signature against the KeyStore."""

    def __init__(self, key_store: KeyStore):
        self.key_store = key_store

    def check(self, token: UnverifiedToken) -> None:
        """Verify the token's RS256 signature.

        Raises:
            UnsupportedAlgorithmError: If the header names any other algorithm
            WrongTokenTypeError: If the token is a custom token (no kid)
            MissingKeyIdError: If the header has no kid
            KeyNotFoundError: If no current key has the token's kid
            KeySourceUnavailableError: If keys cannot be fetched
            InvalidSignatureError: If the signature does not match
        """
        header = token.header
        if header.algorithm != ALGORITHM:
            raise UnsupportedAlgorithmError(header.algorithm)
        if not header.key_id:
            raise _missing_key_id_error(token)

        key = self.key_store.get_key(header.key_id)
        if not _rs256.verify(token.signed_bytes, key, token.signature):
            raise InvalidSignatureError()


@dataclass(frozen=True)
class ValidationContext:
    """What the claims are checked against."""

    project_id: str
    now: int

    @property
    def issuer(self) -> str:
        return ISSUER_PREFIX + self.project_id


@dataclass(frozen=True)
class ClaimRule:
    """A single claim check.

    Attributes:
        name: Short rule name, for logs and tests
        violated: Returns True when the token breaks the rule
        error: Builds the exception to raise for a violation
    """

    name: str
    violated: Callable[[UnverifiedToken, ValidationContext], bool]
    error: Callable[[UnverifiedToken, ValidationContext], TokenVerificationError]


DEFAULT_RULES: Sequence[ClaimRule] = (
    ClaimRule(
        "key_id",
        lambda t, ctx: not t.header.key_id,
        lambda t, ctx: _missing_key_id_error(t),
    ),
    ClaimRule(
        "algorithm",
        lambda t, ctx: t.header.algorithm != ALGORITHM,
        lambda t, ctx: UnsupportedAlgorithmError(t.header.algorithm),
    ),
    ClaimRule(
        "audience",
        lambda t, ctx: t.audience != ctx.project_id,
        lambda t, ctx: AudienceMismatchError(expected=ctx.project_id, actual=t.audience),
    ),
    ClaimRule(
        "issuer",
        lambda t, ctx: t.issuer != ctx.issuer,
        lambda t, ctx: IssuerMismatchError(expected=ctx.issuer, actual=t.issuer),
    ),
    ClaimRule(
        "issued_at",
        lambda t, ctx: t.issued_at > ctx.now,
        lambda t, ctx: IssuedInFutureError(issued_at=t.issued_at, now=ctx.now),
    ),
    ClaimRule(
        "expiry",
        lambda t, ctx: t.expires_at < ctx.now,
        lambda t, ctx: TokenExpiredError(expires_at=t.expires_at, now=ctx.now),
    ),
    ClaimRule(
        "subject_present",
        lambda t, ctx: not t.subject,
        lambda t, ctx: EmptySubjectError(),
    ),
    ClaimRule(
        "subject_length",
        lambda t, ctx: len(t.subject) > MAX_UID_LENGTH,
        lambda t, ctx: SubjectTooLongError(len(t.subject)),
    ),
)


class ClaimValidator:
    """Turns a signature-checked token into a trusted Token.

    Args:
        project_id: The project the tokens must be issued for
        clock: Time source for iat/exp checks. Defaults to the system clock.
        rules: Claim rules in evaluation order. Defaults to DEFAULT_RULES.
    """

    def __init__(
        self,
        project_id: str,
        clock: Optional[Clock] = None,
        rules: Sequence[ClaimRule] = DEFAULT_RULES,
    ):
        self.project_id = project_id
        self.clock = clock or SystemClock()
        self.rules = tuple(rules)

    def validate(self, token: UnverifiedToken) -> Token:
        """Apply every rule in order and return the trusted Token.

        Raises:
            TokenVerificationError: The error of the first failing rule
        """
        ctx = ValidationContext(project_id=self.project_id, now=int(self.clock.now()))
        for rule in self.rules:
            if rule.violated(token, ctx):
                raise rule.error(token, ctx)

        return Token(
            issuer=token.issuer,
            audience=token.audience,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
            subject=token.subject,
            uid=token.subject,
            claims=token.claims,
        )
