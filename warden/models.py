"""Token models - data structures for minting and verifying tokens."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

# Payload fields modeled explicitly on Token; everything else lands in claims.
MODELED_CLAIMS = frozenset({"iss", "aud", "iat", "exp", "sub"})


@dataclass(frozen=True)
class JWTHeader:
    """The JOSE header of a compact JWT."""

    algorithm: str
    key_id: Optional[str] = None
    token_type: Optional[str] = "JWT"

    def to_dict(self) -> Dict[str, str]:
        header = {"alg": self.algorithm}
        if self.token_type is not None:
            header["typ"] = self.token_type
        if self.key_id is not None:
            header["kid"] = self.key_id
        return header


@dataclass(frozen=True)
class UnverifiedToken:
    """A decoded but untrusted token.

    Produced by decode_token(). Nothing in here has been checked: the
    signature, issuer, audience and timing are all unverified. Only
    ClaimValidator turns one of these into a Token.

    Missing registered claims read as zero values ("" or 0), so a token
    without 'exp' reads as long expired.
    """

    header: JWTHeader
    payload: Dict[str, Any]
    signed_bytes: bytes
    signature: bytes

    @property
    def issuer(self) -> str:
        return self.payload.get("iss", "")

    @property
    def audience(self) -> str:
        return self.payload.get("aud", "")

    @property
    def issued_at(self) -> int:
        return int(self.payload.get("iat", 0))

    @property
    def expires_at(self) -> int:
        return int(self.payload.get("exp", 0))

    @property
    def subject(self) -> str:
        return self.payload.get("sub", "")

    @property
    def claims(self) -> Dict[str, Any]:
        return {k: v for k, v in self.payload.items() if k not in MODELED_CLAIMS}


@dataclass(frozen=True)
class Token:
    """A verified ID token.

    Provides typed fields for the registered JWT claims plus uid, the id of
    the user the token belongs to. Any additional claims are exposed through
    the read-only claims mapping.
    """

    issuer: str
    audience: str
    issued_at: int
    expires_at: int
    subject: str
    uid: str
    claims: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "claims", MappingProxyType(dict(self.claims)))

    def to_dict(self) -> Dict[str, Any]:
        """Return the token in its payload form."""
        payload = dict(self.claims)
        payload.update(
            {
                "iss": self.issuer,
                "aud": self.audience,
                "iat": self.issued_at,
                "exp": self.expires_at,
                "sub": self.subject,
                "uid": self.uid,
            }
        )
        return payload


@dataclass
class CustomTokenPayload:
    """Payload of a self-signed custom token, built fresh for each mint."""

    issuer: str
    subject: str
    audience: str
    uid: str
    issued_at: int
    expires_at: int
    claims: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "iss": self.issuer,
            "sub": self.subject,
            "aud": self.audience,
            "uid": self.uid,
            "iat": self.issued_at,
            "exp": self.expires_at,
        }
        if self.claims:
            payload["claims"] = self.claims
        return payload


@dataclass
class KeyFetchResult:
    """Result of fetching the provider's public certificates."""

    keys: Dict[str, str]  # kid -> PEM certificate
    max_age: Optional[int] = None  # seconds, from Cache-Control
