"""Compact JWT encoding and decoding.

encode_token() signs a header and payload with RS256. decode_token() splits
and decodes a compact JWT without trusting any of it; the signature is
checked by SignatureVerifier and the claims by ClaimValidator.
"""

from __future__ import annotations

import binascii
import json
import math
from typing import Any, Dict, Mapping

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from jwt.algorithms import RSAAlgorithm
from jwt.utils import base64url_decode, base64url_encode

from warden.constants import ALGORITHM
from warden.exceptions import MalformedTokenError, UnsupportedAlgorithmError
from warden.models import JWTHeader, UnverifiedToken

_rs256 = RSAAlgorithm(RSAAlgorithm.SHA256)

_STRING_CLAIMS = ("iss", "aud", "sub")
_NUMERIC_CLAIMS = ("iat", "exp")


def _encode_segment(data: Mapping[str, Any]) -> bytes:
    return base64url_encode(
        json.dumps(data, separators=(",", ":"), allow_nan=False).encode("utf-8")
    )


def encode_token(
    header: JWTHeader,
    payload: Mapping[str, Any],
    signing_key: RSAPrivateKey,
) -> str:
    """Serialize and sign a token.

    Args:
        header: JOSE header; only RS256 is supported
        payload: JSON-serializable claims
        signing_key: RSA private key to sign with

    Returns:
        Compact JWT string: header.payload.signature, unpadded base64url

    Raises:
        UnsupportedAlgorithmError: If the header names another algorithm
        TypeError: If the payload is not JSON-serializable
        ValueError: If the payload holds NaN or infinity
    """
    if header.algorithm != ALGORITHM:
        raise UnsupportedAlgorithmError(header.algorithm)

    signing_input = _encode_segment(header.to_dict()) + b"." + _encode_segment(payload)
    signature = _rs256.sign(signing_input, signing_key)
    return (signing_input + b"." + base64url_encode(signature)).decode("ascii")


def _decode_segment(segment: str, name: str) -> Dict[str, Any]:
    try:
        decoded = json.loads(base64url_decode(segment.encode("ascii")))
    except (ValueError, binascii.Error) as e:
        raise MalformedTokenError(f"Token {name} could not be decoded: {e}") from e
    except RecursionError as e:
        raise MalformedTokenError(f"Token {name} is nested too deeply") from e

    if not isinstance(decoded, dict):
        raise MalformedTokenError(f"Token {name} must be a JSON object")
    return decoded


def _parse_header(header: Dict[str, Any]) -> JWTHeader:
    algorithm = header.get("alg")
    if not isinstance(algorithm, str):
        raise MalformedTokenError("Token header has no 'alg' field")

    key_id = header.get("kid")
    if key_id is not None and not isinstance(key_id, str):
        raise MalformedTokenError("Token header 'kid' must be a string")

    token_type = header.get("typ")
    if token_type is not None and not isinstance(token_type, str):
        raise MalformedTokenError("Token header 'typ' must be a string")

    # An empty kid is as good as none.
    return JWTHeader(algorithm=algorithm, key_id=key_id or None, token_type=token_type)


def _check_payload_types(payload: Dict[str, Any]) -> None:
    for name in _STRING_CLAIMS:
        if name in payload and not isinstance(payload[name], str):
            raise MalformedTokenError(f"Token claim '{name}' must be a string")
    for name in _NUMERIC_CLAIMS:
        if name not in payload:
            continue
        value = payload[name]
        integral = isinstance(value, int) and not isinstance(value, bool)
        if isinstance(value, float):
            # Whole seconds only; 1700000000.0 is fine, 1700000000.9 is not.
            integral = math.isfinite(value) and value.is_integer()
        if not integral:
            raise MalformedTokenError(f"Token claim '{name}' must be an integer timestamp")


def decode_token(token: str) -> UnverifiedToken:
    """Split and decode a compact JWT without verifying it.

    The signed bytes are the original first two segments as received,
    never a re-serialization of the decoded JSON.

    Raises:
        MalformedTokenError: If the token is not three segments of
            base64url-encoded JSON objects
    """
    if not isinstance(token, str):
        raise MalformedTokenError("Token must be a string")

    parts = token.split(".")
    if len(parts) != 3:
        raise MalformedTokenError(
            f"Token must have 3 segments separated by '.', got {len(parts)}"
        )
    header_segment, payload_segment, signature_segment = parts

    header = _parse_header(_decode_segment(header_segment, "header"))
    payload = _decode_segment(payload_segment, "payload")
    _check_payload_types(payload)

    try:
        signature = base64url_decode(signature_segment.encode("ascii"))
    except (ValueError, binascii.Error) as e:
        raise MalformedTokenError(f"Token signature could not be decoded: {e}") from e

    return UnverifiedToken(
        header=header,
        payload=payload,
        signed_bytes=f"{header_segment}.{payload_segment}".encode("ascii"),
        signature=signature,
    )
