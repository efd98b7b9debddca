"""RSA key loading for signing and verification."""

from __future__ import annotations

from typing import Union

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey

from warden.exceptions import ConfigurationError

PEM_MARKER = b"-----BEGIN"
CERTIFICATE_MARKER = "-----BEGIN CERTIFICATE-----"


def load_private_key(data: Union[str, bytes]) -> RSAPrivateKey:
    """Load an RSA private key for signing custom tokens.

    Accepts PEM text or raw DER bytes, holding either a PKCS#8 or a PKCS#1
    key. Encrypted keys are not supported.

    Raises:
        ConfigurationError: If the data holds no usable RSA private key
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
    if not raw.strip():
        raise ConfigurationError("no private key data found")

    try:
        if PEM_MARKER in raw:
            key = serialization.load_pem_private_key(raw, password=None)
        else:
            key = serialization.load_der_private_key(raw, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise ConfigurationError(
            f"private key should be a PEM or plain PKCS1 or PKCS8; parse error: {e}"
        ) from e

    if not isinstance(key, RSAPrivateKey):
        raise ConfigurationError("private key is not an RSA key")
    return key


def load_verification_key(pem: str) -> RSAPublicKey:
    """Load the RSA public key from a PEM certificate or public key.

    The provider publishes X.509 certificates; bare SubjectPublicKeyInfo
    PEM is accepted as well.

    Raises:
        ValueError: If the PEM cannot be parsed or is not an RSA key
    """
    raw = pem.encode("utf-8")
    if CERTIFICATE_MARKER in pem:
        key = x509.load_pem_x509_certificate(raw).public_key()
    else:
        key = serialization.load_pem_public_key(raw)

    if not isinstance(key, RSAPublicKey):
        raise ValueError("verification key is not an RSA key")
    return key
