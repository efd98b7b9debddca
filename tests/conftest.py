"""Shared pytest fixtures for warden tests."""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from warden.client import AuthClient
from warden.codec import encode_token
from warden.constants import ISSUER_PREFIX
from warden.core.clock import FixedClock
from warden.keystore import KeyStore
from warden.models import JWTHeader
from warden.transports.static import StaticKeyTransport

CERT_URL = "https://example.com/certs"


def make_certificate(key) -> str:
    """Self-signed PEM certificate for a private key."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "securetoken.test")])
    issued = datetime.datetime(2023, 1, 1, tzinfo=datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(issued)
        .not_valid_after(issued + datetime.timedelta(days=3650))
        .sign(key, hashes.SHA256())
    )
    return cert.public_bytes(serialization.Encoding.PEM).decode()


@pytest.fixture(scope="session")
def rsa_key():
    """Signing key of the provider (and of the test service account)."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_rsa_key():
    """A second key, for rotation and forged-signature tests."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def certificate_pem(rsa_key):
    return make_certificate(rsa_key)


@pytest.fixture(scope="session")
def other_certificate_pem(other_rsa_key):
    return make_certificate(other_rsa_key)


@pytest.fixture
def project_id():
    return "mock-project-id"


@pytest.fixture
def clock():
    """Clock pinned to 2023-11-14T22:13:20Z."""
    return FixedClock(1_700_000_000)


@pytest.fixture
def transport(certificate_pem):
    return StaticKeyTransport({"key-1": certificate_pem}, max_age=3600)


@pytest.fixture
def key_store(transport, clock):
    return KeyStore(CERT_URL, transport, clock=clock)


@pytest.fixture
def signer_email():
    return "svc@mock-project-id.iam.gserviceaccount.com"


@pytest.fixture
def client(project_id, key_store, signer_email, rsa_key, clock):
    return AuthClient(
        project_id=project_id,
        key_store=key_store,
        signer_email=signer_email,
        signing_key=rsa_key,
        clock=clock,
    )


@pytest.fixture
def make_id_token(rsa_key, project_id, clock):
    """Build a signed ID token; keyword arguments override payload claims."""

    def _make(header=None, key=None, drop=(), **claims):
        now = int(clock.now())
        payload = {
            "iss": ISSUER_PREFIX + project_id,
            "aud": project_id,
            "auth_time": now - 60,
            "iat": now - 60,
            "exp": now + 3540,
            "sub": "user-123",
            "firebase": {"sign_in_provider": "password"},
        }
        payload.update(claims)
        for name in drop:
            payload.pop(name, None)
        header = header or JWTHeader(algorithm="RS256", key_id="key-1")
        return encode_token(header, payload, key or rsa_key)

    return _make


@pytest.fixture(scope="session")
def ec_certificate_pem():
    """Certificate for a non-RSA key."""
    return make_certificate(ec.generate_private_key(ec.SECP256R1()))
