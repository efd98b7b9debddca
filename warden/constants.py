"""Identity provider endpoints and token limits."""

# Audience of every custom token; the provider exchanges these for ID tokens.
CUSTOM_TOKEN_AUDIENCE = (
    "https://identitytoolkit.googleapis.com/google.identity.identitytoolkit.v1.IdentityToolkit"
)
# Published X.509 certificates that sign ID tokens.
DEFAULT_CERT_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
ISSUER_PREFIX = "https://securetoken.google.com/"

ALGORITHM = "RS256"
TOKEN_LIFETIME_SECONDS = 3600
MAX_UID_LENGTH = 128

RESERVED_CLAIMS = (
    "acr",
    "amr",
    "at_hash",
    "aud",
    "auth_time",
    "azp",
    "cnf",
    "c_hash",
    "exp",
    "firebase",
    "iat",
    "iss",
    "jti",
    "nbf",
    "nonce",
    "sub",
)
