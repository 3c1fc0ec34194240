# services/jwt_signer.py
"""
Service-account assertion for Google's OAuth2 jwt-bearer grant.

header: {"alg": "RS256", "typ": "JWT"}
claims: {iss, scope, aud, iat, exp = iat + 3600}
"""
import time
from typing import Callable, Optional

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from services.errors import InvalidKeyMaterial
from services.settings import SHEETS_SCOPE, TOKEN_URL, ServiceAccount

ASSERTION_LIFETIME_SEC = 3600


def load_private_key(pem: str) -> rsa.RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise InvalidKeyMaterial(f"Could not load service account private key: {e}")
    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidKeyMaterial(
            f"Service account key must be RSA, got {type(key).__name__}"
        )
    return key


def build_claims(
    issuer: str,
    now: int,
    scope: str = SHEETS_SCOPE,
    audience: str = TOKEN_URL,
) -> dict:
    return {
        "iss": issuer,
        "scope": scope,
        "aud": audience,
        "iat": now,
        "exp": now + ASSERTION_LIFETIME_SEC,
    }


def sign_assertion(
    account: ServiceAccount,
    scope: str = SHEETS_SCOPE,
    audience: str = TOKEN_URL,
    clock: Optional[Callable[[], float]] = None,
) -> str:
    """Return the compact (three-segment) RS256 JWT for the account."""
    key = load_private_key(account.private_key)
    now = int((clock or time.time)())
    claims = build_claims(account.client_email, now, scope=scope, audience=audience)
    try:
        return jwt.encode(claims, key, algorithm="RS256", headers={"typ": "JWT"})
    except (ValueError, TypeError, jwt.PyJWTError) as e:
        raise InvalidKeyMaterial(f"Signing the assertion failed: {e}")
