"""Learner access token validation (ES256 JWT).

Tokens are issued by the identity provider; this service only verifies
them, against the EC public key in ``JWT_PUBLIC_KEY``.  Without one (dev
and test only) an ephemeral key pair is generated on import and
``create_access_token`` can mint tokens that ``decode_access_token``
accepts.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from app.core.config import SETTINGS, Settings

ALGORITHM = "ES256"
ACCESS_TOKEN_TTL_MIN = 15


def load_keys(
    settings: Settings,
) -> tuple[ec.EllipticCurvePrivateKey | None, ec.EllipticCurvePublicKey]:
    """Return ``(signing_key, verification_key)`` for the given settings.

    The signing key is None when verifying an external issuer's tokens.
    """
    if settings.jwt_public_key:
        key = serialization.load_pem_public_key(settings.jwt_public_key.encode())
        if not isinstance(key, ec.EllipticCurvePublicKey) or not isinstance(
            key.curve, ec.SECP256R1
        ):
            raise ValueError("JWT_PUBLIC_KEY must be a P-256 EC public key")
        return None, key
    if settings.is_prod:
        raise ValueError("JWT_PUBLIC_KEY is required when APP_ENV=prod")
    private_key = ec.generate_private_key(ec.SECP256R1())
    return private_key, private_key.public_key()


_private_key, _public_key = load_keys(SETTINGS)

ISSUER = SETTINGS.jwt_issuer
AUDIENCE = SETTINGS.jwt_audience


def create_access_token(
    *,
    sub: str,
    roles: list[str] | None = None,
    ttl_minutes: int = ACCESS_TOKEN_TTL_MIN,
) -> str:
    if _private_key is None:
        raise RuntimeError("Tokens are issued by the identity provider (JWT_PUBLIC_KEY is set)")
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=ttl_minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
        "roles": roles or ["learner"],
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins the algorithm to ES256 so alg:none and alg-switching tokens are
    rejected.  Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
