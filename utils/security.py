"""
security helpers:
- Argon2 password hashing via argon2-cffi
- Access-token (JWT) creation/verification via PyJWT
- Opaque refresh-token values from the `secrets` CSPRNG
"""
from __future__ import annotations

import base64
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Mapping

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

ph = PasswordHasher()

REFRESH_TOKEN_BYTES = 64


class TokenError(Exception):
    """Raised when an access token cannot be trusted."""


@dataclass(frozen=True)
class JwtSettings:
    secret: str
    issuer: str
    audience: str
    access_token_expires: timedelta
    refresh_token_expires: timedelta
    algorithm: str = "HS256"

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "JwtSettings":
        """Build settings from a Flask config (or any dict with the same keys)."""
        return cls(
            secret=config["JWT_SECRET"],
            issuer=config["JWT_ISSUER"],
            audience=config["JWT_AUDIENCE"],
            access_token_expires=config["ACCESS_TOKEN_EXPIRES"],
            refresh_token_expires=config["REFRESH_TOKEN_EXPIRES"],
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
        )


def hash_password(password: str) -> str:
    """Hash a plaintext password using Argon2
    """
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """ Verify a plaintext password using argon2
    """
    try:
        return ph.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID).
    """
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def build_claims(user_id: str, username: str, roles: Iterable[str]) -> Dict[str, Any]:
    """Identity claims plus one `role` entry per assigned role."""
    return {
        "name": username,
        "sub": str(user_id),
        "role": list(roles),
    }


def create_access_token(user_id: str, username: str, roles: Iterable[str], settings: JwtSettings) -> str:
    """
    Sign a short-lived access token for the user.
    """
    now = _now()
    payload = build_claims(user_id, username, roles)
    payload.update(
        {
            "iss": settings.issuer,
            "aud": settings.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + settings.access_token_expires).timestamp()),
            "type": "access",
            "jti": generate_jti(),
        }
    )
    return jwt.encode(payload, settings.secret, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: JwtSettings, verify_exp: bool = True) -> Dict[str, Any]:
    """
    Decode and validate an access token. Raises TokenError on a bad signature,
    issuer, audience or type, and on expiry unless verify_exp is False.
    """
    try:
        decoded = jwt.decode(
            token,
            settings.secret,
            algorithms=[settings.algorithm],
            audience=settings.audience,
            issuer=settings.issuer,
            options={"verify_exp": verify_exp},
        )
    except jwt.ExpiredSignatureError:
        raise TokenError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise TokenError(f"Invalid token: {exc}")

    if decoded.get("type") != "access":
        raise TokenError("Wrong token type")
    return decoded


def generate_refresh_token_value() -> str:
    """64 random bytes, base64 encoded for cookie transport."""
    return base64.b64encode(secrets.token_bytes(REFRESH_TOKEN_BYTES)).decode("ascii")
