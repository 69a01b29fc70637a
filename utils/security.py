"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT creation/verification via PyJWT
- JTI generation for token identifiers

Tokens carry the user's email as subject. Expiry is checked separately from
the signature so that an expired refresh token can be told apart from a forged one.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError, VerificationError, InvalidHashError

from flask import current_app

from utils.exceptions import InvalidTokenError

ph = PasswordHasher()


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


def generate_token(user, expires_delta: timedelta, token_type: str = "access",
                   extra_claims: Dict[str, Any] | None = None) -> str:
    """
    Build and sign a JWT for `user`.
    extra_claims are merged first so the registered claims always win.
    """
    now = _now()
    payload = dict(extra_claims or {})
    payload.update({
        "iss": current_app.config.get("JWT_ISSUER", "wishlist-gateway"),
        "sub": str(user.email),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
        "type": token_type,
        "jti": generate_jti(),
    })
    role = getattr(user, "role", None)
    if role is not None:
        payload.setdefault("role", getattr(role, "value", role))
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=current_app.config["JWT_ALGORITHM"])


def create_access_token(user) -> str:
    return generate_token(user, current_app.config["ACCESS_TOKEN_EXPIRES"], token_type="access")


def create_refresh_token(user) -> str:
    return generate_token(user, current_app.config["REFRESH_TOKEN_EXPIRES"], token_type="refresh")


def _decode(token: str, verify_exp: bool) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config["JWT_ALGORITHM"]],
            options={"verify_exp": verify_exp, "require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token expired")
    except jwt.InvalidTokenError as exc:
        raise InvalidTokenError(f"Invalid token: {exc}")


def decode_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises InvalidTokenError on invalid signature/expired jwt
    """
    return _decode(token, verify_exp=True)


def extract_subject(token: str) -> str:
    """
    Return the subject (user email) of a correctly signed token.
    Expiry is not checked here; use is_token_valid for that.
    """
    return _decode(token, verify_exp=False)["sub"]


def is_token_valid(token: str, user) -> bool:
    """True if `token` belongs to `user` and has not expired yet."""
    try:
        claims = _decode(token, verify_exp=False)
    except InvalidTokenError:
        return False
    if claims.get("sub") != user.email:
        return False
    return int(claims["exp"]) > int(_now().timestamp())
