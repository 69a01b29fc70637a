"""
Registration, login and token refresh.

Every access token handed out is stored as a Token row. Issuing a new one for a
user revokes all of that user's still-valid rows first, under storage.user_lock(),
so at most one stored access token per user is valid at any time.
Refresh tokens are only returned to the caller, never stored.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError

from models import storage
from models.token import Token, TokenType
from models.user import Role, User
from utils.exceptions import DuplicateUserError, InvalidCredentialsError, UserNotFoundError
from utils.security import (
    hash_password,
    verify_password,
    create_access_token,
    create_refresh_token,
    extract_subject,
    is_token_valid,
)

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def _auth_response(access_token: str, refresh_token: str) -> Dict[str, str]:
    return {"access_token": access_token, "refresh_token": refresh_token}


def _new_token_record(user: User, jwt_token: str) -> Token:
    return Token(
        user_id=user.id,
        token=jwt_token,
        token_type=TokenType.BEARER,
        expired=False,
        revoked=False,
    )


def _revoke_all_user_tokens(user: User) -> int:
    valid_tokens = storage.find_all_valid_tokens_by_user(user.id)
    if not valid_tokens:
        return 0
    return storage.revoke_all(valid_tokens)


def _rotate_user_token(user: User, jwt_token: str) -> None:
    """Revoke every valid token of `user` and store `jwt_token` in one transaction."""
    with storage.user_lock(user.id):
        revoked = _revoke_all_user_tokens(user)
        storage.new(_new_token_record(user, jwt_token))
        storage.save()
    logger.debug("stored new access token for user %s, revoked %d", user.id, revoked)


def register(firstname: Optional[str], lastname: Optional[str], email: str,
             password: str, role: Role = Role.USER) -> Dict[str, str]:
    email = email.strip().lower()
    if storage.find_user_by_email(email) is not None:
        raise DuplicateUserError()

    user = User(
        firstname=firstname,
        lastname=lastname,
        email=email,
        password_hash=hash_password(password),
        role=role or Role.USER,
    )
    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)

    storage.new(user)
    storage.new(_new_token_record(user, access_token))
    try:
        storage.save()
    except IntegrityError as err:
        # lost a race with a concurrent signup for the same email
        raise DuplicateUserError() from err

    logger.info("registered user %s with role %s", user.id, user.role.value)
    return _auth_response(access_token, refresh_token)


def check_credentials(email: str, password: str) -> None:
    """Raise InvalidCredentialsError unless `password` matches the stored hash for `email`."""
    user = storage.find_user_by_email(email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("rejected login attempt")
        raise InvalidCredentialsError()


def authenticate(email: str, password: str) -> Dict[str, str]:
    check_credentials(email, password)

    user = storage.find_user_by_email(email)
    if user is None:
        logger.error("user vanished between credential check and lookup")
        raise UserNotFoundError("User not found after successful credential check", status=500)

    access_token = create_access_token(user)
    refresh_token = create_refresh_token(user)
    _rotate_user_token(user, access_token)

    logger.info("user %s logged in", user.id)
    return _auth_response(access_token, refresh_token)


def refresh_token(authorization_header: Optional[str]) -> Optional[Dict[str, str]]:
    """
    Mint a new access token from a `Bearer <refresh token>` header value.

    Returns None, touching nothing, when the header is missing or malformed or
    when the refresh token is expired or belongs to someone else.
    Raises InvalidTokenError if the token cannot be decoded and
    UserNotFoundError if its subject is unknown.
    """
    if not authorization_header or not authorization_header.startswith(BEARER_PREFIX):
        return None

    presented = authorization_header[len(BEARER_PREFIX):]
    email = extract_subject(presented)
    if not email:
        return None

    user = storage.find_user_by_email(email)
    if user is None:
        raise UserNotFoundError()

    if not is_token_valid(presented, user):
        logger.info("ignored expired or mismatched refresh token for user %s", user.id)
        return None

    access_token = create_access_token(user)
    _rotate_user_token(user, access_token)

    logger.info("refreshed access token for user %s", user.id)
    return _auth_response(access_token, presented)


def logout(token: Token) -> None:
    """Expire and revoke a stored access token."""
    storage.revoke_all([token])
    storage.save()
    logger.info("user %s logged out", token.user_id)
