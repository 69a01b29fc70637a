from __future__ import annotations
from functools import wraps
from flask import request, g, abort
from utils.exceptions import InvalidTokenError
from utils.security import decode_token
from models import storage


def jwt_required():
    """
    Only let requests through that carry a live access token:
    good signature, not expired, and stored as neither expired nor revoked.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                abort(401, description="Missing or invalid Authorization header")
            token = auth.split(" ", 1)[1].strip()
            try:
                decoded = decode_token(token)
            except InvalidTokenError as e:
                abort(401, description=str(e))

            stored = storage.find_token(token)
            if stored is None or not stored.is_valid:
                abort(401, description="Token revoked")

            user = storage.find_user_by_email(decoded.get("sub"))
            if not user or user.id != stored.user_id:
                abort(401, description="User not found")
            g.current_user = user
            g.current_token = stored
            return fn(*args, **kwargs)

        return wrapper

    return decorator
