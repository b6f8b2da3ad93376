from __future__ import annotations
from functools import wraps
from flask import request, g, abort, current_app
from utils.security import JwtSettings, TokenError, decode_access_token
from models import storage
from models.user import User


def _current_access_token() -> str | None:
    token = request.cookies.get(current_app.config["ACCESS_COOKIE_NAME"])
    if token:
        return token
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth.split(" ", 1)[1].strip()
    return None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = _current_access_token()
            if not token:
                abort(401, description="Missing access token")
            try:
                decoded = decode_access_token(token, JwtSettings.from_mapping(current_app.config))
            except TokenError as e:
                abort(401, description=str(e))

            user = storage.get(User, decoded.get("sub"))
            if not user:
                abort(401, description="User not found")
            g.current_user = user
            g.current_user_roles = decoded.get("role", [])
            g.current_token_jti = decoded.get("jti")
            return fn(*args, **kwargs)

        return wrapper

    return decorator

def roles_required(required_roles: list[str]):
    """
    Allow access if the user has ANY of the required roles.
    Deny (403) only if there is NO overlap between user_roles and required_roles.
    """
    req = set(required_roles or [])
    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user_roles = set(getattr(g, "current_user_roles", []))
            if not (user_roles & req):
                abort(403, description="Insufficient role")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
