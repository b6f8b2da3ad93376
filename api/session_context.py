"""
Request-scoped session context handed to AuthService.

Reads the client IP and the current token cookies from the Flask request, and
queues cookie writes that `apply()` flushes onto the outgoing response.
"""
from __future__ import annotations

import logging
from datetime import datetime

from flask import Request, Response

from utils.security import JwtSettings, TokenError, decode_access_token

logger = logging.getLogger(__name__)


class RequestSessionContext:

    def __init__(
        self,
        request: Request,
        settings: JwtSettings,
        access_cookie: str = "access_token",
        refresh_cookie: str = "refresh_token",
        secure: bool = False,
    ):
        self.request = request
        self.settings = settings
        self.access_cookie = access_cookie
        self.refresh_cookie = refresh_cookie
        self.secure = secure
        self._pending: list[tuple[str, str | None, datetime | None]] = []

    def ip_address(self) -> str | None:
        forwarded = self.request.headers.get("X-Forwarded-For", "")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
        return self.request.remote_addr or None

    def access_token(self) -> str | None:
        token = self.request.cookies.get(self.access_cookie)
        if token:
            return token
        auth = self.request.headers.get("Authorization", "")
        if auth.startswith("Bearer "):
            return auth.split(" ", 1)[1].strip() or None
        return None

    def refresh_token(self) -> str | None:
        return self.request.cookies.get(self.refresh_cookie) or None

    def user_id(self) -> str | None:
        """Subject of the current access token. Expired tokens still count: refresh runs after expiry."""
        token = self.access_token()
        if not token:
            return None
        try:
            decoded = decode_access_token(token, self.settings, verify_exp=False)
        except TokenError as exc:
            logger.warning(f"user_id - Rejected access token: {exc}")
            return None
        return decoded.get("sub")

    def set_access_token(self, value: str, expires: datetime):
        self._pending.append((self.access_cookie, value, expires))

    def set_refresh_token(self, value: str, expires: datetime):
        self._pending.append((self.refresh_cookie, value, expires))

    def reset_access_token(self):
        self._pending.append((self.access_cookie, None, None))

    def reset_refresh_token(self):
        self._pending.append((self.refresh_cookie, None, None))

    def apply(self, response: Response) -> Response:
        """Write queued cookie changes onto the response, in order."""
        for name, value, expires in self._pending:
            if value is None:
                response.delete_cookie(name, httponly=True, secure=self.secure, samesite="Lax")
            else:
                response.set_cookie(
                    name,
                    value,
                    expires=expires,
                    httponly=True,
                    secure=self.secure,
                    samesite="Lax",
                )
        self._pending.clear()
        return response
