"""
Refresh-token persistence: create, update and lookup.

Writes are flushed, not committed; callers wrap them in storage.transaction()
so a rotation (revoke + create) lands as one unit.
"""
from __future__ import annotations

from models.refresh_token import RefreshToken


class RefreshTokenRepository:

    def __init__(self, storage):
        self.storage = storage

    def find_by_token(self, token: str | None) -> RefreshToken | None:
        """Stored token with this value (values are unique), revoked or not."""
        if not token:
            return None
        return (
            self.storage.get_session()
            .query(RefreshToken)
            .filter(RefreshToken.token == token)
            .first()
        )

    def find(self, user_id: str | None, token: str | None) -> RefreshToken | None:
        """Stored token with this value owned by this user, revoked or not."""
        stored = self.find_by_token(token)
        if stored is None or not user_id or stored.user_id != user_id:
            return None
        return stored

    def create(self, refresh_token: RefreshToken) -> RefreshToken:
        self.storage.new(refresh_token)
        self.storage.flush()
        return refresh_token

    def update(self, refresh_token: RefreshToken) -> RefreshToken:
        self.storage.new(refresh_token)
        self.storage.flush()
        return refresh_token
