"""
User management: creation, lookup, password checks and role assignment.

Expected failures come back as IdentityResult values. Writes are added to the
session and flushed but never committed here; the caller owns the transaction.
"""
from __future__ import annotations

import logging

from models.role import Role
from models.user import User, normalize_username
from services.results import IdentityResult
from utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class UserManager:

    def __init__(self, storage):
        self.storage = storage

    @property
    def session(self):
        return self.storage.get_session()

    def find_by_id(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        return self.session.get(User, user_id)

    def find_by_username(self, username: str | None) -> User | None:
        if not username:
            return None
        return (
            self.session.query(User)
            .filter(User.normalized_username == normalize_username(username))
            .first()
        )

    def create(self, username: str, password: str) -> tuple[IdentityResult, User | None]:
        username = (username or "").strip()
        if not username:
            return IdentityResult.failed("Username is required."), None
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            return IdentityResult.failed(
                f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters."
            ), None
        if self.find_by_username(username):
            return IdentityResult.failed(f"Username '{username}' is already taken."), None

        user = User(username=username, password_hash=hash_password(password))
        self.storage.new(user)
        self.storage.flush()
        return IdentityResult.success(), user

    def verify_password(self, user: User, password: str) -> bool:
        return verify_password(password, user.password_hash)

    def get_roles(self, user: User) -> list[str]:
        return user.role_names

    def add_to_role(self, user: User, role_name: str) -> IdentityResult:
        role = self.session.query(Role).filter(Role.name == role_name).first()
        if role is None:
            return IdentityResult.failed(f"Role {role_name} does not exist.")
        if role in user.roles:
            return IdentityResult.failed(f"User already in role '{role_name}'.")
        user.roles.append(role)
        logger.info(f"add_to_role - {user.username} added to {role_name}")
        self.storage.flush()
        return IdentityResult.success()


