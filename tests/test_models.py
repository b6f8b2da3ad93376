"""Tests for the refresh-token validity rules and the role/user models."""
from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from models.base_model import utcnow
from models.refresh_token import RefreshToken
from models.role import Role, Roles
from models.user import User
from services.refresh_tokens import RefreshTokenRepository
from services.user_manager import UserManager


def _token(**kwargs):
    fields = {
        "token": "abc",
        "user_id": "u-1",
        "expires_on": utcnow() + timedelta(days=3),
        "created_by_ip": "127.0.0.1",
    }
    fields.update(kwargs)
    return RefreshToken(**fields)


class TestRefreshTokenValidity:

    def test_fresh_token_is_active(self):
        token = _token()
        assert token.is_active
        assert not token.is_revoked
        assert not token.is_expired

    def test_revoked_token_is_not_active(self):
        token = _token()
        token.revoke("192.168.0.7")

        assert token.is_revoked
        assert token.revoked_by_ip == "192.168.0.7"
        assert token.revoked_on is not None
        assert not token.is_active

    def test_expired_token_is_not_active(self):
        token = _token(expires_on=utcnow() - timedelta(minutes=1))
        assert token.is_expired
        assert not token.is_active


class TestRepositories:

    def test_roles_are_seeded(self, storage):
        names = {r.name for r in storage.get_session().query(Role).all()}
        assert names == set(Roles.ALL)

    def test_seeding_twice_is_harmless(self, storage):
        storage.seed_roles()
        assert storage.count(Role) == len(Roles.ALL)

    def test_refresh_token_lookup_is_scoped_to_owner(self, storage):
        users = UserManager(storage)
        with storage.transaction():
            _, user = users.create("owner", "long-enough-pw")
        repo = RefreshTokenRepository(storage)
        with storage.transaction(isolation_level=None):
            repo.create(_token(token="owned", user_id=user.id))

        assert repo.find(user.id, "owned") is not None
        assert repo.find("someone-else", "owned") is None
        assert repo.find(user.id, None) is None
        assert repo.find_by_token("owned").user_id == user.id
        assert repo.find_by_token("missing") is None

    def test_revocation_is_persisted_without_deleting(self, storage):
        users = UserManager(storage)
        with storage.transaction():
            _, user = users.create("owner", "long-enough-pw")
        repo = RefreshTokenRepository(storage)
        with storage.transaction(isolation_level=None):
            token = repo.create(_token(token="to-revoke", user_id=user.id))

        with storage.transaction(isolation_level=None):
            token.revoke("10.0.0.2")
            repo.update(token)
        storage.close()

        reloaded = repo.find(user.id, "to-revoke")
        assert reloaded is not None
        assert reloaded.is_revoked

    def test_add_to_role_twice_fails(self, storage):
        users = UserManager(storage)
        with storage.transaction():
            _, user = users.create("owner", "long-enough-pw")
            assert users.add_to_role(user, Roles.USER).succeeded
            second = users.add_to_role(user, Roles.USER)

        assert not second.succeeded
        assert "already in role" in second.first_error

    def test_unknown_role_fails(self, storage):
        users = UserManager(storage)
        with storage.transaction():
            _, user = users.create("owner", "long-enough-pw")
            result = users.add_to_role(user, "Wizard")

        assert not result.succeeded

    def test_verify_password(self, storage):
        users = UserManager(storage)
        with storage.transaction():
            _, user = users.create("owner", "long-enough-pw")

        assert users.verify_password(user, "long-enough-pw")
        assert not users.verify_password(user, "nope")
        assert users.find_by_username("  OWNER ") is user

    def test_usernames_differing_only_by_case_collide(self, storage):
        storage.new(User(username="Alice", password_hash="x"))
        storage.save()

        storage.new(User(username=" alice", password_hash="y"))
        with pytest.raises(IntegrityError):
            storage.save()
        assert storage.count(User) == 1
        assert UserManager(storage).find_by_username("ALICE").normalized_username == "alice"
