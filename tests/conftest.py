"""
Pytest configuration and fixtures for the Store Auth API tests.

The environment is set before anything imports `models`, so the storage
singleton binds to an in-memory SQLite database.
"""
import os

os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import timedelta

import pytest

import models
from api import create_app
from services.auth_service import AuthService
from utils.security import JwtSettings, TokenError, decode_access_token


@pytest.fixture
def storage():
    """Fresh schema (with seeded roles) for every test."""
    models.storage.reload()
    models.storage.seed_roles()
    yield models.storage
    models.storage.drop_all()


@pytest.fixture
def settings():
    return JwtSettings(
        secret="test-secret-key-that-is-long-enough-for-hs256",
        issuer="test-issuer",
        audience="test-audience",
        access_token_expires=timedelta(minutes=15),
        refresh_token_expires=timedelta(days=7),
    )


class FakeSessionContext:
    """In-memory stand-in for the cookie-backed session context."""

    def __init__(self, settings, ip="10.0.0.1"):
        self.settings = settings
        self.ip = ip
        self.cookies = {}
        self.writes = []

    def ip_address(self):
        return self.ip

    def access_token(self):
        return self.cookies.get("access_token")

    def refresh_token(self):
        return self.cookies.get("refresh_token")

    def user_id(self):
        token = self.access_token()
        if not token:
            return None
        try:
            return decode_access_token(token, self.settings, verify_exp=False)["sub"]
        except TokenError:
            return None

    def set_access_token(self, value, expires):
        self.cookies["access_token"] = value
        self.writes.append(("access_token", expires))

    def set_refresh_token(self, value, expires):
        self.cookies["refresh_token"] = value
        self.writes.append(("refresh_token", expires))

    def reset_access_token(self):
        self.cookies.pop("access_token", None)
        self.writes.append(("access_token", None))

    def reset_refresh_token(self):
        self.cookies.pop("refresh_token", None)
        self.writes.append(("refresh_token", None))


@pytest.fixture
def context(settings):
    return FakeSessionContext(settings)


@pytest.fixture
def auth_service(storage, settings, context):
    return AuthService(settings, context, storage=storage)


@pytest.fixture
def signed_up(auth_service):
    """Credentials of a user that already exists."""
    result = auth_service.sign_up("alice", "correct-horse")
    assert result.succeeded
    return "alice", "correct-horse"


@pytest.fixture
def app(storage):
    app = create_app("testing")
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
