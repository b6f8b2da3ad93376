"""Tests for password hashing and token helpers."""
import base64
from dataclasses import replace
from datetime import timedelta

import jwt
import pytest

from utils.security import (
    JwtSettings,
    TokenError,
    build_claims,
    create_access_token,
    decode_access_token,
    generate_refresh_token_value,
    hash_password,
    verify_password,
)


class TestPasswords:

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("s3cret-pass")
        assert hashed != "s3cret-pass"
        assert verify_password("s3cret-pass", hashed)

    def test_mismatch_returns_false(self):
        assert verify_password("other", hash_password("s3cret-pass")) is False

    def test_garbage_hash_returns_false(self):
        assert verify_password("s3cret-pass", "not-an-argon2-hash") is False


class TestAccessTokens:

    def test_claims_carry_identity_and_every_role(self, settings):
        token = create_access_token("user-1", "alice", ["Admin", "User"], settings)
        decoded = jwt.decode(token, settings.secret, algorithms=["HS256"], audience=settings.audience)

        assert decoded["sub"] == "user-1"
        assert decoded["name"] == "alice"
        assert decoded["role"] == ["Admin", "User"]
        assert decoded["iss"] == settings.issuer
        assert decoded["type"] == "access"
        assert decoded["exp"] - decoded["iat"] == 15 * 60

    def test_build_claims_without_roles(self):
        assert build_claims("u", "bob", []) == {"name": "bob", "sub": "u", "role": []}

    def test_expired_token_raises(self, settings):
        expired = replace(settings, access_token_expires=timedelta(minutes=-5))
        token = create_access_token("user-1", "alice", [], expired)

        with pytest.raises(TokenError, match="expired"):
            decode_access_token(token, settings)

    def test_expired_token_accepted_when_expiry_not_verified(self, settings):
        expired = replace(settings, access_token_expires=timedelta(minutes=-5))
        token = create_access_token("user-1", "alice", [], expired)

        assert decode_access_token(token, settings, verify_exp=False)["sub"] == "user-1"

    def test_wrong_audience_raises(self, settings):
        token = create_access_token("user-1", "alice", [], settings)
        with pytest.raises(TokenError):
            decode_access_token(token, replace(settings, audience="someone-else"))

    def test_wrong_issuer_raises(self, settings):
        token = create_access_token("user-1", "alice", [], settings)
        with pytest.raises(TokenError):
            decode_access_token(token, replace(settings, issuer="someone-else"))

    def test_bad_signature_raises_even_without_expiry_check(self, settings):
        token = create_access_token("user-1", "alice", [], replace(settings, secret="x" * 40))
        with pytest.raises(TokenError):
            decode_access_token(token, settings, verify_exp=False)

    def test_settings_from_mapping(self):
        config = {
            "JWT_SECRET": "k" * 40,
            "JWT_ISSUER": "iss",
            "JWT_AUDIENCE": "aud",
            "ACCESS_TOKEN_EXPIRES": timedelta(minutes=5),
            "REFRESH_TOKEN_EXPIRES": timedelta(days=2),
        }
        settings = JwtSettings.from_mapping(config)
        assert settings.algorithm == "HS256"
        assert settings.refresh_token_expires == timedelta(days=2)


class TestRefreshTokenValues:

    def test_value_is_64_random_bytes(self):
        value = generate_refresh_token_value()
        assert len(base64.b64decode(value)) == 64

    def test_values_are_unique(self):
        assert len({generate_refresh_token_value() for _ in range(50)}) == 50
