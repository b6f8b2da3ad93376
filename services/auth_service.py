"""
Session orchestration: sign-up, sign-in, access-token refresh and sign-out.

AuthService is built once per request around an explicit session context
(client IP, current cookie values, cookie setters). Every public method
returns a ServiceResult; nothing raised inside reaches the caller, except the
missing-IP check in the constructor.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from http import HTTPStatus

from sqlalchemy.exc import IntegrityError

import models
from models.base_model import utcnow
from models.refresh_token import RefreshToken
from models.role import Roles
from models.user import User
from services.errors import MissingClientAddressError, SignUpError
from services.refresh_tokens import RefreshTokenRepository
from services.results import ServiceResult
from services.user_manager import UserManager
from utils.security import JwtSettings, create_access_token, generate_refresh_token_value

logger = logging.getLogger(__name__)

# refresh tokens closer than this to expiry are replaced on refresh
ROTATION_WINDOW = timedelta(days=1)

SIGN_IN_FAILED = "Sign-in failed. Wrong login or password"
INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"
SIGN_UP_FAILED = "Sign-up failed. Please try again later."
SERVICE_UNAVAILABLE = "The request could not be completed. Please try again later."


class AuthService:

    def __init__(
        self,
        settings: JwtSettings,
        context,
        users: UserManager | None = None,
        refresh_tokens: RefreshTokenRepository | None = None,
        storage=None,
    ):
        ip_address = context.ip_address()
        if not ip_address:
            raise MissingClientAddressError()

        self.settings = settings
        self.context = context
        self.ip_address = ip_address
        self.storage = storage or models.storage
        self.users = users or UserManager(self.storage)
        self.refresh_tokens = refresh_tokens or RefreshTokenRepository(self.storage)

    def sign_up(self, username: str, password: str) -> ServiceResult:
        """
        Create the user and give it the default role as one unit of work.
        Nothing is persisted unless both steps succeed.
        """
        logger.info(f"sign_up - Starting sign up for: {username}")
        try:
            with self.storage.transaction(isolation_level="READ COMMITTED"):
                result, _ = self.users.create(username, password)
                if not result.succeeded:
                    raise SignUpError(f"Failed to create user: {result.first_error}")

                user = self.users.find_by_username(username)
                role_result = self.users.add_to_role(user, Roles.USER)
                if not role_result.succeeded:
                    raise SignUpError(f"Failed to add role to user: {role_result.first_error}")
        except SignUpError as exc:
            logger.warning(f"sign_up - Sign up failed for: {username}: {exc}")
            return ServiceResult.fail(str(exc))
        except IntegrityError:
            # lost a race on the unique username index
            logger.warning(f"sign_up - Username conflict for: {username}")
            return ServiceResult.fail(f"Failed to create user: Username '{username}' is already taken.")
        except Exception:
            logger.exception(f"sign_up - Sign up failed for: {username}")
            return ServiceResult.fail(SIGN_UP_FAILED, HTTPStatus.INTERNAL_SERVER_ERROR)

        logger.info(f"sign_up - Sign up successful for: {username}")
        return ServiceResult.success(HTTPStatus.CREATED)

    def sign_in(self, username: str, password: str) -> ServiceResult:
        logger.info(f"sign_in - Attempting sign in for: {username}")
        try:
            user = self._verify_user(username, password)

            if user is None:
                logger.warning(f"sign_in - Sign in failed for: {username}")
                return ServiceResult.fail(SIGN_IN_FAILED, HTTPStatus.UNAUTHORIZED)

            access_token = self._generate_access_token(user)
            with self.storage.transaction(isolation_level=None):
                refresh_token = self._generate_refresh_token(user)
        except Exception:
            logger.exception(f"sign_in - Sign in failed for: {username}")
            return ServiceResult.fail(SERVICE_UNAVAILABLE, HTTPStatus.INTERNAL_SERVER_ERROR)

        self.context.set_access_token(access_token, self._access_cookie_expiry())
        self.context.set_refresh_token(refresh_token.token, self._refresh_cookie_expiry(refresh_token))
        logger.info(f"sign_in - Sign in successful for: {username}")

        return ServiceResult.success()

    def refresh_token(self) -> ServiceResult:
        """
        Issue a new access token for a valid refresh token. The refresh token
        itself is only rotated once it is within ROTATION_WINDOW of expiring;
        revoking the old one and storing the replacement commit together.
        """
        logger.info("refresh_token - Starting a token refresh.")
        replacement = None
        try:
            user, stored = self._current_refresh_token()

            if stored is None or not stored.is_active:
                logger.warning("refresh_token - Invalid user id or refresh token.")
                return ServiceResult.fail(INVALID_REFRESH_TOKEN, HTTPStatus.UNAUTHORIZED)

            if stored.expires_on - utcnow() < ROTATION_WINDOW:
                with self.storage.transaction(isolation_level=None):
                    self._revoke_refresh_token(stored)
                    replacement = self._generate_refresh_token(user)
                logger.info(f"refresh_token - Refresh token rotated for user: {user.id}")

            access_token = self._generate_access_token(user)
        except Exception:
            logger.exception("refresh_token - Token refresh failed.")
            return ServiceResult.fail(SERVICE_UNAVAILABLE, HTTPStatus.INTERNAL_SERVER_ERROR)

        if replacement is not None:
            self.context.set_refresh_token(replacement.token, self._refresh_cookie_expiry(replacement))
        self.context.set_access_token(access_token, self._access_cookie_expiry())
        logger.info("refresh_token - Token successfully renewed.")

        return ServiceResult.success()

    def sign_out(self) -> ServiceResult:
        logger.info("sign_out - Logging out the user.")
        try:
            _, stored = self._current_refresh_token()

            if stored is None or not stored.is_active:
                logger.warning("sign_out - Invalid user id or refresh token.")
                return ServiceResult.fail(INVALID_REFRESH_TOKEN, HTTPStatus.UNAUTHORIZED)

            with self.storage.transaction(isolation_level=None):
                self._revoke_refresh_token(stored)
        except Exception:
            logger.exception("sign_out - Sign out failed.")
            return ServiceResult.fail(SERVICE_UNAVAILABLE, HTTPStatus.INTERNAL_SERVER_ERROR)

        self.context.reset_access_token()
        self.context.reset_refresh_token()

        return ServiceResult.success()

    def _current_refresh_token(self) -> tuple[User | None, RefreshToken | None]:
        """
        Owner and row of the caller's refresh token. The access cookie may be
        gone (it expires long before the refresh token); when it is present its
        subject must own the row.
        """
        stored = self.refresh_tokens.find_by_token(self.context.refresh_token())
        if stored is None:
            return None, None
        if self.context.access_token() is not None and self.context.user_id() != stored.user_id:
            return None, None
        user = self.users.find_by_id(stored.user_id)
        if user is None:
            return None, None
        return user, stored

    def _verify_user(self, username: str, password: str) -> User | None:
        user = self.users.find_by_username(username)
        if user is None:
            return None
        return user if self.users.verify_password(user, password) else None

    def _revoke_refresh_token(self, token: RefreshToken):
        token.revoke(self.ip_address)
        self.refresh_tokens.update(token)

    def _generate_access_token(self, user: User) -> str:
        roles = self.users.get_roles(user)
        return create_access_token(user.id, user.username, roles, self.settings)

    def _generate_refresh_token(self, user: User) -> RefreshToken:
        now = utcnow()
        refresh_token = RefreshToken(
            token=generate_refresh_token_value(),
            expires_on=now + self.settings.refresh_token_expires,
            created_on=now,
            created_by_ip=self.ip_address,
            user_id=user.id,
        )
        return self.refresh_tokens.create(refresh_token)

    def _access_cookie_expiry(self) -> datetime:
        return datetime.now(timezone.utc) + self.settings.access_token_expires

    @staticmethod
    def _refresh_cookie_expiry(token: RefreshToken) -> datetime:
        return token.expires_on.replace(tzinfo=timezone.utc)
