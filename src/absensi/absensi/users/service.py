from __future__ import annotations

import logging
from datetime import datetime

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import ensure_utc
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH, MIN_USERNAME_LENGTH
from ..core.exceptions import AuthenticationError
from .model import TokenPair, User
from .repository import RefreshTokenRepository, UserRepository
from .tokens import TokenService

logger = logging.getLogger(__name__)


class AuthService:
    """Use cases: register, login, refresh, logout."""

    def __init__(self, users: UserRepository, refresh_tokens: RefreshTokenRepository, *, tokens: TokenService):
        self._users = users
        self._refresh_tokens = refresh_tokens
        self._tokens = tokens

    def register(self, username: str, password: str, jabatan: str, *, now: datetime) -> User:
        username = require_min_length((username or "").strip(), "username", MIN_USERNAME_LENGTH)
        password = require_min_length(password or "", "password", MIN_PASSWORD_LENGTH)
        jabatan = require_non_empty(jabatan or "", "jabatan")

        created_at = ensure_utc(now)
        user_id = self._users.create_user(
            username=username,
            password_hash=generate_password_hash(password),
            jabatan=jabatan,
            created_at=created_at,
        )
        logger.info("user registered id=%s username=%s", user_id, username)
        return User(user_id=user_id, username=username, password_hash="", jabatan=jabatan, created_at=created_at)

    def login(self, username: str, password: str, *, now: datetime) -> TokenPair:
        user = self._users.get_by_username((username or "").strip())
        if not user:
            raise AuthenticationError("invalid credentials")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # unknown hash method, e.g. a placeholder value
            ok = False
        if not ok:
            raise AuthenticationError("invalid credentials")

        return self._issue(user, now=now)

    def refresh(self, refresh_token: str, *, now: datetime) -> TokenPair:
        token = (refresh_token or "").strip()
        if not token:
            raise AuthenticationError("invalid refresh token")

        user_id = self._refresh_tokens.get_user_id(token, now=ensure_utc(now))
        # Revoking first makes rotation single-use under concurrent refreshes.
        if user_id is None or not self._refresh_tokens.revoke(token):
            raise AuthenticationError("invalid refresh token")

        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("user not found")
        return self._issue(user, now=now)

    def logout(self, refresh_token: str) -> bool:
        return self._refresh_tokens.revoke((refresh_token or "").strip())

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise AuthenticationError("user not found")
        return user

    def _issue(self, user: User, *, now: datetime) -> TokenPair:
        now = ensure_utc(now)
        access, expires_at = self._tokens.issue_access_token(user, now=now)
        refresh = self._tokens.new_refresh_token()
        self._refresh_tokens.store(user_id=user.user_id, token=refresh, expires_at=now + self._tokens.refresh_ttl)
        return TokenPair(access_token=access, expires_at=expires_at, refresh_token=refresh, user=user)
