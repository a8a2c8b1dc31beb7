"""Identity token contract.

Access tokens are HS256 JWTs carrying `sub` (user id, as a string) and `usr`
(username). Older clients put the user id under `uid`, `user_id` or `id`;
those are honoured only when `accept_legacy_claims` is enabled.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Tuple

import jwt

from ..common.datetime_utils import ensure_utc
from ..core.constants import JWT_ALGORITHM
from ..core.exceptions import AuthenticationError
from ..core.settings import TokenSettings
from .model import Identity, User

logger = logging.getLogger(__name__)

LEGACY_SUBJECT_CLAIMS = ("sub", "uid", "user_id", "id")


class TokenService:
    def __init__(self, settings: TokenSettings):
        self._settings = settings

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(days=self._settings.refresh_ttl_day)

    def issue_access_token(self, user: User, *, now: datetime) -> Tuple[str, datetime]:
        issued_at = ensure_utc(now)
        expires_at = issued_at + timedelta(minutes=self._settings.access_ttl_min)
        payload = {
            "sub": str(user.user_id),
            "usr": user.username,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self._settings.secret, algorithm=JWT_ALGORITHM)
        return token, expires_at

    def parse_access_token(self, token: str) -> Identity:
        options = {"require": ["exp"]}
        if self._settings.accept_legacy_claims:
            # legacy tokens may carry a numeric sub
            options["verify_sub"] = False
        try:
            claims = jwt.decode(token, self._settings.secret, algorithms=[JWT_ALGORITHM], options=options)
        except jwt.InvalidTokenError as e:
            logger.debug("rejected access token: %s", e)
            raise AuthenticationError("invalid token") from e

        return Identity(user_id=self._subject(claims), username=str(claims.get("usr") or ""))

    def _subject(self, claims: Dict[str, Any]) -> int:
        keys = LEGACY_SUBJECT_CLAIMS if self._settings.accept_legacy_claims else ("sub",)
        for key in keys:
            value = claims.get(key)
            if value in (None, ""):
                continue
            try:
                return int(str(value))
            except ValueError:
                break
        raise AuthenticationError("invalid token subject")

    @staticmethod
    def new_refresh_token() -> str:
        return secrets.token_urlsafe(32)
