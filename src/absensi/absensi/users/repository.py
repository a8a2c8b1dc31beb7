from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, *, username: str, password_hash: str, jabatan: str, created_at: datetime) -> int:
        """Raises Conflict when the username is taken."""

        raise NotImplementedError


class RefreshTokenRepository(Protocol):
    def store(self, *, user_id: int, token: str, expires_at: datetime) -> None:
        raise NotImplementedError

    def get_user_id(self, token: str, *, now: datetime) -> Optional[int]:
        """Owner of an unexpired token, or None."""

        raise NotImplementedError

    def revoke(self, token: str) -> bool:
        raise NotImplementedError
