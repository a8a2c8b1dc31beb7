from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class User:
    """Domain entity: an employee account.

    Note: plain data object, no DB access here.
    """

    user_id: int
    username: str
    password_hash: str
    jabatan: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Identity:
    """Verified caller identity resolved from the access token."""

    user_id: int
    username: str


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    expires_at: datetime
    refresh_token: str
    user: User
    token_type: str = "Bearer"
