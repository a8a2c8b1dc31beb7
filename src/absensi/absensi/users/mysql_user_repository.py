from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..core.exceptions import Conflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, from_db_datetime, to_db_datetime
from .model import User
from .repository import RefreshTokenRepository, UserRepository


def _to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["id"]),
        username=row["username"],
        password_hash=row["password_hash"],
        jabatan=row["jabatan"],
        created_at=from_db_datetime(row.get("created_at")),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, username, password_hash, jabatan, created_at FROM users WHERE id=%s",
                (user_id,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, username, password_hash, jabatan, created_at FROM users WHERE username=%s",
                (username,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, *, username: str, password_hash: str, jabatan: str, created_at: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(
                    """
                    INSERT INTO users (username, password_hash, jabatan, created_at)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (username, password_hash, jabatan, to_db_datetime(created_at)),
                )
            except IntegrityError as e:
                if e.errno == errorcode.ER_DUP_ENTRY:
                    raise Conflict("username already exists") from e
                raise
            return int(cur.lastrowid)


class MySQLRefreshTokenRepository(RefreshTokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def store(self, *, user_id: int, token: str, expires_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO refresh_tokens (token, user_id, expires_at) VALUES (%s, %s, %s)",
                (token, user_id, to_db_datetime(expires_at)),
            )

    def get_user_id(self, token: str, *, now: datetime) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id FROM refresh_tokens WHERE token=%s AND expires_at > %s",
                (token, to_db_datetime(now)),
            )
            row = fetchone(cur)
            return int(row["user_id"]) if row else None

    def revoke(self, token: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM refresh_tokens WHERE token=%s", (token,))
            return cur.rowcount > 0
