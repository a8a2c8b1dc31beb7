from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Sequence, Tuple

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS: Sequence[Tuple[str, str, str]] = (
    # username, password, jabatan
    ("demo", "demo123", "Staff"),
    ("admin", "admin123", "HRD"),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        connection_timeout=max(1, target.timeout_seconds),
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql must work whatever the configured DB name is.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    return re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a script on ';' outside of quoted literals; `--` comment lines are dropped."""
    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    buf: list[str] = []
    quote = ""
    escaped = False
    for ch in "\n".join(lines):
        if escaped:
            escaped = False
        elif ch == "\\" and quote:
            escaped = True
        elif ch in ("'", '"') and (not quote or quote == ch):
            quote = "" if quote else ch
        elif ch == ";" and not quote:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_statements(cur, statements: Iterable[str]) -> int:
    count = 0
    for stmt in statements:
        cur.execute(stmt)
        count += 1
    return count


def ensure_database_exists(db_config: Mapping) -> None:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: Mapping, *, schema_path: str | Path) -> None:
    """Create the database if needed and apply the idempotent DDL script."""
    ensure_database_exists(db_config)
    target = DBConfig.from_mapping(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        applied = _exec_statements(cur, iter_sql_statements(sql))
        conn.commit()
    finally:
        conn.close()
    logger.info("schema applied to %s (%d statements)", target.database, applied)


def ensure_demo_users(db_config: Mapping, users: Sequence[Tuple[str, str, str]] = DEMO_USERS) -> None:
    """Upsert demo accounts so a fresh database can be logged into."""
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        for username, password, jabatan in users:
            cur.execute(
                """
                INSERT INTO users (username, password_hash, jabatan)
                VALUES (%s, %s, %s)
                ON DUPLICATE KEY UPDATE password_hash=VALUES(password_hash), jabatan=VALUES(jabatan)
                """,
                (username, generate_password_hash(password), jabatan),
            )
        conn.commit()
    finally:
        conn.close()
    logger.info("demo users ready: %s", ", ".join(u[0] for u in users))


def list_tables(db_config: Mapping) -> list[str]:
    target = DBConfig.from_mapping(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
