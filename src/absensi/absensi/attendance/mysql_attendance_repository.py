from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import AttendanceDay, AttendanceEvent
from .repository import AttendanceRepository

_DAY_COLUMNS = """
    user_id, work_date,
    check_in_at, check_in_lat, check_in_lng, check_in_dist, check_in_photo,
    check_out_at, check_out_lat, check_out_lng, check_out_dist, check_out_photo
"""


def _event(row: Dict[str, Any], prefix: str) -> Optional[AttendanceEvent]:
    at = row.get(f"{prefix}_at")
    if at is None:
        return None
    return AttendanceEvent(
        at=from_db_datetime(at),
        lat=row.get(f"{prefix}_lat"),
        lng=row.get(f"{prefix}_lng"),
        distance_m=row.get(f"{prefix}_dist"),
        photo=row.get(f"{prefix}_photo"),
    )


def _to_day(row: Dict[str, Any]) -> AttendanceDay:
    return AttendanceDay(
        user_id=int(row["user_id"]),
        work_date=row["work_date"],
        check_in=_event(row, "check_in"),
        check_out=_event(row, "check_out"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_DAY_COLUMNS} FROM attendance_days WHERE user_id=%s AND work_date=%s",
                (user_id, work_date),
            )
            row = fetchone(cur)
            return _to_day(row) if row else None

    def check_in(self, *, user_id: int, work_date: date, event: AttendanceEvent) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # Single statement: the row lock is taken exclusively up front. Assignments run
            # left to right, so check_in_at must stay last for the other IFs to see the old value.
            cur.execute(
                """
                INSERT INTO attendance_days
                    (user_id, work_date, check_in_at, check_in_lat, check_in_lng, check_in_dist, check_in_photo)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    check_in_lat = IF(check_in_at IS NULL, VALUES(check_in_lat), check_in_lat),
                    check_in_lng = IF(check_in_at IS NULL, VALUES(check_in_lng), check_in_lng),
                    check_in_dist = IF(check_in_at IS NULL, VALUES(check_in_dist), check_in_dist),
                    check_in_photo = IF(check_in_at IS NULL, VALUES(check_in_photo), check_in_photo),
                    check_in_at = IF(check_in_at IS NULL, VALUES(check_in_at), check_in_at)
                """,
                (
                    user_id,
                    work_date,
                    to_db_datetime(event.at),
                    event.lat,
                    event.lng,
                    event.distance_m,
                    event.photo,
                ),
            )
            # Affected rows (FOUND_ROWS is off): 1 inserted, 2 updated, 0 already checked in.
            return cur.rowcount in (1, 2)

    def check_out(self, *, user_id: int, work_date: date, event: AttendanceEvent) -> Optional[AttendanceDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_days
                SET check_out_at=%s, check_out_lat=%s, check_out_lng=%s, check_out_dist=%s, check_out_photo=%s
                WHERE user_id=%s AND work_date=%s AND check_in_at IS NOT NULL AND check_out_at IS NULL
                """,
                (
                    to_db_datetime(event.at),
                    event.lat,
                    event.lng,
                    event.distance_m,
                    event.photo,
                    user_id,
                    work_date,
                ),
            )
            if cur.rowcount != 1:
                return None
            cur.execute(
                f"SELECT {_DAY_COLUMNS} FROM attendance_days WHERE user_id=%s AND work_date=%s",
                (user_id, work_date),
            )
            row = fetchone(cur)
            return _to_day(row) if row else None

    def delete_day(self, *, user_id: int, work_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_days WHERE user_id=%s AND work_date=%s",
                (user_id, work_date),
            )
            return int(cur.rowcount)

    def list_marked_days(self, *, user_id: int, start: date, end: date) -> Sequence[date]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT work_date
                FROM attendance_days
                WHERE user_id=%s AND work_date >= %s AND work_date < %s
                  AND (check_in_at IS NOT NULL OR check_out_at IS NOT NULL)
                ORDER BY work_date
                """,
                (user_id, start, end),
            )
            return [r["work_date"] for r in fetchall(cur)]
