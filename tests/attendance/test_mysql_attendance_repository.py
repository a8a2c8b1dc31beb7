from __future__ import annotations

import re
from datetime import date, datetime, timezone

import pytest

from src.absensi.absensi.attendance.model import AttendanceEvent
from src.absensi.absensi.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from tests.fakes import FakeConnection, FakeConnectionFactory, FakeCursor

DAY = date(2025, 3, 10)
EVENT = AttendanceEvent(
    at=datetime(2025, 3, 10, 1, 0, tzinfo=timezone.utc),
    lat=-6.2,
    lng=106.8,
    distance_m=3.5,
    photo="c2VsZmll",
)


def check_in_with_rowcount(rowcount: int):
    cur = FakeCursor(rowcount=rowcount)
    conn = FakeConnection(cur)
    won = MySQLAttendanceRepository(FakeConnectionFactory(conn)).check_in(user_id=7, work_date=DAY, event=EVENT)
    return won, cur, conn


@pytest.mark.parametrize("rowcount, won", [(1, True), (2, True), (0, False)])
def test_check_in_outcome_follows_affected_rows(rowcount, won):
    assert check_in_with_rowcount(rowcount)[0] is won


def test_check_in_is_one_conditional_upsert():
    _, cur, conn = check_in_with_rowcount(1)

    assert len(cur.statements) == 1
    sql, params = cur.statements[0]
    assert sql.startswith("INSERT INTO attendance_days")
    assert "ON DUPLICATE KEY UPDATE" in sql
    assert "IGNORE" not in sql
    assert params == (7, DAY, datetime(2025, 3, 10, 1, 0), -6.2, 106.8, 3.5, "c2VsZmll")
    assert conn.committed


def test_check_in_timestamp_is_assigned_after_the_other_columns():
    _, cur, _ = check_in_with_rowcount(0)
    sql = cur.statements[0][0]
    updates = sql.split("ON DUPLICATE KEY UPDATE", 1)[1]
    assignments = re.findall(r"(\w+) = IF\(", updates)
    assert assignments == ["check_in_lat", "check_in_lng", "check_in_dist", "check_in_photo", "check_in_at"]
    assert updates.count("IF(check_in_at IS NULL") == 5
