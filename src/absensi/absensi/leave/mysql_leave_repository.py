from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import DecisionOutcome, LeaveKind, LeaveStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, to_db_datetime
from .model import LeaveRequest, NewLeaveRequest
from .repository import LeaveRepository

_LEAVE_COLUMNS = """
    id, user_id, kind, status, reason, start_date, end_date, days, created_at, decided_at, proof
"""

_SUM_APPROVED_PAID = """
    SELECT COALESCE(SUM(days), 0) AS used
    FROM leave_requests
    WHERE user_id=%s AND kind=%s AND status=%s AND start_date >= %s AND start_date < %s
"""


def _year_bounds(year: int):
    return date(year, 1, 1), date(year + 1, 1, 1)


def _to_leave(r: Dict[str, Any]) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["id"]),
        user_id=int(r["user_id"]),
        kind=LeaveKind(r["kind"]),
        status=LeaveStatus(r["status"]),
        reason=r.get("reason"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        days=int(r["days"]),
        created_at=from_db_datetime(r["created_at"]),
        decided_at=from_db_datetime(r.get("decided_at")),
        proof=r.get("proof"),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def sum_approved_paid_days(self, *, user_id: int, year: int) -> int:
        start, end = _year_bounds(year)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SUM_APPROVED_PAID,
                (user_id, LeaveKind.PAID.value, LeaveStatus.APPROVED.value, start, end),
            )
            row = fetchone(cur)
            return max(0, int(row["used"])) if row else 0

    def create(self, new: NewLeaveRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests (user_id, kind, status, reason, start_date, end_date, days, proof, created_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                """,
                (
                    new.user_id,
                    new.kind.value,
                    LeaveStatus.PENDING.value,
                    new.reason,
                    new.start_date,
                    new.end_date,
                    new.days,
                    new.proof,
                    to_db_datetime(new.created_at),
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_LEAVE_COLUMNS} FROM leave_requests WHERE id=%s", (request_id,))
            row = fetchone(cur)
            return _to_leave(row) if row else None

    def decide_pending(
        self,
        *,
        request_id: int,
        kind: LeaveKind,
        status: LeaveStatus,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_at=%s
                WHERE id=%s AND kind=%s AND status=%s
                """,
                (status.value, to_db_datetime(decided_at), request_id, kind.value, LeaveStatus.PENDING.value),
            )
            return cur.rowcount > 0

    def approve_paid_within_quota(
        self,
        *,
        request_id: int,
        user_id: int,
        year: int,
        days: int,
        quota_days: int,
        decided_at: datetime,
    ) -> DecisionOutcome:
        start, end = _year_bounds(year)
        with db_cursor(self._conn_factory) as (_, cur):
            # Serializes approvals per user: a second approver waits here until we commit.
            cur.execute("SELECT id FROM users WHERE id=%s FOR UPDATE", (user_id,))
            fetchone(cur)

            cur.execute(
                _SUM_APPROVED_PAID + " FOR UPDATE",
                (user_id, LeaveKind.PAID.value, LeaveStatus.APPROVED.value, start, end),
            )
            row = fetchone(cur)
            used = int(row["used"]) if row else 0
            if used + days > quota_days:
                return DecisionOutcome.OVER_QUOTA

            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_at=%s
                WHERE id=%s AND kind=%s AND status=%s
                """,
                (
                    LeaveStatus.APPROVED.value,
                    to_db_datetime(decided_at),
                    request_id,
                    LeaveKind.PAID.value,
                    LeaveStatus.PENDING.value,
                ),
            )
            if cur.rowcount > 0:
                return DecisionOutcome.APPLIED
            return DecisionOutcome.NOT_PENDING

    def list_for_user(
        self,
        *,
        user_id: int,
        kind: LeaveKind,
        year: int,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        start, end = _year_bounds(year)
        sql = f"""
            SELECT {_LEAVE_COLUMNS}
            FROM leave_requests
            WHERE user_id=%s AND kind=%s AND start_date >= %s AND start_date < %s
        """
        params: list = [user_id, kind.value, start, end]
        if status is not None:
            sql += " AND status=%s"
            params.append(status.value)
        sql += " ORDER BY start_date DESC, created_at DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_leave(r) for r in fetchall(cur)]
