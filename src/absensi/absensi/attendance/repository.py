from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceDay, AttendanceEvent


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, user_id: int, work_date: date) -> Optional[AttendanceDay]:
        raise NotImplementedError

    def check_in(self, *, user_id: int, work_date: date, event: AttendanceEvent) -> bool:
        """Create the day or fill an empty check-in atomically.

        Returns False (and writes nothing) when check-in is already set.
        """

        raise NotImplementedError

    def check_out(self, *, user_id: int, work_date: date, event: AttendanceEvent) -> Optional[AttendanceDay]:
        """Set check-out only if check-in is set and check-out is not.

        Returns the updated day, or None when the guard did not match.
        """

        raise NotImplementedError

    def delete_day(self, *, user_id: int, work_date: date) -> int:
        raise NotImplementedError

    def list_marked_days(self, *, user_id: int, start: date, end: date) -> Sequence[date]:
        """Dates in [start, end) with a check-in or a check-out, ascending."""

        raise NotImplementedError
