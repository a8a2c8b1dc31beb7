from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import NextAction


@dataclass(frozen=True)
class AttendanceEvent:
    """One side of an attendance day (the check-in or the check-out)."""

    at: datetime
    lat: Optional[float] = None
    lng: Optional[float] = None
    distance_m: Optional[float] = None
    photo: Optional[str] = None


@dataclass(frozen=True)
class AttendanceDay:
    """Domain entity: one row per (user, office date)."""

    user_id: int
    work_date: date
    check_in: Optional[AttendanceEvent] = None
    check_out: Optional[AttendanceEvent] = None

    @property
    def is_marked(self) -> bool:
        return self.check_in is not None or self.check_out is not None

    @property
    def next_action(self) -> NextAction:
        if self.check_in is None:
            return NextAction.CHECK_IN
        if self.check_out is None:
            return NextAction.CHECK_OUT
        return NextAction.NONE

    @property
    def clock_went_backwards(self) -> bool:
        """True when the stored check-out is earlier than the check-in, by any amount."""
        if self.check_in is None or self.check_out is None:
            return False
        return self.check_out.at < self.check_in.at

    @property
    def raw_worked_seconds(self) -> int:
        """check_out - check_in in whole seconds, unclamped; 0 while the day is open."""
        if self.check_in is None or self.check_out is None:
            return 0
        return int((self.check_out.at - self.check_in.at).total_seconds())


@dataclass(frozen=True)
class PositionCheck:
    distance_m: float
    inside_radius: bool


@dataclass(frozen=True)
class DayStatus:
    """Read-model for the status screen."""

    work_date: date
    has_record: bool
    check_in_at: Optional[datetime]
    check_out_at: Optional[datetime]
    worked_seconds: int
    next_action: NextAction
    position: Optional[PositionCheck] = None
    clock_anomaly: bool = False


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a successful check-in or check-out; `at` is the instant just written."""

    work_date: date
    at: datetime
    distance_m: float
    check_in_at: Optional[datetime] = None
    worked_seconds: int = 0
    clock_anomaly: bool = False


@dataclass(frozen=True)
class DayDetail:
    work_date: date
    check_in: Optional[AttendanceEvent]
    check_out: Optional[AttendanceEvent]
    worked_seconds: int
    clock_anomaly: bool = False


@dataclass(frozen=True)
class OfficeInfo:
    lat: float
    lng: float
    radius_m: float
