from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from ..common.datetime_utils import ensure_utc, first_of_next_month, office_date
from ..common.geo import Position, distance_meters, inside_radius, office_position
from ..core.enums import NextAction
from ..core.exceptions import (
    AlreadyCheckedIn,
    InvalidDateRange,
    NotCheckedInOrAlreadyCheckedOut,
    OutsideGeofence,
    ResetDisabled,
)
from ..core.settings import OfficeSettings
from .model import (
    AttendanceDay,
    AttendanceEvent,
    CheckResult,
    DayDetail,
    DayStatus,
    OfficeInfo,
    PositionCheck,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Use cases around the per-user, per-day attendance record.

    `now` is always passed in by the caller (UTC); the day key is the office
    date of `now`, never a client supplied date.
    """

    def __init__(self, attendance: AttendanceRepository, *, settings: OfficeSettings):
        self._attendance = attendance
        self._settings = settings

    @property
    def settings(self) -> OfficeSettings:
        return self._settings

    def office_info(self) -> OfficeInfo:
        return OfficeInfo(
            lat=self._settings.office_lat,
            lng=self._settings.office_lng,
            radius_m=self._settings.radius_m,
        )

    def today(self, now: datetime) -> date:
        return office_date(now, self._settings.tz)

    def check_position(self, position: Position) -> PositionCheck:
        distance = distance_meters(position, office_position(self._settings))
        return PositionCheck(distance_m=distance, inside_radius=inside_radius(distance, self._settings))

    def _admit(self, position: Position) -> float:
        check = self.check_position(position)
        if not check.inside_radius:
            raise OutsideGeofence(check.distance_m, self._settings.radius_m)
        return check.distance_m

    def _worked_seconds(self, day: Optional[AttendanceDay]) -> Tuple[int, bool]:
        if day is None:
            return 0, False
        if not day.clock_went_backwards:
            return max(0, day.raw_worked_seconds), False
        logger.warning(
            "negative worked duration clamped to 0: user_id=%s date=%s check_in=%s check_out=%s",
            day.user_id,
            day.work_date.isoformat(),
            day.check_in.at.isoformat() if day.check_in else None,
            day.check_out.at.isoformat() if day.check_out else None,
        )
        return 0, True

    def get_status(self, user_id: int, now: datetime, position: Optional[Position] = None) -> DayStatus:
        work_date = self.today(now)
        day = self._attendance.get_for_user_and_date(user_id, work_date)
        worked, anomaly = self._worked_seconds(day)

        return DayStatus(
            work_date=work_date,
            has_record=day is not None,
            check_in_at=day.check_in.at if day and day.check_in else None,
            check_out_at=day.check_out.at if day and day.check_out else None,
            worked_seconds=worked,
            next_action=day.next_action if day else NextAction.CHECK_IN,
            position=self.check_position(position) if position is not None else None,
            clock_anomaly=anomaly,
        )

    def check_in(self, user_id: int, now: datetime, position: Position, *, photo: Optional[str] = None) -> CheckResult:
        distance = self._admit(position)
        now = ensure_utc(now)
        work_date = self.today(now)

        event = AttendanceEvent(at=now, lat=position.lat, lng=position.lng, distance_m=distance, photo=photo)
        if not self._attendance.check_in(user_id=user_id, work_date=work_date, event=event):
            raise AlreadyCheckedIn()

        logger.info("check-in user_id=%s date=%s distance=%.1fm", user_id, work_date.isoformat(), distance)
        return CheckResult(work_date=work_date, at=now, distance_m=distance, check_in_at=now)

    def check_out(self, user_id: int, now: datetime, position: Position, *, photo: Optional[str] = None) -> CheckResult:
        distance = self._admit(position)
        now = ensure_utc(now)
        work_date = self.today(now)

        event = AttendanceEvent(at=now, lat=position.lat, lng=position.lng, distance_m=distance, photo=photo)
        day = self._attendance.check_out(user_id=user_id, work_date=work_date, event=event)
        if day is None:
            raise NotCheckedInOrAlreadyCheckedOut()

        worked, anomaly = self._worked_seconds(day)
        logger.info(
            "check-out user_id=%s date=%s distance=%.1fm worked=%ss",
            user_id,
            work_date.isoformat(),
            distance,
            worked,
        )
        return CheckResult(
            work_date=work_date,
            at=now,
            distance_m=distance,
            check_in_at=day.check_in.at if day.check_in else None,
            worked_seconds=worked,
            clock_anomaly=anomaly,
        )

    def reset_day(self, user_id: int, work_date: date) -> int:
        """Administrative reset: delete the day row. Refused in production."""
        if self._settings.production:
            raise ResetDisabled()
        removed = self._attendance.delete_day(user_id=user_id, work_date=work_date)
        logger.info("attendance reset user_id=%s date=%s removed=%s", user_id, work_date.isoformat(), removed)
        return removed

    def list_marked_days(self, user_id: int, start: date, end: date) -> List[date]:
        if end < start:
            raise InvalidDateRange("end must not be before start")
        return sorted(set(self._attendance.list_marked_days(user_id=user_id, start=start, end=end)))

    def list_marked_days_in_month(self, user_id: int, month_start: date) -> List[date]:
        first = month_start.replace(day=1)
        return self.list_marked_days(user_id, first, first_of_next_month(first))

    def get_day(self, user_id: int, work_date: date) -> DayDetail:
        day = self._attendance.get_for_user_and_date(user_id, work_date)
        worked, anomaly = self._worked_seconds(day)
        return DayDetail(
            work_date=work_date,
            check_in=day.check_in if day else None,
            check_out=day.check_out if day else None,
            worked_seconds=worked,
            clock_anomaly=anomaly,
        )
