from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveKind, LeaveStatus


@dataclass(frozen=True)
class QuotaSnapshot:
    """Paid-leave quota for one user and year. Derived, never stored."""

    year: int
    quota_days: int
    used_days: int

    @property
    def remaining_days(self) -> int:
        return self.quota_days - self.used_days


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    user_id: int
    kind: LeaveKind
    status: LeaveStatus
    reason: Optional[str]
    start_date: date
    end_date: date
    days: int
    created_at: datetime
    decided_at: Optional[datetime] = None
    proof: Optional[str] = None

    @property
    def has_proof(self) -> bool:
        return bool(self.proof)

    @property
    def quota_year(self) -> int:
        # Spans crossing New Year count against the start year.
        return self.start_date.year


@dataclass(frozen=True)
class NewLeaveRequest:
    user_id: int
    kind: LeaveKind
    start_date: date
    end_date: date
    days: int
    reason: Optional[str]
    created_at: datetime
    proof: Optional[str] = None


@dataclass(frozen=True)
class LeaveSubmission:
    request: LeaveRequest
    quota: Optional[QuotaSnapshot] = None


@dataclass(frozen=True)
class DecisionResult:
    request: LeaveRequest
    quota: Optional[QuotaSnapshot] = None
