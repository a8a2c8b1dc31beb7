from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DecisionOutcome, LeaveKind, LeaveStatus
from .model import LeaveRequest, NewLeaveRequest


class LeaveRepository(Protocol):
    def sum_approved_paid_days(self, *, user_id: int, year: int) -> int:
        """Sum of `days` over approved paid leave starting in `year`."""

        raise NotImplementedError

    def create(self, new: NewLeaveRequest) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def decide_pending(
        self,
        *,
        request_id: int,
        kind: LeaveKind,
        status: LeaveStatus,
        decided_at: datetime,
    ) -> bool:
        """Apply a decision only while the request is still pending."""

        raise NotImplementedError

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
        """Approve paid leave atomically with the quota check.

        Concurrent approvals for the same user must be serialized so the
        approved total for `year` never exceeds `quota_days`.
        """

        raise NotImplementedError

    def list_for_user(
        self,
        *,
        user_id: int,
        kind: LeaveKind,
        year: int,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        """Ordered by start_date DESC, created_at DESC."""

        raise NotImplementedError
