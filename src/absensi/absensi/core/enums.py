from __future__ import annotations

from enum import Enum


class LeaveKind(str, Enum):
    """Leave categories. Values are the stored column values."""

    PAID = "cuti"
    SICK = "sakit"


class LeaveStatus(str, Enum):
    """Approval lifecycle of a leave request (pending -> approved/rejected)."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not LeaveStatus.PENDING


class StatusFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def as_status(self) -> LeaveStatus | None:
        if self is StatusFilter.ALL:
            return None
        return LeaveStatus(self.value)


class LeaveDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"

    @property
    def target_status(self) -> LeaveStatus:
        if self is LeaveDecision.APPROVE:
            return LeaveStatus.APPROVED
        return LeaveStatus.REJECTED


class DecisionOutcome(str, Enum):
    """Result of a guarded decision write as reported by the store."""

    APPLIED = "applied"
    NOT_PENDING = "not_pending"
    OVER_QUOTA = "over_quota"


class NextAction(str, Enum):
    """Recommended next attendance action for the current office day."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    NONE = "none"
