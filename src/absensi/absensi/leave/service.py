from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime
from typing import List, Optional

from ..common.datetime_utils import ensure_utc, inclusive_days, office_date
from ..common.validators import optional_text
from ..core.enums import DecisionOutcome, LeaveDecision, LeaveKind, LeaveStatus, StatusFilter
from ..core.exceptions import (
    Conflict,
    Forbidden,
    InvalidDateRange,
    InvalidKind,
    NotFound,
    ProofRequired,
    QuotaExceeded,
)
from ..core.settings import OfficeSettings
from .model import DecisionResult, LeaveRequest, LeaveSubmission, NewLeaveRequest, QuotaSnapshot
from .repository import LeaveRepository

logger = logging.getLogger(__name__)


class LeaveService:
    """Leave request lifecycle and the paid-leave quota.

    Quota is re-aggregated from the store on every call; approval of paid
    leave re-checks it inside the store transaction.
    """

    def __init__(self, leaves: LeaveRepository, *, settings: OfficeSettings):
        self._leaves = leaves
        self._settings = settings

    def current_year(self, now: datetime) -> int:
        return office_date(now, self._settings.tz).year

    @staticmethod
    def _span(start: date, end: date) -> int:
        if end < start:
            raise InvalidDateRange("end_date must not be before start_date")
        return inclusive_days(start, end)

    def get_quota(self, user_id: int, year: int) -> QuotaSnapshot:
        used = self._leaves.sum_approved_paid_days(user_id=user_id, year=year)
        return QuotaSnapshot(year=year, quota_days=self._settings.annual_leave_quota, used_days=used)

    def request_paid_leave(
        self,
        user_id: int,
        start: date,
        end: date,
        reason: Optional[str] = None,
        *,
        now: datetime,
    ) -> LeaveSubmission:
        days = self._span(start, end)
        quota = self.get_quota(user_id, start.year)
        # Advisory only: nothing is reserved until approval.
        if days > quota.remaining_days:
            raise QuotaExceeded(days, quota.remaining_days)

        request = self._create(user_id, LeaveKind.PAID, start, end, days, reason, now=now)
        return LeaveSubmission(request=request, quota=quota)

    def request_sick_leave(
        self,
        user_id: int,
        start: date,
        end: date,
        reason: Optional[str] = None,
        proof: Optional[str] = None,
        *,
        now: datetime,
    ) -> LeaveSubmission:
        days = self._span(start, end)
        if not proof or not proof.strip():
            raise ProofRequired()

        request = self._create(user_id, LeaveKind.SICK, start, end, days, reason, now=now, proof=proof)
        return LeaveSubmission(request=request)

    def _create(
        self,
        user_id: int,
        kind: LeaveKind,
        start: date,
        end: date,
        days: int,
        reason: Optional[str],
        *,
        now: datetime,
        proof: Optional[str] = None,
    ) -> LeaveRequest:
        new = NewLeaveRequest(
            user_id=user_id,
            kind=kind,
            start_date=start,
            end_date=end,
            days=days,
            reason=optional_text(reason),
            created_at=ensure_utc(now),
            proof=proof,
        )
        request_id = self._leaves.create(new)
        logger.info(
            "leave requested id=%s user_id=%s kind=%s %s..%s days=%s",
            request_id,
            user_id,
            kind.value,
            start.isoformat(),
            end.isoformat(),
            days,
        )
        return LeaveRequest(
            request_id=request_id,
            user_id=new.user_id,
            kind=new.kind,
            status=LeaveStatus.PENDING,
            reason=new.reason,
            start_date=new.start_date,
            end_date=new.end_date,
            days=new.days,
            created_at=new.created_at,
            proof=new.proof,
        )

    def decide_leave(
        self,
        acting_user_id: int,
        request_id: int,
        kind: LeaveKind,
        decision: LeaveDecision,
        *,
        now: datetime,
    ) -> DecisionResult:
        request = self._leaves.get(request_id)
        if request is None:
            raise NotFound("leave request not found")
        # Only the owner may decide; there is no approver role yet.
        if request.user_id != acting_user_id:
            raise Forbidden("not the owner of this request")
        if request.kind is not kind:
            raise InvalidKind()
        if request.status.is_terminal:
            raise Conflict("already decided")

        decided_at = ensure_utc(now)
        target = decision.target_status

        if kind is LeaveKind.PAID and decision is LeaveDecision.APPROVE:
            self._approve_paid(request, decided_at)
        elif not self._leaves.decide_pending(request_id=request_id, kind=kind, status=target, decided_at=decided_at):
            raise Conflict("already decided")

        logger.info("leave decided id=%s user_id=%s kind=%s status=%s", request_id, request.user_id, kind.value, target.value)
        decided = dataclasses.replace(request, status=target, decided_at=decided_at)
        quota = self.get_quota(request.user_id, request.quota_year) if kind is LeaveKind.PAID else None
        return DecisionResult(request=decided, quota=quota)

    def _approve_paid(self, request: LeaveRequest, decided_at: datetime) -> None:
        year = request.quota_year
        quota = self.get_quota(request.user_id, year)
        if request.days > quota.remaining_days:
            raise QuotaExceeded(request.days, quota.remaining_days)

        outcome = self._leaves.approve_paid_within_quota(
            request_id=request.request_id,
            user_id=request.user_id,
            year=year,
            days=request.days,
            quota_days=self._settings.annual_leave_quota,
            decided_at=decided_at,
        )
        if outcome is DecisionOutcome.NOT_PENDING:
            raise Conflict("already decided")
        if outcome is DecisionOutcome.OVER_QUOTA:
            # Another approval landed between the pre-check and the write.
            quota = self.get_quota(request.user_id, year)
            raise QuotaExceeded(request.days, quota.remaining_days)

    def list_leave(
        self,
        user_id: int,
        year: int,
        kind: LeaveKind,
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> List[LeaveRequest]:
        return list(
            self._leaves.list_for_user(
                user_id=user_id,
                kind=kind,
                year=year,
                status=status_filter.as_status(),
            )
        )
