from __future__ import annotations

from datetime import date
from typing import Any, Dict, Tuple

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_iso_date, to_rfc3339, utc_now
from ..common.http import json_body, make_auth_required
from ..common.imgutil import normalize_base64
from ..core.enums import LeaveDecision, LeaveKind, StatusFilter
from ..core.exceptions import InvalidDateRange, ValidationError
from ..container import Container
from .model import LeaveRequest, QuotaSnapshot


def _quota_json(q: QuotaSnapshot) -> Dict[str, Any]:
    return {
        "year": q.year,
        "quota_days": q.quota_days,
        "used_days": q.used_days,
        "remaining_days": q.remaining_days,
    }


def _item_json(lr: LeaveRequest) -> Dict[str, Any]:
    item = {
        "id": lr.request_id,
        "status": lr.status.value,
        "reason": lr.reason or "",
        "start_date": lr.start_date.isoformat(),
        "end_date": lr.end_date.isoformat(),
        "days": lr.days,
        "created_at": to_rfc3339(lr.created_at),
        "decided_at": to_rfc3339(lr.decided_at),
    }
    if lr.kind is LeaveKind.SICK:
        item["has_proof"] = lr.has_proof
    return item


def _date_range(data: Dict[str, Any]) -> Tuple[date, date]:
    try:
        start = parse_iso_date(str(data.get("start_date") or ""))
        end = parse_iso_date(str(data.get("end_date") or ""))
    except ValueError:
        raise InvalidDateRange("start_date and end_date must be YYYY-MM-DD")
    return start, end


def _request_id(value: Any) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError("request_id required")


def register(app: Flask, container: Container) -> None:
    auth_required = make_auth_required(container.token_service)
    service = container.leave_service

    def _year_arg() -> int:
        raw = (request.args.get("year") or "").strip()
        if not raw:
            return service.current_year(utc_now())
        try:
            year = int(raw)
        except ValueError:
            raise ValidationError("invalid year")
        if not 1 <= year <= 9998:
            raise ValidationError("invalid year")
        return year

    def _status_arg() -> StatusFilter:
        raw = (request.args.get("status") or StatusFilter.ALL.value).strip().lower()
        try:
            return StatusFilter(raw)
        except ValueError:
            raise ValidationError("invalid status filter")

    def _list_response(kind: LeaveKind):
        year = _year_arg()
        status_filter = _status_arg()
        items = service.list_leave(g.identity.user_id, year, kind, status_filter)
        return jsonify(
            {
                "year": year,
                "status_filter": status_filter.value,
                "items": [_item_json(lr) for lr in items],
            }
        )

    @app.route("/leave/quota", methods=["GET"], endpoint="leave_quota")
    @auth_required
    def leave_quota():
        return jsonify(_quota_json(service.get_quota(g.identity.user_id, _year_arg())))

    # -------- Paid leave (cuti) --------
    @app.route("/leave/cuti/request", methods=["POST"], endpoint="leave_cuti_request")
    @auth_required
    def leave_cuti_request():
        data = json_body()
        start, end = _date_range(data)
        submission = service.request_paid_leave(
            g.identity.user_id,
            start,
            end,
            data.get("reason"),
            now=utc_now(),
        )
        lr = submission.request
        return (
            jsonify(
                {
                    "request_id": lr.request_id,
                    "status": lr.status.value,
                    "days": lr.days,
                    "start_date": lr.start_date.isoformat(),
                    "end_date": lr.end_date.isoformat(),
                    "quota": _quota_json(submission.quota),
                }
            ),
            201,
        )

    def _decide_cuti(decision: LeaveDecision):
        data = json_body()
        result = service.decide_leave(
            g.identity.user_id,
            _request_id(data.get("request_id")),
            LeaveKind.PAID,
            decision,
            now=utc_now(),
        )
        lr = result.request
        return jsonify(
            {
                "request_id": lr.request_id,
                "status": lr.status.value,
                "reason": lr.reason or "",
                "days": lr.days,
                "start_date": lr.start_date.isoformat(),
                "end_date": lr.end_date.isoformat(),
                "quota_snapshot": _quota_json(result.quota),
            }
        )

    @app.route("/leave/cuti/approve", methods=["POST"], endpoint="leave_cuti_approve")
    @auth_required
    def leave_cuti_approve():
        return _decide_cuti(LeaveDecision.APPROVE)

    @app.route("/leave/cuti/reject", methods=["POST"], endpoint="leave_cuti_reject")
    @auth_required
    def leave_cuti_reject():
        return _decide_cuti(LeaveDecision.REJECT)

    @app.route("/leave/cuti/list", methods=["GET"], endpoint="leave_cuti_list")
    @auth_required
    def leave_cuti_list():
        return _list_response(LeaveKind.PAID)

    # -------- Sick leave (sakit) --------
    @app.route("/leave/sakit/request", methods=["POST"], endpoint="leave_sakit_request")
    @auth_required
    def leave_sakit_request():
        data = json_body()
        start, end = _date_range(data)
        raw_note = str(data.get("doctor_note_base64") or "").strip()
        proof = normalize_base64(raw_note) if raw_note else None
        submission = service.request_sick_leave(
            g.identity.user_id,
            start,
            end,
            data.get("reason"),
            proof,
            now=utc_now(),
        )
        lr = submission.request
        return (
            jsonify(
                {
                    "request_id": lr.request_id,
                    "status": lr.status.value,
                    "days": lr.days,
                    "start_date": lr.start_date.isoformat(),
                    "end_date": lr.end_date.isoformat(),
                }
            ),
            201,
        )

    def _decide_sakit(request_id: int, decision: LeaveDecision):
        result = service.decide_leave(g.identity.user_id, request_id, LeaveKind.SICK, decision, now=utc_now())
        return jsonify({"result": result.request.status.value, "id": result.request.request_id})

    @app.route("/leave/sakit/<int:request_id>/approve", methods=["POST"], endpoint="leave_sakit_approve")
    @auth_required
    def leave_sakit_approve(request_id: int):
        return _decide_sakit(request_id, LeaveDecision.APPROVE)

    @app.route("/leave/sakit/<int:request_id>/reject", methods=["POST"], endpoint="leave_sakit_reject")
    @auth_required
    def leave_sakit_reject(request_id: int):
        return _decide_sakit(request_id, LeaveDecision.REJECT)

    @app.route("/leave/sakit/list", methods=["GET"], endpoint="leave_sakit_list")
    @auth_required
    def leave_sakit_list():
        return _list_response(LeaveKind.SICK)
