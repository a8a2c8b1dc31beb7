from __future__ import annotations

import math
from typing import Any, Dict, Optional

from flask import Flask, g, jsonify, request

from ..common.datetime_utils import parse_iso_date, parse_month, to_rfc3339, utc_now
from ..common.geo import Position
from ..common.http import json_body, make_auth_required, optional_json_body
from ..common.imgutil import normalize_base64
from ..core.enums import NextAction
from ..core.exceptions import InvalidDateRange, ValidationError
from ..container import Container
from .model import AttendanceEvent, CheckResult, DayStatus


def _round1(value: float) -> float:
    return round(value, 1)


def _next_action_json(action: NextAction) -> Optional[str]:
    return None if action is NextAction.NONE else action.value


def _today_json(status: DayStatus) -> Dict[str, Any]:
    return {
        "date": status.work_date.isoformat(),
        "check_in_at": to_rfc3339(status.check_in_at),
        "check_out_at": to_rfc3339(status.check_out_at),
        "worked_seconds": status.worked_seconds,
    }


def _check_json(result: CheckResult, kind: str, next_action: NextAction) -> Dict[str, Any]:
    check_out_at = result.at if kind == "checked_out" else None
    return {
        "result": kind,
        "distance_m": _round1(result.distance_m),
        "today": {
            "date": result.work_date.isoformat(),
            "check_in_at": to_rfc3339(result.check_in_at),
            "check_out_at": to_rfc3339(check_out_at),
            "worked_seconds": result.worked_seconds,
        },
        "next_action": _next_action_json(next_action),
    }


def _event_json(kind: str, event: AttendanceEvent) -> Dict[str, Any]:
    out: Dict[str, Any] = {"type": kind, "at": to_rfc3339(event.at)}
    if event.lat is not None:
        out["lat"] = event.lat
    if event.lng is not None:
        out["lng"] = event.lng
    if event.distance_m is not None:
        out["distance_m"] = _round1(event.distance_m)
    if event.photo:
        out["photo_base64"] = event.photo
    return out


def _position(data: Dict[str, Any], *, required: bool = True) -> Optional[Position]:
    lat, lng = data.get("lat"), data.get("lng")
    if lat is None and lng is None and not required:
        return None
    try:
        lat, lng = float(lat), float(lng)
    except (TypeError, ValueError):
        raise ValidationError("lat and lng must be numbers")
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValidationError("lat and lng must be finite numbers")
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        raise ValidationError("lat must be within [-90, 90] and lng within [-180, 180]")
    return Position(lat=lat, lng=lng)


def _selfie(data: Dict[str, Any]) -> str:
    raw = str(data.get("selfie_base64") or data.get("selfie") or "").strip()
    if not raw:
        raise ValidationError("selfie required")
    return normalize_base64(raw)


def register(app: Flask, container: Container) -> None:
    auth_required = make_auth_required(container.token_service)
    service = container.attendance_service

    def _status_response(status: DayStatus, **extra):
        body: Dict[str, Any] = dict(extra)
        if status.position is not None:
            body["inside_radius"] = status.position.inside_radius
            body["distance_m"] = _round1(status.position.distance_m)
        body["today"] = _today_json(status)
        body["next_action"] = _next_action_json(status.next_action)
        return body

    @app.route("/config/office", methods=["GET"], endpoint="office_config")
    @auth_required
    def office_config():
        info = service.office_info()
        return jsonify({"lat": info.lat, "lng": info.lng, "radius_m": info.radius_m})

    @app.route("/attendance/status", methods=["GET", "POST"], endpoint="attendance_status")
    @auth_required
    def attendance_status():
        data = optional_json_body() if request.method == "POST" else {}
        position = _position(data, required=False)
        status = service.get_status(g.identity.user_id, utc_now(), position)
        return jsonify(_status_response(status))

    @app.route("/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @auth_required
    def attendance_check_in():
        data = json_body()
        photo = _selfie(data)
        position = _position(data)
        result = service.check_in(g.identity.user_id, utc_now(), position, photo=photo)
        return jsonify(_check_json(result, "checked_in", NextAction.CHECK_OUT)), 201

    @app.route("/attendance/check-out", methods=["POST"], endpoint="attendance_check_out")
    @auth_required
    def attendance_check_out():
        data = json_body()
        photo = _selfie(data)
        position = _position(data)
        result = service.check_out(g.identity.user_id, utc_now(), position, photo=photo)
        return jsonify(_check_json(result, "checked_out", NextAction.NONE))

    @app.route("/attendance/marks", methods=["GET"], endpoint="attendance_marks")
    @auth_required
    def attendance_marks():
        month = (request.args.get("month") or "").strip()
        if month:
            try:
                start = parse_month(month)
            except ValueError:
                raise InvalidDateRange("invalid month, expected YYYY-MM")
        else:
            start = service.today(utc_now()).replace(day=1)

        days = service.list_marked_days_in_month(g.identity.user_id, start)
        return jsonify({"month": start.strftime("%Y-%m"), "days_present": [d.isoformat() for d in days]})

    @app.route("/attendance/day", methods=["GET"], endpoint="attendance_day")
    @auth_required
    def attendance_day():
        raw = (request.args.get("date") or "").strip()
        if not raw:
            raise InvalidDateRange("missing date")
        try:
            work_date = parse_iso_date(raw)
        except ValueError:
            raise InvalidDateRange("invalid date, expected YYYY-MM-DD")

        detail = service.get_day(g.identity.user_id, work_date)
        events = []
        if detail.check_in:
            events.append(_event_json("check_in", detail.check_in))
        if detail.check_out:
            events.append(_event_json("check_out", detail.check_out))
        return jsonify({"date": work_date.isoformat(), "events": events, "worked_seconds": detail.worked_seconds})

    if service.settings.production:
        return

    @app.route("/attendance/debug/reset-today", methods=["POST"], endpoint="attendance_debug_reset")
    @auth_required
    def attendance_debug_reset():
        data = optional_json_body()
        user_id = g.identity.user_id
        if data.get("user_id") not in (None, ""):
            try:
                user_id = int(data["user_id"])
            except (TypeError, ValueError):
                raise ValidationError("user_id must be an integer")

        today = service.today(utc_now())
        removed = service.reset_day(user_id, today)
        return jsonify(
            {
                "ok": True,
                "user_id": user_id,
                "date": today.isoformat(),
                "removed": removed,
                "message": "reset done" if removed else "nothing to reset",
            }
        )
