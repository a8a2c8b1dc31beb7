from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

import pytest

from src.absensi.absensi.container import assemble
from src.absensi.absensi.core.constants import EARTH_RADIUS_M
from src.absensi.absensi.core.exceptions import StoreUnavailable
from src.absensi.absensi.core.settings import OfficeSettings
from src.absensi.absensi.main import create_app
from tests.fakes import (
    TEST_TOKENS,
    InMemoryAttendance,
    InMemoryLeaves,
    InMemoryRefreshTokens,
    InMemoryUsers,
    make_container,
)


def office_body(office: OfficeSettings, selfie: str, meters_north: float = 0.0) -> dict:
    return {
        "lat": office.office_lat + math.degrees(meters_north / EARTH_RADIUS_M),
        "lng": office.office_lng,
        "selfie_base64": selfie,
    }


def test_routes_require_bearer_token(client):
    resp = client.get("/attendance/status")
    assert resp.status_code == 401
    assert resp.get_json()["error"]["code"] == "unauthorized"

    resp = client.get("/leave/quota", headers={"Authorization": "Bearer nonsense"})
    assert resp.status_code == 401


def test_register_login_get_user_refresh_logout(client):
    resp = client.post("/register", json={"username": "sari", "password": "secret1", "jabatan": "HRD"})
    assert resp.status_code == 201
    assert resp.get_json()["user"]["username"] == "sari"

    dup = client.post("/register", json={"username": "sari", "password": "secret1", "jabatan": "HRD"})
    assert dup.status_code == 409

    login = client.post("/login", json={"username": "sari", "password": "secret1"}).get_json()
    assert login["token_type"] == "Bearer"

    me = client.get("/get-user", headers={"Authorization": f"Bearer {login['access_token']}"})
    assert me.status_code == 200
    assert me.get_json()["jabatan"] == "HRD"

    refreshed = client.post("/refresh", json={"refresh_token": login["refresh_token"]})
    assert refreshed.status_code == 200
    new_refresh = refreshed.get_json()["refresh_token"]

    assert client.post("/logout", json={"refresh_token": new_refresh}).status_code == 204
    assert client.post("/refresh", json={"refresh_token": new_refresh}).status_code == 401


def test_attendance_day_over_http(client, auth_headers, office, selfie):
    status = client.post("/attendance/status", json={"lat": office.office_lat, "lng": office.office_lng}, headers=auth_headers)
    body = status.get_json()
    assert body["inside_radius"] is True
    assert body["distance_m"] == 0.0
    assert body["next_action"] == "check_in"

    resp = client.post("/attendance/check-in", json=office_body(office, selfie, 10), headers=auth_headers)
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["result"] == "checked_in"
    assert body["distance_m"] == 10.0
    assert body["next_action"] == "check_out"
    assert body["today"]["check_in_at"].endswith("Z")

    again = client.post("/attendance/check-in", json=office_body(office, selfie), headers=auth_headers)
    assert again.status_code == 409
    assert again.get_json()["error"]["code"] == "already_checked_in"

    resp = client.post("/attendance/check-out", json=office_body(office, selfie), headers=auth_headers)
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["result"] == "checked_out"
    assert body["next_action"] is None
    assert body["today"]["worked_seconds"] >= 0

    twice = client.post("/attendance/check-out", json=office_body(office, selfie), headers=auth_headers)
    assert twice.status_code == 409
    assert twice.get_json()["error"]["code"] == "not_checked_in_yet_or_already_checked_out"

    today = body["today"]["date"]
    marks = client.get(f"/attendance/marks?month={today[:7]}", headers=auth_headers).get_json()
    assert marks["days_present"] == [today]

    day = client.get(f"/attendance/day?date={today}", headers=auth_headers).get_json()
    assert [e["type"] for e in day["events"]] == ["check_in", "check_out"]
    assert day["events"][0]["distance_m"] == 10.0
    assert day["events"][0]["photo_base64"]


def test_check_in_outside_radius_returns_422(client, auth_headers, office, selfie):
    resp = client.post("/attendance/check-in", json=office_body(office, selfie, 25.1), headers=auth_headers)
    assert resp.status_code == 422
    error = resp.get_json()["error"]
    assert error["code"] == "outside_radius"
    assert error["details"] == {"distance_m": 25.1, "radius_m": 20.0}


def test_check_in_requires_a_valid_selfie(client, auth_headers, office):
    resp = client.post("/attendance/check-in", json={"lat": office.office_lat, "lng": office.office_lng}, headers=auth_headers)
    assert resp.status_code == 400

    resp = client.post("/attendance/check-in", json=office_body(office, "aGVsbG8="), headers=auth_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "invalid_image"


def test_bad_query_parameters(client, auth_headers):
    assert client.get("/attendance/day", headers=auth_headers).status_code == 400
    assert client.get("/attendance/marks?month=2025-13", headers=auth_headers).status_code == 400
    assert client.get("/leave/quota?year=abc", headers=auth_headers).status_code == 400
    assert client.get("/leave/cuti/list?status=maybe", headers=auth_headers).status_code == 400


def test_debug_reset_today(client, auth_headers, office, selfie):
    client.post("/attendance/check-in", json=office_body(office, selfie), headers=auth_headers)
    resp = client.post("/attendance/debug/reset-today", json={}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["removed"] == 1

    status = client.get("/attendance/status", headers=auth_headers).get_json()
    assert status["next_action"] == "check_in"


def test_debug_reset_route_absent_in_production(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(make_container(OfficeSettings(production=True)))
    client = app.test_client()
    client.post("/register", json={"username": "budi", "password": "secret1", "jabatan": "Staff"})
    token = client.post("/login", json={"username": "budi", "password": "secret1"}).get_json()["access_token"]

    resp = client.post("/attendance/debug/reset-today", json={}, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 404


def test_paid_leave_flow(client, auth_headers):
    resp = client.post(
        "/leave/cuti/request",
        json={"start_date": "2025-03-10", "end_date": "2025-03-14", "reason": "family"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["days"] == 5
    assert body["quota"]["remaining_days"] == 12

    approved = client.post("/leave/cuti/approve", json={"request_id": str(body["request_id"])}, headers=auth_headers)
    assert approved.status_code == 200
    snapshot = approved.get_json()["quota_snapshot"]
    assert (snapshot["used_days"], snapshot["remaining_days"]) == (5, 7)

    again = client.post("/leave/cuti/reject", json={"request_id": body["request_id"]}, headers=auth_headers)
    assert again.status_code == 409

    over = client.post("/leave/cuti/request", json={"start_date": "2025-06-01", "end_date": "2025-06-10"}, headers=auth_headers)
    assert over.status_code == 422
    assert over.get_json()["error"]["details"] == {"requested_days": 10, "remaining_days": 7}

    listing = client.get("/leave/cuti/list?year=2025&status=approved", headers=auth_headers).get_json()
    assert listing["status_filter"] == "approved"
    assert [item["days"] for item in listing["items"]] == [5]

    quota = client.get("/leave/quota?year=2025", headers=auth_headers).get_json()
    assert quota == {"year": 2025, "quota_days": 12, "used_days": 5, "remaining_days": 7}


def test_leave_decision_errors(client, auth_headers, selfie):
    assert client.post("/leave/cuti/approve", json={"request_id": 404}, headers=auth_headers).status_code == 404

    sick = client.post(
        "/leave/sakit/request",
        json={"start_date": "2025-03-10", "end_date": "2025-03-11", "doctor_note_base64": selfie},
        headers=auth_headers,
    ).get_json()
    wrong_kind = client.post("/leave/cuti/approve", json={"request_id": sick["request_id"]}, headers=auth_headers)
    assert wrong_kind.status_code == 400
    assert wrong_kind.get_json()["error"]["code"] == "invalid_kind"

    client.post("/register", json={"username": "lain", "password": "secret1", "jabatan": "Staff"})
    other = client.post("/login", json={"username": "lain", "password": "secret1"}).get_json()["access_token"]
    forbidden = client.post(
        f"/leave/sakit/{sick['request_id']}/approve", headers={"Authorization": f"Bearer {other}"}
    )
    assert forbidden.status_code == 403


def test_sick_leave_flow(client, auth_headers, selfie):
    missing = client.post("/leave/sakit/request", json={"start_date": "2025-03-10", "end_date": "2025-03-11"}, headers=auth_headers)
    assert missing.status_code == 400
    assert missing.get_json()["error"]["code"] == "proof_required"

    bad_range = client.post(
        "/leave/sakit/request",
        json={"start_date": "2025-03-11", "end_date": "2025-03-10", "doctor_note_base64": selfie},
        headers=auth_headers,
    )
    assert bad_range.status_code == 400
    assert bad_range.get_json()["error"]["code"] == "invalid_date_range"

    created = client.post(
        "/leave/sakit/request",
        json={"start_date": "2025-03-10", "end_date": "2025-03-11", "doctor_note_base64": selfie, "reason": "flu"},
        headers=auth_headers,
    )
    assert created.status_code == 201
    rid = created.get_json()["request_id"]

    decided = client.post(f"/leave/sakit/{rid}/reject", headers=auth_headers)
    assert decided.get_json() == {"result": "rejected", "id": rid}

    items = client.get("/leave/sakit/list?year=2025", headers=auth_headers).get_json()["items"]
    assert items[0]["has_proof"] is True
    assert items[0]["status"] == "rejected"


def test_office_config(client, auth_headers, office):
    body = client.get("/config/office", headers=auth_headers).get_json()
    assert body == {"lat": office.office_lat, "lng": office.office_lng, "radius_m": office.radius_m}


@pytest.mark.parametrize(
    "raw",
    [
        '{"lat": NaN, "lng": 106.8}',
        '{"lat": -6.2, "lng": Infinity}',
        '{"lat": -Infinity, "lng": 106.8}',
    ],
)
def test_status_rejects_non_finite_coordinates(client, auth_headers, raw):
    resp = client.post("/attendance/status", data=raw, content_type="application/json", headers=auth_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "invalid_payload"


@pytest.mark.parametrize("lat, lng", [(91.5, 106.8), (-6.2, 400.0), (-90.01, 0.0)])
def test_check_in_rejects_out_of_range_coordinates(client, auth_headers, selfie, lat, lng):
    resp = client.post("/attendance/check-in", json={"lat": lat, "lng": lng, "selfie_base64": selfie}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.get_json()["error"]["code"] == "invalid_payload"

    status = client.get("/attendance/status", headers=auth_headers).get_json()
    assert status["next_action"] == "check_in"


def test_coordinates_on_the_range_edges_are_accepted(client, auth_headers):
    resp = client.post("/attendance/status", json={"lat": -90, "lng": 180}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["inside_radius"] is False


class UnavailableAttendance(InMemoryAttendance):
    def get_for_user_and_date(self, user_id, work_date):
        raise StoreUnavailable()


def test_store_outage_returns_500_with_stable_code(monkeypatch, caplog):
    monkeypatch.setenv("APP_ENV", "testing")
    container = assemble(
        office=OfficeSettings(),
        tokens=TEST_TOKENS,
        users_repo=InMemoryUsers(),
        refresh_tokens_repo=InMemoryRefreshTokens(),
        attendance_repo=UnavailableAttendance(),
        leave_repo=InMemoryLeaves(),
    )
    client = create_app(container).test_client()
    client.post("/register", json={"username": "budi", "password": "secret1", "jabatan": "Staff"})
    token = client.post("/login", json={"username": "budi", "password": "secret1"}).get_json()["access_token"]

    with caplog.at_level(logging.WARNING):
        resp = client.get("/attendance/status", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 500
    assert resp.get_json()["error"]["code"] == "store_unavailable"
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]


def test_backwards_check_out_logs_the_anomaly_once(monkeypatch, client, auth_headers, office, selfie, caplog):
    clock = iter(
        [
            datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc),
            datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc),
        ]
    )
    monkeypatch.setattr("src.absensi.absensi.attendance.controller.utc_now", lambda: next(clock))

    assert client.post("/attendance/check-in", json=office_body(office, selfie), headers=auth_headers).status_code == 201
    with caplog.at_level(logging.WARNING, logger="src.absensi.absensi.attendance.service"):
        resp = client.post("/attendance/check-out", json=office_body(office, selfie), headers=auth_headers)

    assert resp.status_code == 200
    today = resp.get_json()["today"]
    assert today == {
        "date": "2025-03-10",
        "check_in_at": "2025-03-10T10:00:00Z",
        "check_out_at": "2025-03-10T09:00:00Z",
        "worked_seconds": 0,
    }
    assert sum("negative worked duration" in r.getMessage() for r in caplog.records) == 1
