from datetime import date
from types import SimpleNamespace

import pytest
from conftest import TENANT, InMemoryAttendance, InMemoryPolicies, make_record, ny
from flask import Flask

from attendance_guard.attendance.controller import parse_timestamp, register, submission_from_json
from attendance_guard.attendance.geofence import SiteDistance
from attendance_guard.attendance.service import AttendanceService
from attendance_guard.core.exceptions import LocationError, NotFoundError, ValidationError


class StubAttendanceService:
    def __init__(self):
        self.calls = []
        self.error = None

    def mark_attendance(self, submission, tenant_id):
        self.calls.append(("mark", submission, tenant_id))
        if self.error:
            raise self.error
        return make_record(work_date=date(2026, 2, 3), clock_in="09:05", created_at=ny(3, 9, 5))

    def check_out(self, username, tenant_id):
        raise NotFoundError("No attendance record found for today. Please clock in first.")

    def recalculate_total_hours(self, tenant_id):
        self.calls.append(("recalculate", tenant_id))
        return {"tenant_id": tenant_id, "records_processed": 0, "records_fixed": 0, "completed_at": "x"}


@pytest.fixture
def service():
    return StubAttendanceService()


@pytest.fixture
def client(service):
    app = Flask(__name__)
    app.config["ADMIN_TOKEN"] = "s3cret"
    register(app, SimpleNamespace(attendance_service=service, fraud_service=None))
    return app.test_client()


def _payload(**overrides):
    body = {
        "username": "alice",
        "tenantId": TENANT,
        "workMode": "office",
        "location": {"latitude": 40.7128, "longitude": -74.006, "accuracy": 12},
        "timestamp": "2026-02-03T14:05:00Z",
    }
    body.update(overrides)
    return body


def test_mark_returns_created_record(client, service):
    resp = client.post("/api/attendance", json=_payload(), headers={"User-Agent": "pytest"})

    assert resp.status_code == 201
    assert resp.get_json()["record"]["work_date"] == "2026-02-03"
    _, submission, tenant_id = service.calls[0]
    assert tenant_id == TENANT
    assert submission.location.accuracy == 12
    assert submission.device.user_agent == "pytest"


def test_tenant_header_wins(client, service):
    client.post("/api/attendance", json=_payload(), headers={"X-Tenant-ID": "other"})
    assert service.calls[0][2] == "other"


def test_missing_tenant_is_bad_request(client):
    resp = client.post("/api/attendance", json=_payload(tenantId=None))
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Tenant ID is required"


def test_location_error_lists_distances(client, service):
    service.error = LocationError(
        "Location not within office premises. Distances: Main Office: 5000m",
        distances=[SiteDistance(site="Main Office", distance_m=5000)],
    )

    resp = client.post("/api/attendance", json=_payload())

    assert resp.status_code == 422
    body = resp.get_json()
    assert body["success"] is False
    assert body["distances"] == [{"site": "Main Office", "distance": 5000}]


def test_validation_error_maps_to_400(client, service):
    service.error = ValidationError("Attendance timestamp is too far from current time")
    assert client.post("/api/attendance", json=_payload()).status_code == 400


def test_unexpected_error_is_500(client, service):
    service.error = RuntimeError("boom")
    resp = client.post("/api/attendance", json=_payload())
    assert resp.status_code == 500
    assert "boom" not in resp.get_json()["message"]


def test_checkout_without_record_is_404(client):
    resp = client.post("/api/attendance/checkout", json={"username": "alice", "tenantId": TENANT})
    assert resp.status_code == 404


@pytest.mark.parametrize("headers", [{}, {"X-Admin-Token": "wrong"}])
def test_admin_routes_require_token(client, headers):
    resp = client.post("/api/attendance/recalculate", json={"tenantId": TENANT}, headers=headers)
    assert resp.status_code == 403


def test_admin_recalculate(client, service):
    resp = client.post("/api/attendance/recalculate", json={"tenantId": TENANT}, headers={"X-Admin-Token": "s3cret"})
    assert resp.status_code == 200
    assert resp.get_json()["records_fixed"] == 0
    assert service.calls == [("recalculate", TENANT)]


def test_parse_timestamp_accepts_epoch_millis():
    assert parse_timestamp(1770127500000) == ny(3, 9, 5)


def test_parse_timestamp_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_timestamp("yesterday-ish")


def test_submission_accepts_legacy_work_type_key():
    submission = submission_from_json({"username": "bob", "workType": "wfh"})
    assert submission.work_mode == "wfh"
    assert submission.location is None


@pytest.mark.parametrize("limit", ["0", "-1"])
def test_non_positive_limit_is_bad_request(limit):
    app = Flask(__name__)
    service = AttendanceService(InMemoryAttendance(), InMemoryPolicies())
    register(app, SimpleNamespace(attendance_service=service, fraud_service=None))

    resp = app.test_client().get(f"/api/attendance?username=alice&tenantId={TENANT}&limit={limit}")

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Limit must be a positive integer"


def test_admin_token_is_not_bound_to_a_tenant(client, service):
    resp = client.post(
        "/api/attendance/recalculate",
        json={"tenantId": TENANT},
        headers={"X-Admin-Token": "s3cret", "X-Tenant-ID": "globex"},
    )
    assert resp.status_code == 200
    assert service.calls == [("recalculate", "globex")]
