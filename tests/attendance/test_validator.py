from dataclasses import replace
from datetime import timedelta

import pytest
from conftest import MAIN_OFFICE, ny

from attendance_guard.attendance.model import AttendanceSubmission, GeoLocation
from attendance_guard.attendance.validator import AttendanceValidator
from attendance_guard.core.exceptions import ValidationError

HERE = GeoLocation(latitude=MAIN_OFFICE.latitude, longitude=MAIN_OFFICE.longitude, accuracy=15)


def _submit(**kwargs):
    base = dict(username="alice", work_mode="office", location=HERE)
    base.update(kwargs)
    return AttendanceSubmission(**base)


def test_valid_submission_returns_effective_time(policy, fixed_now):
    assert AttendanceValidator().validate(_submit(), policy, now=fixed_now) == fixed_now


def test_blank_username_rejected(policy, fixed_now):
    with pytest.raises(ValidationError, match="username"):
        AttendanceValidator().validate(_submit(username="  "), policy, now=fixed_now)


def test_unknown_work_mode_rejected(policy, fixed_now):
    with pytest.raises(ValidationError, match="Work mode"):
        AttendanceValidator().validate(_submit(work_mode="beach"), policy, now=fixed_now)


@pytest.mark.parametrize("skew", [timedelta(minutes=5, seconds=1), -timedelta(minutes=6)])
def test_timestamp_too_far_from_server_time(policy, fixed_now, skew):
    with pytest.raises(ValidationError, match="too far"):
        AttendanceValidator().validate(_submit(timestamp=fixed_now + skew), policy, now=fixed_now)


def test_timestamp_within_gap_is_accepted(policy, fixed_now):
    ts = fixed_now - timedelta(minutes=4)
    assert AttendanceValidator().validate(_submit(timestamp=ts), policy, now=fixed_now) == ts


def test_before_flex_window_rejected(policy):
    now = ny(3, 8, 29)
    with pytest.raises(ValidationError, match="Too early"):
        AttendanceValidator().validate(_submit(), policy, now=now)


def test_after_flex_window_rejected(policy):
    now = ny(3, 17, 31)
    with pytest.raises(ValidationError, match="Too late"):
        AttendanceValidator().validate(_submit(), policy, now=now)


def test_window_edges_are_inclusive(policy):
    AttendanceValidator().validate(_submit(), policy, now=ny(3, 8, 30))
    AttendanceValidator().validate(_submit(), policy, now=ny(3, 17, 30))


def test_window_uses_tenant_timezone(policy):
    kolkata = replace(policy, work_hours=replace(policy.work_hours, timezone="Asia/Kolkata"))
    # 09:05 in New York is 19:35 in Kolkata.
    with pytest.raises(ValidationError, match="Too late"):
        AttendanceValidator().validate(_submit(), kolkata, now=ny(3, 9, 5))


def test_low_accuracy_office_location_rejected(policy, fixed_now):
    loc = replace(HERE, accuracy=350)
    with pytest.raises(ValidationError, match="accuracy too low: 350m"):
        AttendanceValidator().validate(_submit(location=loc), policy, now=fixed_now)


def test_low_accuracy_is_fine_for_remote(policy, fixed_now):
    loc = replace(HERE, accuracy=350)
    AttendanceValidator().validate(_submit(work_mode="remote", location=loc), policy, now=fixed_now)
