from datetime import date, timedelta

import pytest
from conftest import TENANT, make_record, ny

from attendance_guard.attendance.duplicate_guard import DuplicateGuard
from attendance_guard.core.enums import AttendanceStatus
from attendance_guard.core.exceptions import DuplicateError
from attendance_guard.policy.model import AttendanceRules


def _check(repo, now, work_date=None):
    return DuplicateGuard(repo).check_duplicate(
        username="alice",
        tenant_id=TENANT,
        work_date=work_date or now.date(),
        now=now,
        rules=AttendanceRules(),
    )


def test_no_history_is_not_duplicate(attendance_repo, fixed_now):
    assert _check(attendance_repo, fixed_now).duplicate is False


def test_same_day_record_is_duplicate_and_names_clock_in(attendance_repo):
    attendance_repo.seed(make_record(work_date=ny(3, 9, 5).date(), clock_in="09:05", created_at=ny(3, 9, 5)))

    check = _check(attendance_repo, ny(3, 15, 0))

    assert check.duplicate is True
    assert "09:05" in check.reason


def test_recent_record_on_previous_date_is_duplicate(attendance_repo):
    # Marked at 23:40 on the 2nd, trying again for the 3rd just after midnight.
    attendance_repo.seed(make_record(work_date=date(2026, 2, 2), clock_in="23:40", created_at=ny(2, 23, 40)))

    check = _check(attendance_repo, ny(3, 0, 10), work_date=date(2026, 2, 3))

    assert check.duplicate is True
    assert "30 minutes ago" in check.reason


def test_record_older_than_interval_is_not_duplicate(attendance_repo):
    attendance_repo.seed(make_record(work_date=ny(2, 9).date(), created_at=ny(2, 9)))
    assert _check(attendance_repo, ny(3, 9, 5)).duplicate is False


def test_other_tenant_does_not_count(attendance_repo, fixed_now):
    attendance_repo.seed(make_record(work_date=fixed_now.date(), created_at=fixed_now, tenant_id="other"))
    assert _check(attendance_repo, fixed_now).duplicate is False


def test_ensure_not_duplicate_raises(attendance_repo, fixed_now):
    attendance_repo.seed(make_record(work_date=fixed_now.date(), created_at=fixed_now - timedelta(hours=3)))
    with pytest.raises(DuplicateError):
        DuplicateGuard(attendance_repo).ensure_not_duplicate(
            username="alice", tenant_id=TENANT, work_date=fixed_now.date(), now=fixed_now, rules=AttendanceRules()
        )


def test_latest_record_ahead_of_clock_reports_zero_minutes(attendance_repo):
    # Server clock is behind the stored created_at.
    attendance_repo.seed(make_record(work_date=date(2026, 2, 2), clock_in="23:40", created_at=ny(3, 0, 13)))

    check = _check(attendance_repo, ny(3, 0, 10), work_date=date(2026, 2, 3))

    assert check.duplicate is True
    assert "Last marked 0 minutes ago" in check.reason


def test_cleared_same_day_record_still_blocks(attendance_repo):
    attendance_repo.seed(
        make_record(work_date=date(2026, 2, 3), clock_in=None, created_at=ny(2, 9), status=AttendanceStatus.ABSENT)
    )

    check = _check(attendance_repo, ny(3, 9, 5), work_date=date(2026, 2, 3))

    assert check.reason == "Attendance already marked for today"
