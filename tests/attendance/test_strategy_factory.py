from attendance_guard.attendance.factory import AttendanceStrategyFactory
from attendance_guard.attendance.schedule import compute_schedule_flags
from attendance_guard.attendance.strategies.half_day_strategy import HalfDayStrategy
from attendance_guard.attendance.strategies.late_strategy import LateArrivalStrategy
from attendance_guard.attendance.strategies.normal_strategy import NormalStrategy
from attendance_guard.core.enums import AttendanceStatus
from attendance_guard.policy.model import WorkHoursPolicy

POLICY = WorkHoursPolicy(start="09:00", end="17:00", flex_minutes=30, attendance_deadline="10:00")


def test_factory_checkin_on_time_within_flex():
    strategy = AttendanceStrategyFactory().for_checkin(minute=9 * 60 + 30, policy=POLICY)
    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_flex():
    strategy = AttendanceStrategyFactory().for_checkin(minute=9 * 60 + 31, policy=POLICY)
    assert isinstance(strategy, LateArrivalStrategy)
    assert strategy.decide_checkin(minute=9 * 60 + 31, policy=POLICY).status == AttendanceStatus.PRESENT


def test_factory_half_day_after_deadline_when_enabled():
    policy = WorkHoursPolicy(attendance_deadline="10:00", half_day_after_deadline=True)
    strategy = AttendanceStrategyFactory().for_checkin(minute=10 * 60 + 1, policy=policy)

    assert isinstance(strategy, HalfDayStrategy)
    decision = strategy.decide_checkin(minute=10 * 60 + 1, policy=policy)
    assert decision.status == AttendanceStatus.HALF_DAY
    assert decision.is_late


def test_deadline_itself_is_not_past():
    policy = WorkHoursPolicy(start="09:00", flex_minutes=90, attendance_deadline="10:00", half_day_after_deadline=True)
    assert isinstance(AttendanceStrategyFactory().for_checkin(minute=10 * 60, policy=policy), NormalStrategy)


def test_schedule_flags():
    early = compute_schedule_flags(8 * 60 + 20, POLICY)
    flex = compute_schedule_flags(8 * 60 + 45, POLICY)
    late = compute_schedule_flags(9 * 60 + 45, POLICY)

    assert early.is_early_arrival and not early.is_flex_time
    assert flex.is_flex_time and not flex.is_late_arrival
    assert late.is_late_arrival and not late.is_flex_time
    assert late.expected_start == "09:00"
