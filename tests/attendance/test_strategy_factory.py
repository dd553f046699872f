from datetime import datetime, time

from rfid_attendance.attendance.factory import AttendanceStrategyFactory
from rfid_attendance.attendance.strategies.late_strategy import LateStrategy
from rfid_attendance.attendance.strategies.normal_strategy import NormalStrategy
from rfid_attendance.attendance.strategies.unscheduled_strategy import UnscheduledStrategy
from rfid_attendance.core.enums import AttendanceStatus, Weekday
from rfid_attendance.schedules.model import ScheduleWindow

WINDOW = ScheduleWindow(schedule_id=1, day=Weekday.MONDAY, start_time=time(8, 0), end_time=time(9, 30), instructor_id=7)


def test_factory_checkin_on_time_within_threshold():
    now = datetime(2026, 10, 19, 8, 5, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, window=WINDOW, late_threshold_minutes=10)

    assert isinstance(strategy, NormalStrategy)
    assert strategy.decide_checkin(now=now, window=WINDOW).status == AttendanceStatus.PRESENT


def test_factory_checkin_exactly_at_threshold_is_present():
    now = datetime(2026, 10, 19, 8, 10, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, window=WINDOW, late_threshold_minutes=10)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_threshold():
    now = datetime(2026, 10, 19, 8, 15, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, window=WINDOW, late_threshold_minutes=10)
    decision = strategy.decide_checkin(now=now, window=WINDOW)

    assert isinstance(strategy, LateStrategy)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "Late by 15 min"


def test_factory_early_scan_is_present():
    now = datetime(2026, 10, 19, 7, 50, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, window=WINDOW, late_threshold_minutes=10)

    assert isinstance(strategy, NormalStrategy)


def test_factory_without_window_uses_unscheduled_strategy():
    now = datetime(2026, 10, 19, 13, 0, 0)

    strategy = AttendanceStrategyFactory().for_checkin(now=now, window=None, late_threshold_minutes=10)

    assert isinstance(strategy, UnscheduledStrategy)
    assert strategy.decide_checkin(now=now, window=None).status == AttendanceStatus.PRESENT
