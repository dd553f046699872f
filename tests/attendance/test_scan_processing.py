from __future__ import annotations

from datetime import time

import pytest

from conftest import MATH_MONDAY, STUDENT_42, at
from rfid_attendance.attendance.model import ScanEvent
from rfid_attendance.core.enums import AttendanceStatus, ScanLogStatus, ScanOutcome, ScanType, Weekday
from rfid_attendance.core.exceptions import AmbiguousScheduleError, InactiveIdentityError, PersistenceConflict
from rfid_attendance.schedules.model import ScheduleWindow


def _process(container, moment, tag="TAG-0001", device_id="READER-1"):
    return container.scan_processing_service.process(ScanEvent(tag=tag, scanned_at=moment, device_id=device_id))


def test_check_in_then_check_out_end_to_end(container, attendance):
    first = _process(container, at(8, 2))

    assert first.outcome == ScanOutcome.CHECK_IN
    assert first.identity == STUDENT_42
    assert first.schedule == MATH_MONDAY
    assert first.record.status == AttendanceStatus.PRESENT
    assert first.record.check_in_time == at(8, 2)
    assert first.record.check_out_time is None

    second = _process(container, at(9, 5))

    assert second.outcome == ScanOutcome.CHECK_OUT
    assert second.record.attendance_id == first.record.attendance_id
    assert second.record.check_out_time == at(9, 5)
    assert second.record.status == AttendanceStatus.PRESENT
    assert len(attendance.records) == 1


def test_check_in_at_0805_in_long_window_is_present(container, schedules):
    schedules.by_identity[STUDENT_42.key] = [
        ScheduleWindow(schedule_id=3, day=Weekday.MONDAY, start_time=time(8, 0), end_time=time(9, 30), instructor_id=7)
    ]

    assert _process(container, at(8, 5)).record.status == AttendanceStatus.PRESENT


def test_check_in_after_late_threshold(container):
    assert _process(container, at(8, 15)).record.status == AttendanceStatus.LATE


def test_debounced_scan_writes_nothing(container, attendance, scan_logs):
    _process(container, at(8, 2))
    writes, logged = attendance.writes, len(scan_logs.entries)

    result = _process(container, at(8, 2, 3))

    assert result.outcome == ScanOutcome.DUPLICATE_IGNORED
    assert result.record is None
    assert attendance.writes == writes
    assert len(scan_logs.entries) == logged


def test_debounce_is_per_tag_after_normalization(container):
    _process(container, at(8, 2), tag="tag-0001")

    assert _process(container, at(8, 2, 2), tag="TAG-0001").outcome == ScanOutcome.DUPLICATE_IGNORED


def test_unknown_tag_creates_no_attendance(container, attendance, scan_logs, publisher):
    result = _process(container, at(8, 2), tag="UNKNOWN-1")

    assert result.outcome == ScanOutcome.UNKNOWN_TAG
    assert result.record is None
    assert attendance.records == {}
    assert scan_logs.entries[-1].scan_status == ScanLogStatus.FAILED
    assert publisher.events("scan_processed")


def test_scan_outside_schedule_is_recorded_without_schedule(container, attendance):
    result = _process(container, at(13, 0))

    assert result.outcome == ScanOutcome.NO_ACTIVE_SCHEDULE
    assert result.record is not None
    assert result.record.schedule_id is None
    assert result.schedule is None
    assert len(attendance.records) == 1


def test_closed_slot_scan_is_duplicate_without_writes(container, attendance, scan_logs):
    _process(container, at(8, 2))
    _process(container, at(9, 5))
    writes, logged = attendance.writes, len(scan_logs.entries)

    result = _process(container, at(9, 10))

    assert result.outcome == ScanOutcome.DUPLICATE_IGNORED
    assert result.record.check_out_time == at(9, 5)
    assert attendance.writes == writes
    assert len(scan_logs.entries) == logged


def test_successful_scans_are_logged(container, scan_logs):
    _process(container, at(8, 2))
    _process(container, at(9, 5))

    assert [(e.scan_status, e.scan_type) for e in scan_logs.entries] == [
        (ScanLogStatus.SUCCESS, ScanType.CHECK_IN),
        (ScanLogStatus.SUCCESS, ScanType.CHECK_OUT),
    ]
    assert scan_logs.entries[0].identity_id == 42


def test_inactive_identity_is_rejected(container, attendance, scan_logs):
    with pytest.raises(InactiveIdentityError):
        _process(container, at(8, 2), tag="TAG-0099")

    assert attendance.records == {}
    assert scan_logs.entries[-1].scan_status == ScanLogStatus.FAILED


def test_ambiguous_schedule_fails_the_scan(container, schedules, attendance):
    schedules.add(
        STUDENT_42,
        ScheduleWindow(schedule_id=9, day=Weekday.MONDAY, start_time=time(8, 0), end_time=time(8, 50), instructor_id=3),
    )

    with pytest.raises(AmbiguousScheduleError):
        _process(container, at(8, 2))

    assert attendance.records == {}


def test_repeated_conflict_is_surfaced(container, attendance, scan_logs):
    attendance.conflicts_to_raise = 2

    with pytest.raises(PersistenceConflict):
        _process(container, at(8, 2))

    assert scan_logs.entries[-1].reason == "Concurrent update conflict"


def test_rescan_after_conflict_is_not_debounced(container, attendance):
    attendance.conflicts_to_raise = 2
    with pytest.raises(PersistenceConflict):
        _process(container, at(8, 2))

    result = _process(container, at(8, 2, 3))

    assert result.outcome == ScanOutcome.CHECK_IN
    assert len(attendance.records) == 1


def test_rescan_after_ambiguous_schedule_is_not_debounced(container, schedules):
    twin = ScheduleWindow(schedule_id=9, day=Weekday.MONDAY, start_time=time(8, 0), end_time=time(8, 50), instructor_id=3)
    schedules.add(STUDENT_42, twin)
    with pytest.raises(AmbiguousScheduleError):
        _process(container, at(8, 2))

    schedules.by_identity[STUDENT_42.key].remove(twin)

    assert _process(container, at(8, 2, 2)).outcome == ScanOutcome.CHECK_IN


def test_scan_log_failure_does_not_fail_the_scan(container, scan_logs, monkeypatch):
    def broken(entry):
        raise RuntimeError("log table missing")

    monkeypatch.setattr(scan_logs, "log_scan", broken)

    assert _process(container, at(8, 2)).outcome == ScanOutcome.CHECK_IN


def test_result_is_dispatched_to_reader_room(container, publisher):
    _process(container, at(8, 2), device_id="GATE-A")

    [(rooms, _)] = publisher.events("attendance_update")
    assert rooms == ("reader-updates", "reader:GATE-A")


SCIENCE_MONDAY = ScheduleWindow(
    schedule_id=2,
    day=Weekday.MONDAY,
    start_time=time(9, 0),
    end_time=time(10, 0),
    instructor_id=8,
    subject_name="Science",
)


def test_back_to_back_class_checks_in_after_previous_closed(container, schedules, attendance):
    schedules.add(STUDENT_42, SCIENCE_MONDAY)
    _process(container, at(8, 2))
    assert _process(container, at(8, 58)).outcome == ScanOutcome.CHECK_OUT

    result = _process(container, at(9, 1))

    assert result.outcome == ScanOutcome.CHECK_IN
    assert result.schedule == SCIENCE_MONDAY
    assert result.record.schedule_id == 2
    assert result.record.status == AttendanceStatus.PRESENT
    assert len(attendance.records) == 2


def test_open_earlier_class_still_takes_the_check_out(container, schedules):
    schedules.add(STUDENT_42, SCIENCE_MONDAY)
    _process(container, at(8, 2))

    result = _process(container, at(9, 5))

    assert result.outcome == ScanOutcome.CHECK_OUT
    assert result.schedule == MATH_MONDAY


def test_scan_when_every_covering_class_is_closed_is_duplicate(container, schedules, attendance):
    schedules.add(STUDENT_42, SCIENCE_MONDAY)
    for minute in (2, 58):
        _process(container, at(8, minute))
    for hh, mm in ((9, 1), (9, 5)):
        _process(container, at(hh, mm))
    writes = attendance.writes

    result = _process(container, at(9, 10))

    assert result.outcome == ScanOutcome.DUPLICATE_IGNORED
    assert result.record.schedule_id == MATH_MONDAY.schedule_id
    assert attendance.writes == writes
