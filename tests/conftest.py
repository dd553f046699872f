from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time
from typing import Optional

import pytest
from flask import Flask

from rfid_attendance.attendance.controller import register as register_attendance
from rfid_attendance.attendance.model import AttendanceRecord
from rfid_attendance.container import PipelineSettings, assemble_container
from rfid_attendance.core.enums import AttendanceOrigin, AttendanceStatus, ReaderStatus, Role, VerificationState, Weekday
from rfid_attendance.core.exceptions import PersistenceConflict
from rfid_attendance.identities.model import Identity
from rfid_attendance.ingestion.controller import register as register_ingestion
from rfid_attendance.readers.model import Reader
from rfid_attendance.realtime.controller import register as register_realtime
from rfid_attendance.schedules.model import ScheduleWindow

# 2026-10-19 is a Monday.
MONDAY = date(2026, 10, 19)


def at(hh: int, mm: int, ss: int = 0, day: date = MONDAY) -> datetime:
    return datetime.combine(day, time(hh, mm, ss))


@dataclass
class InMemoryIdentities:
    by_tag: dict[str, Identity] = field(default_factory=dict)

    def find_identity_by_tag(self, tag: str) -> Optional[Identity]:
        return self.by_tag.get(tag)

    def get_identity(self, role: Role, identity_id: int) -> Optional[Identity]:
        for identity in self.by_tag.values():
            if identity.role == role and identity.identity_id == identity_id:
                return identity
        return None


@dataclass
class InMemorySchedules:
    by_identity: dict[tuple[str, int], list[ScheduleWindow]] = field(default_factory=dict)

    def add(self, identity: Identity, window: ScheduleWindow) -> None:
        self.by_identity.setdefault(identity.key, []).append(window)

    def find_active_schedules_for_identity(self, identity: Identity, at: datetime):
        return list(self.by_identity.get(identity.key, []))

    def get_schedule(self, schedule_id: int) -> Optional[ScheduleWindow]:
        for windows in self.by_identity.values():
            for w in windows:
                if w.schedule_id == schedule_id:
                    return w
        return None


class InMemoryAttendance:
    def __init__(self):
        self.records: dict[int, AttendanceRecord] = {}
        self.writes = 0
        self.conflicts_to_raise = 0
        self._id = 0
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self):
        with self._lock:
            yield self

    def _find(self, *, role, identity_id, schedule_id, work_date, origin, open_: bool):
        matches = [
            r
            for r in self.records.values()
            if r.role == role
            and r.identity_id == identity_id
            and r.schedule_id == schedule_id
            and r.work_date == work_date
            and r.origin == origin
            and r.is_open == open_
        ]
        return max(matches, key=lambda r: r.check_in_time) if matches else None

    def find_open_attendance(self, *, role, identity_id, schedule_id, work_date, origin=AttendanceOrigin.RFID_SCAN):
        return self._find(
            role=role, identity_id=identity_id, schedule_id=schedule_id, work_date=work_date, origin=origin, open_=True
        )

    def find_closed_attendance(self, *, role, identity_id, schedule_id, work_date, origin=AttendanceOrigin.RFID_SCAN):
        return self._find(
            role=role, identity_id=identity_id, schedule_id=schedule_id, work_date=work_date, origin=origin, open_=False
        )

    def create_attendance(
        self,
        *,
        role,
        identity_id,
        schedule_id,
        work_date,
        check_in_time,
        status,
        origin,
        verification=VerificationState.PENDING,
        reader_device_id=None,
        notes=None,
    ) -> AttendanceRecord:
        if self.conflicts_to_raise:
            self.conflicts_to_raise -= 1
            raise PersistenceConflict("simulated concurrent insert")
        if origin == AttendanceOrigin.RFID_SCAN and self.find_open_attendance(
            role=role, identity_id=identity_id, schedule_id=schedule_id, work_date=work_date
        ):
            raise PersistenceConflict("slot already open")

        self._id += 1
        self.writes += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            role=role,
            identity_id=identity_id,
            schedule_id=schedule_id,
            work_date=work_date,
            status=status,
            check_in_time=check_in_time,
            check_out_time=None,
            origin=origin,
            verification=verification,
            reader_device_id=reader_device_id,
            notes=notes,
        )
        self.records[rec.attendance_id] = rec
        return rec

    def close_attendance(self, *, attendance_id: int, check_out_time: datetime) -> AttendanceRecord:
        rec = self.records.get(attendance_id)
        if rec is None or not rec.is_open:
            raise PersistenceConflict("no longer open")
        self.writes += 1
        closed = replace(rec, check_out_time=check_out_time)
        self.records[attendance_id] = closed
        return closed

    def open_records(self) -> list[AttendanceRecord]:
        return [r for r in self.records.values() if r.is_open]


class InMemoryScanLogs:
    def __init__(self):
        self.entries = []

    def log_scan(self, entry) -> int:
        self.entries.append(entry)
        return len(self.entries)


class InMemoryReaders:
    def __init__(self):
        self.readers: dict[str, Reader] = {}

    def upsert_discovered_reader(self, *, device_id, device_name, ip_address, seen_at) -> Reader:
        existing = self.readers.get(device_id)
        reader = Reader(
            reader_id=existing.reader_id if existing else len(self.readers) + 1,
            device_id=device_id,
            device_name=device_name or (existing.device_name if existing else None),
            ip_address=ip_address or (existing.ip_address if existing else None),
            status=existing.status if existing else ReaderStatus.ACTIVE,
            last_seen=seen_at,
        )
        self.readers[device_id] = reader
        return reader


class RecordingPublisher:
    def __init__(self):
        self.sent: list[tuple[tuple[str, ...], str, dict]] = []
        self.fail = False

    def publish(self, rooms, event: str, message: dict) -> None:
        if self.fail:
            raise ConnectionError("socket server unavailable")
        self.sent.append((tuple(rooms), event, message))

    def events(self, event: str) -> list[tuple[tuple[str, ...], dict]]:
        return [(rooms, msg) for rooms, ev, msg in self.sent if ev == event]


STUDENT_42 = Identity(role=Role.STUDENT, identity_id=42, display_name="Ana Reyes")
INSTRUCTOR_7 = Identity(role=Role.INSTRUCTOR, identity_id=7, display_name="Prof. Cruz")
INACTIVE_STUDENT = Identity(role=Role.STUDENT, identity_id=99, display_name="Old Account", is_active=False)

MATH_MONDAY = ScheduleWindow(
    schedule_id=1,
    day=Weekday.MONDAY,
    start_time=time(8, 0),
    end_time=time(9, 0),
    instructor_id=7,
    room_id=3,
    subject_name="Mathematics",
    section_name="A",
    room_no="R-101",
)


@pytest.fixture
def fixed_now() -> datetime:
    return at(8, 2)


@pytest.fixture
def identities() -> InMemoryIdentities:
    return InMemoryIdentities(
        {
            "TAG-0001": STUDENT_42,
            "TAG-0700": INSTRUCTOR_7,
            "TAG-0099": INACTIVE_STUDENT,
        }
    )


@pytest.fixture
def schedules() -> InMemorySchedules:
    repo = InMemorySchedules()
    repo.add(STUDENT_42, MATH_MONDAY)
    repo.add(INSTRUCTOR_7, MATH_MONDAY)
    return repo


@pytest.fixture
def attendance() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def scan_logs() -> InMemoryScanLogs:
    return InMemoryScanLogs()


@pytest.fixture
def readers() -> InMemoryReaders:
    return InMemoryReaders()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def container(identities, schedules, attendance, scan_logs, readers, publisher):
    return assemble_container(
        identities_repo=identities,
        schedules_repo=schedules,
        attendance_repo=attendance,
        readers_repo=readers,
        scan_logs_repo=scan_logs,
        publisher=publisher,
        settings=PipelineSettings(),
    )


@pytest.fixture
def client(container):
    app = Flask(__name__)
    app.config["TESTING"] = True
    register_ingestion(app, container)
    register_attendance(app, container)
    register_realtime(app, container)
    with app.test_client() as c:
        yield c
