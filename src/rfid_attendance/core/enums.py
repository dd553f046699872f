from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Who a tag or attendance record belongs to."""

    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    LATE = "LATE"
    ABSENT = "ABSENT"
    EXCUSED = "EXCUSED"


class AttendanceOrigin(str, Enum):
    """How a record was created. Only RFID_SCAN records take part in open/close matching."""

    RFID_SCAN = "RFID_SCAN"
    MANUAL_ENTRY = "MANUAL_ENTRY"


class VerificationState(str, Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    REJECTED = "REJECTED"


class ScanOutcome(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"
    DUPLICATE_IGNORED = "DUPLICATE_IGNORED"
    UNKNOWN_TAG = "UNKNOWN_TAG"
    NO_ACTIVE_SCHEDULE = "NO_ACTIVE_SCHEDULE"


class ScanLogStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class ScanType(str, Enum):
    CHECK_IN = "CHECK_IN"
    CHECK_OUT = "CHECK_OUT"


class ReaderStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TESTING = "TESTING"
    OFFLINE = "OFFLINE"
    ERROR = "ERROR"


class Weekday(str, Enum):
    """Schedule day names, ordered like ``date.weekday()``."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_index(cls, index: int) -> "Weekday":
        return list(cls)[index]
