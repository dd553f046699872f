from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional

from ..core.enums import AttendanceOrigin, AttendanceStatus, Role, ScanOutcome, VerificationState
from ..identities.model import Identity
from ..schedules.model import ScheduleWindow


@dataclass(frozen=True)
class ScanEvent:
    """One tag read from a physical reader. Only its effects are persisted."""

    tag: str
    scanned_at: datetime
    device_id: Optional[str] = None
    location: Optional[str] = None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: attendance of one identity for one schedule slot and day."""

    attendance_id: int
    role: Role
    identity_id: int
    schedule_id: Optional[int]
    work_date: date
    status: AttendanceStatus
    check_in_time: datetime
    check_out_time: Optional[datetime]
    origin: AttendanceOrigin
    verification: VerificationState = VerificationState.PENDING
    reader_device_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attendanceId": self.attendance_id,
            "role": self.role.value,
            "identityId": self.identity_id,
            "scheduleId": self.schedule_id,
            "workDate": self.work_date.isoformat(),
            "status": self.status.value,
            "checkIn": self.check_in_time.isoformat(),
            "checkOut": self.check_out_time.isoformat() if self.check_out_time else None,
            "origin": self.origin.value,
            "verification": self.verification.value,
            "readerId": self.reader_device_id,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ProcessedScanResult:
    """Outcome of one scan, used for the HTTP response and the broadcast event."""

    outcome: ScanOutcome
    scan: ScanEvent
    record: Optional[AttendanceRecord] = None
    identity: Optional[Identity] = None
    schedule: Optional[ScheduleWindow] = None
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "outcome": self.outcome.value,
            "message": self.message,
            "tag": self.scan.tag,
            "readerId": self.scan.device_id,
            "location": self.scan.location,
            "scannedAt": self.scan.scanned_at.isoformat(),
            "attendance": self.record.to_dict() if self.record else None,
        }
        if self.identity:
            data["identity"] = {
                "role": self.identity.role.value,
                "id": self.identity.identity_id,
                "name": self.identity.display_name,
            }
        if self.schedule:
            data["schedule"] = {
                "id": self.schedule.schedule_id,
                "subject": self.schedule.subject_name,
                "section": self.schedule.section_name,
                "room": self.schedule.room_no,
                "start": self.schedule.start_time.strftime("%H:%M"),
                "end": self.schedule.end_time.strftime("%H:%M"),
            }
        return data
