from __future__ import annotations

from datetime import date, datetime
from typing import ContextManager, Optional, Protocol

from ..core.enums import AttendanceOrigin, AttendanceStatus, Role, VerificationState
from .model import AttendanceRecord


class AttendanceUnitOfWork(Protocol):
    """Attendance reads and writes that share one transaction.

    ``find_open_attendance`` locks the slot it reads, so the
    check-then-create/close sequence cannot interleave with another scan.
    """

    def find_open_attendance(
        self,
        *,
        role: Role,
        identity_id: int,
        schedule_id: Optional[int],
        work_date: date,
        origin: AttendanceOrigin = AttendanceOrigin.RFID_SCAN,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_closed_attendance(
        self,
        *,
        role: Role,
        identity_id: int,
        schedule_id: Optional[int],
        work_date: date,
        origin: AttendanceOrigin = AttendanceOrigin.RFID_SCAN,
    ) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_attendance(
        self,
        *,
        role: Role,
        identity_id: int,
        schedule_id: Optional[int],
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        origin: AttendanceOrigin,
        verification: VerificationState = VerificationState.PENDING,
        reader_device_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Raises PersistenceConflict when the slot already has an open record."""

        raise NotImplementedError

    def close_attendance(self, *, attendance_id: int, check_out_time: datetime) -> AttendanceRecord:
        """Raises PersistenceConflict when the record was closed concurrently."""

        raise NotImplementedError


class AttendanceRepository(AttendanceUnitOfWork, Protocol):
    def transaction(self) -> ContextManager[AttendanceUnitOfWork]:
        raise NotImplementedError
