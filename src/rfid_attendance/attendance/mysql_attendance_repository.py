from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterator, Optional

from ..core.enums import AttendanceOrigin, AttendanceStatus, Role, VerificationState
from ..core.exceptions import PersistenceConflict
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository, AttendanceUnitOfWork

_COLUMNS = """
    attendance_id, user_role, identity_id, schedule_id, work_date, status,
    check_in_time, check_out_time, origin, verification, reader_device_id, notes
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        role=Role(r["user_role"]),
        identity_id=int(r["identity_id"]),
        schedule_id=int(r["schedule_id"]) if r.get("schedule_id") is not None else None,
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        origin=AttendanceOrigin(r["origin"]),
        verification=VerificationState(r["verification"]),
        reader_device_id=r.get("reader_device_id"),
        notes=r.get("notes"),
    )


class _MySQLAttendanceSession(AttendanceUnitOfWork):
    def __init__(self, cur):
        self._cur = cur

    def _find_slot(
        self,
        *,
        role: Role,
        identity_id: int,
        schedule_id: Optional[int],
        work_date: date,
        origin: AttendanceOrigin,
        open_: bool,
    ) -> Optional[AttendanceRecord]:
        state = "check_out_time IS NULL" if open_ else "check_out_time IS NOT NULL"
        lock = "FOR UPDATE" if open_ else ""
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE user_role=%s AND identity_id=%s AND work_date=%s
              AND schedule_key=%s AND origin=%s AND {state}
            ORDER BY check_in_time DESC
            LIMIT 1
            {lock}
            """,
            (role.value, int(identity_id), work_date, int(schedule_id or 0), origin.value),
        )
        r = fetchone(self._cur)
        return _to_record(r) if r else None

    def find_open_attendance(
        self,
        *,
        role: Role,
        identity_id: int,
        schedule_id: Optional[int],
        work_date: date,
        origin: AttendanceOrigin = AttendanceOrigin.RFID_SCAN,
    ) -> Optional[AttendanceRecord]:
        return self._find_slot(
            role=role, identity_id=identity_id, schedule_id=schedule_id, work_date=work_date, origin=origin, open_=True
        )

    def find_closed_attendance(
        self,
        *,
        role: Role,
        identity_id: int,
        schedule_id: Optional[int],
        work_date: date,
        origin: AttendanceOrigin = AttendanceOrigin.RFID_SCAN,
    ) -> Optional[AttendanceRecord]:
        return self._find_slot(
            role=role, identity_id=identity_id, schedule_id=schedule_id, work_date=work_date, origin=origin, open_=False
        )

    def _get(self, attendance_id: int) -> AttendanceRecord:
        self._cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
        return _to_record(fetchone(self._cur))

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
        self._cur.execute(
            """
            INSERT INTO attendance_records(
                user_role, identity_id, schedule_id, work_date, status, check_in_time,
                origin, verification, reader_device_id, notes
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                role.value,
                int(identity_id),
                schedule_id,
                work_date,
                status.value,
                check_in_time,
                origin.value,
                verification.value,
                reader_device_id,
                notes,
            ),
        )
        return self._get(int(self._cur.lastrowid))

    def close_attendance(self, *, attendance_id: int, check_out_time: datetime) -> AttendanceRecord:
        self._cur.execute(
            """
            UPDATE attendance_records
            SET check_out_time=%s
            WHERE attendance_id=%s AND check_out_time IS NULL
            """,
            (check_out_time, int(attendance_id)),
        )
        if self._cur.rowcount == 0:
            raise PersistenceConflict(f"Attendance {attendance_id} is no longer open")
        return self._get(attendance_id)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[AttendanceUnitOfWork]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLAttendanceSession(cur)

    def find_open_attendance(self, **kwargs) -> Optional[AttendanceRecord]:
        with self.transaction() as tx:
            return tx.find_open_attendance(**kwargs)

    def find_closed_attendance(self, **kwargs) -> Optional[AttendanceRecord]:
        with self.transaction() as tx:
            return tx.find_closed_attendance(**kwargs)

    def create_attendance(self, **kwargs) -> AttendanceRecord:
        with self.transaction() as tx:
            return tx.create_attendance(**kwargs)

    def close_attendance(self, *, attendance_id: int, check_out_time: datetime) -> AttendanceRecord:
        with self.transaction() as tx:
            return tx.close_attendance(attendance_id=attendance_id, check_out_time=check_out_time)
