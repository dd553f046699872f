from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.constants import CONFLICT_RETRIES, DEFAULT_LATE_THRESHOLD_MINUTES
from ..core.enums import AttendanceOrigin
from ..core.exceptions import PersistenceConflict
from ..identities.model import Identity
from ..schedules.model import ScheduleWindow
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, ScanEvent
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class Transition(str, Enum):
    OPENED = "OPENED"
    CLOSED = "CLOSED"
    ALREADY_CLOSED = "ALREADY_CLOSED"


@dataclass(frozen=True)
class SlotTransition:
    transition: Transition
    record: AttendanceRecord


class SessionStateTracker:
    """Check-in / check-out state machine per (identity, schedule, day).

    NONE -> OPEN on the first scan, OPEN -> CLOSED on the next one. A closed
    slot is never reopened; later scans that day leave it untouched. Only
    RFID_SCAN records are looked at, so manual entries are never closed by a scan.
    There is no time-based auto-closure here.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
        conflict_retries: int = CONFLICT_RETRIES,
    ):
        self._attendance = attendance
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._late_threshold_minutes = int(late_threshold_minutes)
        self._conflict_retries = int(conflict_retries)

    def apply(self, scan: ScanEvent, identity: Identity, window: Optional[ScheduleWindow]) -> SlotTransition:
        attempt = 0
        while True:
            try:
                return self._apply_once(scan, identity, window)
            except PersistenceConflict:
                if attempt >= self._conflict_retries:
                    raise
                attempt += 1
                logger.warning(
                    "Attendance slot conflict for %s %s, retrying (%d/%d)",
                    identity.role.value,
                    identity.identity_id,
                    attempt,
                    self._conflict_retries,
                )

    def _apply_once(self, scan: ScanEvent, identity: Identity, window: Optional[ScheduleWindow]) -> SlotTransition:
        now = scan.scanned_at
        slot = dict(
            role=identity.role,
            identity_id=identity.identity_id,
            schedule_id=window.schedule_id if window else None,
            work_date=now.date(),
            origin=AttendanceOrigin.RFID_SCAN,
        )

        with self._attendance.transaction() as tx:
            current = tx.find_open_attendance(**slot)
            if current is not None:
                # Status stays as decided at check-in.
                closed = tx.close_attendance(attendance_id=current.attendance_id, check_out_time=now)
                return SlotTransition(Transition.CLOSED, closed)

            finished = tx.find_closed_attendance(**slot)
            if finished is not None:
                return SlotTransition(Transition.ALREADY_CLOSED, finished)

            strategy = self._factory.for_checkin(
                now=now, window=window, late_threshold_minutes=self._late_threshold_minutes
            )
            decision = strategy.decide_checkin(now=now, window=window)
            created = tx.create_attendance(
                check_in_time=now,
                status=decision.status,
                reader_device_id=scan.device_id,
                notes=_note_for(window, decision.note),
                **slot,
            )
            return SlotTransition(Transition.OPENED, created)


def _note_for(window: Optional[ScheduleWindow], note: Optional[str]) -> Optional[str]:
    parts = []
    if window and window.subject_name:
        parts.append(f"Attended {window.subject_name}")
    if note:
        parts.append(note)
    return "; ".join(parts) or None
