from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Set, Tuple

from ..common.datetime_utils import now_local
from ..common.validators import normalize_tag
from ..core.enums import (
    AttendanceOrigin,
    AttendanceStatus,
    Role,
    ScanLogStatus,
    ScanOutcome,
    ScanType,
    VerificationState,
)
from ..core.exceptions import (
    AmbiguousScheduleError,
    InactiveIdentityError,
    NoActiveScheduleError,
    NotFoundError,
    PersistenceConflict,
    UnknownTagError,
)
from ..identities.model import Identity
from ..identities.repository import IdentityRepository
from ..identities.resolver import TagResolver
from ..realtime.dispatcher import EventDispatcher
from ..scanlog.model import ScanLogEntry
from ..scanlog.repository import ScanLogRepository
from ..schedules.matcher import ScheduleWindowMatcher
from ..schedules.model import ScheduleWindow
from ..schedules.repository import ScheduleRepository
from .debounce import ScanDebouncer
from .model import AttendanceRecord, ProcessedScanResult, ScanEvent
from .repository import AttendanceRepository
from .tracker import SessionStateTracker, SlotTransition, Transition

logger = logging.getLogger(__name__)


class ScanProcessingService:
    """Runs one scan through debounce, tag resolution, schedule matching and
    the session state machine, then hands the result to the dispatcher.

    Unknown tags and schedule-less scans resolve to a result; inactive
    identities, ambiguous schedules and repeated write conflicts are raised
    for the caller to report.
    """

    def __init__(
        self,
        *,
        debouncer: ScanDebouncer,
        resolver: TagResolver,
        matcher: ScheduleWindowMatcher,
        tracker: SessionStateTracker,
        scan_logs: ScanLogRepository,
        dispatcher: EventDispatcher,
    ):
        self._debouncer = debouncer
        self._resolver = resolver
        self._matcher = matcher
        self._tracker = tracker
        self._scan_logs = scan_logs
        self._dispatcher = dispatcher

    def process(self, scan: ScanEvent) -> ProcessedScanResult:
        scan = replace(scan, tag=normalize_tag(scan.tag))

        if self._debouncer.is_duplicate(scan.tag, scan.scanned_at):
            logger.debug("Debounced repeated read of %s", scan.tag)
            return self._finish(
                ProcessedScanResult(ScanOutcome.DUPLICATE_IGNORED, scan, message="Repeated read ignored")
            )

        try:
            return self._process_accepted(scan)
        except Exception:
            # A failed scan must not make the user's rescan look like chatter.
            self._debouncer.release(scan.tag, scan.scanned_at)
            raise

    def _process_accepted(self, scan: ScanEvent) -> ProcessedScanResult:
        try:
            identity = self._resolver.resolve(scan.tag)
        except UnknownTagError as e:
            logger.info("Unknown tag %s from reader %s", scan.tag, scan.device_id or "-")
            self._log(scan, ScanLogStatus.FAILED, reason=str(e))
            return self._finish(ProcessedScanResult(ScanOutcome.UNKNOWN_TAG, scan, message="Card not found"))
        except InactiveIdentityError as e:
            self._log(scan, ScanLogStatus.FAILED, reason=str(e))
            raise

        try:
            window, slot = self._attribute(scan, identity)
        except AmbiguousScheduleError as e:
            logger.warning("Scan %s needs manual review: %s", scan.tag, e)
            self._log(scan, ScanLogStatus.FAILED, identity=identity, reason=str(e))
            raise
        except PersistenceConflict as e:
            logger.error("Giving up on scan %s after repeated conflicts: %s", scan.tag, e)
            self._log(scan, ScanLogStatus.FAILED, identity=identity, reason="Concurrent update conflict")
            raise

        result = self._result_for(scan, identity, window, slot)
        if slot.transition != Transition.ALREADY_CLOSED:
            scan_type = ScanType.CHECK_OUT if slot.transition == Transition.CLOSED else ScanType.CHECK_IN
            self._log(scan, ScanLogStatus.SUCCESS, identity=identity, scan_type=scan_type)
        logger.info(
            "Scan %s -> %s %s (%s)",
            scan.tag,
            identity.role.value.lower(),
            identity.identity_id,
            result.outcome.value,
        )
        return self._finish(result)

    def _attribute(
        self, scan: ScanEvent, identity: Identity
    ) -> Tuple[Optional[ScheduleWindow], SlotTransition]:
        """Apply the scan to the earliest covering window whose slot is still usable.

        Back-to-back classes overlap once grace periods are added, so a window
        whose slot is already closed for the day is passed over in favour of the
        next one. Only when every covering window is closed does the scan count
        as a repeat of the first of them.
        """
        skip: Set[int] = set()
        first_closed: Optional[Tuple[ScheduleWindow, SlotTransition]] = None
        while True:
            try:
                window: Optional[ScheduleWindow] = self._matcher.match(identity, scan.scanned_at, skip=skip)
            except NoActiveScheduleError as e:
                if first_closed is not None:
                    return first_closed
                logger.info("%s; recording schedule-less attendance", e)
                window = None

            slot = self._tracker.apply(scan, identity, window)
            if window is None or slot.transition != Transition.ALREADY_CLOSED:
                return window, slot
            first_closed = first_closed or (window, slot)
            skip.add(window.schedule_id)

    def _result_for(
        self,
        scan: ScanEvent,
        identity: Identity,
        window: Optional[ScheduleWindow],
        slot: SlotTransition,
    ) -> ProcessedScanResult:
        if slot.transition == Transition.ALREADY_CLOSED:
            outcome, message = ScanOutcome.DUPLICATE_IGNORED, "Already checked out for this class"
        elif window is None:
            outcome = ScanOutcome.NO_ACTIVE_SCHEDULE
            message = "Checked out (no active schedule)" if slot.transition == Transition.CLOSED else "Recorded without schedule"
        elif slot.transition == Transition.OPENED:
            outcome, message = ScanOutcome.CHECK_IN, f"Welcome, {identity.display_name}"
        else:
            outcome, message = ScanOutcome.CHECK_OUT, f"Goodbye, {identity.display_name}"
        return ProcessedScanResult(outcome, scan, record=slot.record, identity=identity, schedule=window, message=message)

    def _finish(self, result: ProcessedScanResult) -> ProcessedScanResult:
        self._dispatcher.dispatch(result)
        return result

    def _log(
        self,
        scan: ScanEvent,
        status: ScanLogStatus,
        *,
        identity: Optional[Identity] = None,
        scan_type: ScanType = ScanType.CHECK_IN,
        reason: Optional[str] = None,
    ) -> None:
        entry = ScanLogEntry(
            rfid_tag=scan.tag,
            scanned_at=scan.scanned_at,
            scan_type=scan_type,
            scan_status=status,
            reader_device_id=scan.device_id,
            location=scan.location,
            role=identity.role if identity else None,
            identity_id=identity.identity_id if identity else None,
            reason=reason,
        )
        # Best-effort, like event dispatch.
        try:
            self._scan_logs.log_scan(entry)
        except Exception:
            logger.warning("Failed to write scan log for %s", scan.tag, exc_info=True)


class ManualAttendanceService:
    """Administrative override: records an explicit status, bypassing the scan state machine."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        identities: IdentityRepository,
        schedules: ScheduleRepository,
        dispatcher: EventDispatcher,
    ):
        self._attendance = attendance
        self._identities = identities
        self._schedules = schedules
        self._dispatcher = dispatcher

    def record(
        self,
        *,
        role: Role,
        identity_id: int,
        status: AttendanceStatus,
        schedule_id: Optional[int] = None,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        identity = self._identities.get_identity(role, identity_id)
        if identity is None:
            raise NotFoundError(f"{role.value.title()} not found")

        if schedule_id is not None and self._schedules.get_schedule(schedule_id) is None:
            raise NotFoundError("Subject schedule not found")

        at = timestamp or now_local()
        record = self._attendance.create_attendance(
            role=role,
            identity_id=identity.identity_id,
            schedule_id=schedule_id,
            work_date=at.date(),
            check_in_time=at,
            status=status,
            origin=AttendanceOrigin.MANUAL_ENTRY,
            verification=VerificationState.PENDING,
            notes=notes,
        )
        logger.info(
            "Manual %s entry for %s %s (attendance %s)",
            status.value,
            role.value.lower(),
            identity.identity_id,
            record.attendance_id,
        )
        self._dispatcher.announce_manual_entry(record)
        return record

