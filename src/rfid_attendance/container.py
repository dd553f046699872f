from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType

from .attendance.debounce import ScanDebouncer
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import ManualAttendanceService, ScanProcessingService
from .attendance.tracker import SessionStateTracker
from .core import constants
from .database.connection import DatabaseConnection
from .identities.mysql_identity_repository import MySQLIdentityRepository
from .identities.repository import IdentityRepository
from .identities.resolver import TagResolver
from .ingestion.gateway import IngestionGateway
from .readers.mysql_reader_repository import MySQLReaderRepository
from .readers.repository import ReaderRepository
from .readers.service import ReaderRegistrationService
from .realtime.dispatcher import EventDispatcher, EventPublisher
from .realtime.socket_handlers import ConnectionRegistry
from .scanlog.mysql_scan_log_repository import MySQLScanLogRepository
from .scanlog.repository import ScanLogRepository
from .schedules.matcher import ScheduleWindowMatcher
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.repository import ScheduleRepository


@dataclass(frozen=True)
class PipelineSettings:
    scan_debounce_seconds: int = constants.DEFAULT_SCAN_DEBOUNCE_SECONDS
    late_threshold_minutes: int = constants.DEFAULT_LATE_THRESHOLD_MINUTES
    early_grace_minutes: int = constants.DEFAULT_EARLY_GRACE_MINUTES
    late_checkout_grace_minutes: int = constants.DEFAULT_LATE_CHECKOUT_GRACE_MINUTES
    broadcast_room: str = constants.DEFAULT_BROADCAST_ROOM

    @classmethod
    def from_settings(cls, settings: ModuleType) -> "PipelineSettings":
        defaults = cls()
        return cls(
            scan_debounce_seconds=int(getattr(settings, "SCAN_DEBOUNCE_SECONDS", defaults.scan_debounce_seconds)),
            late_threshold_minutes=int(getattr(settings, "LATE_THRESHOLD_MINUTES", defaults.late_threshold_minutes)),
            early_grace_minutes=int(getattr(settings, "EARLY_GRACE_MINUTES", defaults.early_grace_minutes)),
            late_checkout_grace_minutes=int(
                getattr(settings, "LATE_CHECKOUT_GRACE_MINUTES", defaults.late_checkout_grace_minutes)
            ),
            broadcast_room=str(getattr(settings, "BROADCAST_ROOM", defaults.broadcast_room)),
        )


@dataclass(frozen=True)
class Container:
    identities_repo: IdentityRepository
    schedules_repo: ScheduleRepository
    attendance_repo: AttendanceRepository
    readers_repo: ReaderRepository
    scan_logs_repo: ScanLogRepository

    connections: ConnectionRegistry
    dispatcher: EventDispatcher
    scan_processing_service: ScanProcessingService
    manual_attendance_service: ManualAttendanceService
    reader_registration_service: ReaderRegistrationService
    ingestion_gateway: IngestionGateway


def assemble_container(
    *,
    identities_repo: IdentityRepository,
    schedules_repo: ScheduleRepository,
    attendance_repo: AttendanceRepository,
    readers_repo: ReaderRepository,
    scan_logs_repo: ScanLogRepository,
    publisher: EventPublisher,
    settings: PipelineSettings | None = None,
    connections: ConnectionRegistry | None = None,
) -> Container:
    settings = settings or PipelineSettings()

    dispatcher = EventDispatcher(publisher, default_room=settings.broadcast_room)
    scan_processing_service = ScanProcessingService(
        debouncer=ScanDebouncer(settings.scan_debounce_seconds),
        resolver=TagResolver(identities_repo),
        matcher=ScheduleWindowMatcher(
            schedules_repo,
            early_grace_minutes=settings.early_grace_minutes,
            late_checkout_grace_minutes=settings.late_checkout_grace_minutes,
        ),
        tracker=SessionStateTracker(
            attendance_repo,
            strategy_factory=AttendanceStrategyFactory(),
            late_threshold_minutes=settings.late_threshold_minutes,
        ),
        scan_logs=scan_logs_repo,
        dispatcher=dispatcher,
    )
    manual_attendance_service = ManualAttendanceService(attendance_repo, identities_repo, schedules_repo, dispatcher)
    reader_registration_service = ReaderRegistrationService(readers_repo, dispatcher)
    ingestion_gateway = IngestionGateway(scan_processing_service, reader_registration_service)

    return Container(
        identities_repo=identities_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        readers_repo=readers_repo,
        scan_logs_repo=scan_logs_repo,
        connections=connections or ConnectionRegistry(),
        dispatcher=dispatcher,
        scan_processing_service=scan_processing_service,
        manual_attendance_service=manual_attendance_service,
        reader_registration_service=reader_registration_service,
        ingestion_gateway=ingestion_gateway,
    )


def build_container(
    *,
    conn: DatabaseConnection,
    publisher: EventPublisher,
    settings: PipelineSettings | None = None,
    connections: ConnectionRegistry | None = None,
) -> Container:
    return assemble_container(
        identities_repo=MySQLIdentityRepository(conn),
        schedules_repo=MySQLScheduleRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        readers_repo=MySQLReaderRepository(conn),
        scan_logs_repo=MySQLScanLogRepository(conn),
        publisher=publisher,
        settings=settings,
        connections=connections,
    )
