from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .model import ScanLogEntry
from .repository import ScanLogRepository


class MySQLScanLogRepository(ScanLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def log_scan(self, entry: ScanLogEntry) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rfid_logs(
                    rfid_tag, reader_device_id, location, scan_type, scan_status,
                    user_role, identity_id, reason, scanned_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    entry.rfid_tag,
                    entry.reader_device_id,
                    entry.location,
                    entry.scan_type.value,
                    entry.scan_status.value,
                    entry.role.value if entry.role else None,
                    entry.identity_id,
                    (entry.reason or "")[:255] or None,
                    entry.scanned_at,
                ),
            )
            return int(cur.lastrowid)
