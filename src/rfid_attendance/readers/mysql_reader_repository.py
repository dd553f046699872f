from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..core.enums import ReaderStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Reader
from .repository import ReaderRepository


class MySQLReaderRepository(ReaderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_discovered_reader(
        self,
        *,
        device_id: str,
        device_name: Optional[str],
        ip_address: Optional[str],
        seen_at: datetime,
    ) -> Reader:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO rfid_readers(device_id, device_name, ip_address, status, last_seen)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    device_name=COALESCE(VALUES(device_name), device_name),
                    ip_address=COALESCE(VALUES(ip_address), ip_address),
                    last_seen=VALUES(last_seen)
                """,
                (device_id, device_name, ip_address, ReaderStatus.ACTIVE.value, seen_at),
            )
            cur.execute(
                """
                SELECT reader_id, device_id, device_name, ip_address, status, last_seen
                FROM rfid_readers
                WHERE device_id=%s
                """,
                (device_id,),
            )
            r = fetchone(cur)
            return Reader(
                reader_id=int(r["reader_id"]),
                device_id=r["device_id"],
                device_name=r.get("device_name"),
                ip_address=r.get("ip_address"),
                status=ReaderStatus(r["status"]),
                last_seen=r.get("last_seen"),
            )
