from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import weekday_of
from ..core.enums import Role, Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from ..identities.model import Identity
from .model import ScheduleWindow
from .repository import ScheduleRepository

_SELECT = """
    SELECT
        sc.schedule_id, sc.day, sc.start_time, sc.end_time,
        sc.instructor_id, sc.room_id, sc.subject_name, sc.section_name,
        r.room_no
    FROM subject_schedules sc
    LEFT JOIN rooms r ON r.room_id = sc.room_id
"""


def _to_window(r: Dict[str, Any]) -> ScheduleWindow:
    return ScheduleWindow(
        schedule_id=int(r["schedule_id"]),
        day=Weekday(r["day"]),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        instructor_id=int(r["instructor_id"]),
        room_id=int(r["room_id"]) if r.get("room_id") is not None else None,
        subject_name=r.get("subject_name"),
        section_name=r.get("section_name"),
        room_no=r.get("room_no"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_active_schedules_for_identity(self, identity: Identity, at: datetime) -> Sequence[ScheduleWindow]:
        day = weekday_of(at).value

        if identity.role == Role.STUDENT:
            query = (
                _SELECT
                + """
                JOIN student_schedules ss ON ss.schedule_id = sc.schedule_id
                WHERE ss.student_id=%s AND ss.status='ACTIVE' AND sc.status='ACTIVE' AND sc.day=%s
                ORDER BY sc.start_time ASC
                """
            )
        else:
            query = (
                _SELECT
                + """
                WHERE sc.instructor_id=%s AND sc.status='ACTIVE' AND sc.day=%s
                ORDER BY sc.start_time ASC
                """
            )

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(query, (identity.identity_id, day))
            return [_to_window(r) for r in fetchall(cur)]

    def get_schedule(self, schedule_id: int) -> Optional[ScheduleWindow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE sc.schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_window(r) if r else None
