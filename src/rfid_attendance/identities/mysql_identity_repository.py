from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Identity
from .repository import IdentityRepository

_OWNER_TABLES = {
    Role.STUDENT: ("students", "student_id"),
    Role.INSTRUCTOR: ("instructors", "instructor_id"),
}


class MySQLIdentityRepository(IdentityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_identity_by_tag(self, tag: str) -> Optional[Identity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    t.owner_role,
                    t.owner_id,
                    COALESCE(s.full_name, i.full_name) AS full_name,
                    COALESCE(s.status, i.status) AS owner_status
                FROM rfid_tags t
                LEFT JOIN students s ON t.owner_role = 'STUDENT' AND s.student_id = t.owner_id
                LEFT JOIN instructors i ON t.owner_role = 'INSTRUCTOR' AND i.instructor_id = t.owner_id
                WHERE t.tag_number=%s AND t.status='ACTIVE'
                """,
                (tag,),
            )
            r = fetchone(cur)
            if not r or r.get("full_name") is None:
                return None
            return Identity(
                role=Role(r["owner_role"]),
                identity_id=int(r["owner_id"]),
                display_name=r["full_name"],
                is_active=r.get("owner_status") == "ACTIVE",
            )

    def get_identity(self, role: Role, identity_id: int) -> Optional[Identity]:
        table, id_col = _OWNER_TABLES[role]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {id_col} AS identity_id, full_name, status FROM {table} WHERE {id_col}=%s",
                (int(identity_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Identity(
                role=role,
                identity_id=int(r["identity_id"]),
                display_name=r["full_name"],
                is_active=r.get("status") == "ACTIVE",
            )
