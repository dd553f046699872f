from __future__ import annotations

from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import PersistenceConflict
from .connection import DatabaseConnection

# A lost race on the open-slot key, or InnoDB picking this session as deadlock victim.
CONFLICT_ERRNOS = frozenset({errorcode.ER_DUP_ENTRY, errorcode.ER_LOCK_DEADLOCK})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit on success, roll back on any error.

    Conflict errors surface as ``PersistenceConflict`` so callers can retry
    without knowing about connector error codes.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        if e.errno in CONFLICT_ERRNOS:
            raise PersistenceConflict(str(e)) from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Schedule start/end columns as ``datetime.time``.

    The pure-Python connector hands TIME columns back as ``timedelta``, the C
    extension as ``time``, and some views as text like ``'08:30:00'``.
    """
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, seconds % 3600 // 60, seconds % 60)
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError as e:
            raise ValueError(f"Invalid TIME value: {value!r}") from e
    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
