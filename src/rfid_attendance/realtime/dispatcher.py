from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Protocol, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_BROADCAST_ROOM, READER_ROOM_PREFIX
from ..core.enums import ScanOutcome

if TYPE_CHECKING:
    from ..attendance.model import AttendanceRecord, ProcessedScanResult
    from ..readers.model import Reader

logger = logging.getLogger(__name__)

SCAN_PROCESSED = "scan_processed"
ATTENDANCE_UPDATE = "attendance_update"
READER_DISCOVERED = "reader_discovered"

_RECORD_CHANGING = {ScanOutcome.CHECK_IN, ScanOutcome.CHECK_OUT, ScanOutcome.NO_ACTIVE_SCHEDULE}


class EventPublisher(Protocol):
    """Room-keyed broadcast to connected dashboard clients.

    One call is one delivery: a client in several of ``rooms`` gets the message once.
    """

    def publish(self, rooms: Sequence[str], event: str, message: Dict[str, Any]) -> None:
        raise NotImplementedError


class SocketIOEventPublisher(EventPublisher):
    def __init__(self, socketio):
        self._socketio = socketio

    def publish(self, rooms: Sequence[str], event: str, message: Dict[str, Any]) -> None:
        self._socketio.emit(event, message, to=list(rooms))


def reader_room(device_id: str) -> str:
    return f"{READER_ROOM_PREFIX}{device_id}"


class EventDispatcher:
    """Fans processed scans out to subscribed clients.

    Best-effort and at-most-once: nothing is stored or replayed, and a failing
    publisher is logged without affecting the caller. Reconnecting clients
    re-fetch current state through the regular query endpoints.
    """

    def __init__(
        self,
        publisher: EventPublisher,
        *,
        default_room: str = DEFAULT_BROADCAST_ROOM,
        clock: Callable[[], datetime] = now_local,
    ):
        self._publisher = publisher
        self._default_room = default_room
        self._clock = clock

    def dispatch(self, result: "ProcessedScanResult") -> None:
        rooms = self._rooms_for(result.scan.device_id)
        data = result.to_dict()
        self._send(rooms, SCAN_PROCESSED, data)
        if result.outcome in _RECORD_CHANGING and result.record is not None:
            self._send(rooms, ATTENDANCE_UPDATE, data)

    def announce_manual_entry(self, record: "AttendanceRecord") -> None:
        self._send([self._default_room], ATTENDANCE_UPDATE, {"outcome": None, "attendance": record.to_dict()})

    def announce_reader(self, reader: "Reader") -> None:
        self._send(self._rooms_for(reader.device_id), READER_DISCOVERED, reader.to_dict())

    def _rooms_for(self, device_id: str | None) -> List[str]:
        rooms = [self._default_room]
        if device_id:
            rooms.append(reader_room(device_id))
        return rooms

    def _send(self, rooms: Sequence[str], event: str, data: Dict[str, Any]) -> None:
        message = {"type": event, "data": data, "timestamp": self._clock().isoformat()}
        try:
            self._publisher.publish(rooms, event, message)
        except Exception:
            logger.warning("Failed to publish %s to rooms %s", event, ", ".join(rooms), exc_info=True)
