from __future__ import annotations

import logging
import threading

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..common.datetime_utils import now_local

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Socket ids of currently connected dashboard clients."""

    def __init__(self):
        self._sids: set[str] = set()
        self._lock = threading.Lock()

    def add(self, sid: str) -> int:
        with self._lock:
            self._sids.add(sid)
            return len(self._sids)

    def remove(self, sid: str) -> int:
        with self._lock:
            self._sids.discard(sid)
            return len(self._sids)

    def count(self) -> int:
        with self._lock:
            return len(self._sids)


def _valid_room(room) -> str | None:
    if isinstance(room, str) and room.strip():
        return room.strip()
    return None


def register(socketio: SocketIO, connections: ConnectionRegistry) -> None:
    def status_change(**fields) -> None:
        socketio.emit("status_change", {**fields, "timestamp": now_local().isoformat()})

    @socketio.on("connect")
    def on_connect(auth=None):
        total = connections.add(request.sid)
        logger.info("Client connected: %s", request.sid)
        status_change(type="connected", socketId=request.sid, connections=total)
        emit("connected", {"message": "Connected to attendance server", "timestamp": now_local().isoformat()})

    @socketio.on("disconnect")
    def on_disconnect(*args):
        total = connections.remove(request.sid)
        logger.info("Client disconnected: %s", request.sid)
        status_change(type="disconnected", socketId=request.sid, connections=total)

    @socketio.on("join-room")
    def on_join_room(room):
        room = _valid_room(room)
        if room is None:
            return
        join_room(room)
        logger.debug("Client %s joined room %s", request.sid, room)
        status_change(type="joined_room", room=room, socketId=request.sid)

    @socketio.on("leave-room")
    def on_leave_room(room):
        room = _valid_room(room)
        if room is None:
            return
        leave_room(room)
        logger.debug("Client %s left room %s", request.sid, room)
        status_change(type="left_room", room=room, socketId=request.sid)
