from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_local
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/websocket/health", methods=["GET"], endpoint="websocket_health")
    def websocket_health():
        return jsonify(
            {
                "status": "healthy",
                "connections": container.connections.count(),
                "timestamp": now_local().isoformat(),
            }
        ), 200
