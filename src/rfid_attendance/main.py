from __future__ import annotations

import importlib
import logging
import os

from dotenv import load_dotenv
from flask import Flask
from flask_socketio import SocketIO

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import PipelineSettings, build_container
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DatabaseConnection, DBConfig
from .ingestion.controller import register as register_ingestion
from .realtime.controller import register as register_realtime
from .realtime.dispatcher import SocketIOEventPublisher
from .realtime.socket_handlers import ConnectionRegistry
from .realtime.socket_handlers import register as register_socket_handlers

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    if getattr(settings, "AUTO_INIT_DB", False):
        apply_schema(conn)
        logger.info("schema ready (tables=%d)", len(list_tables(conn)))

    socketio = SocketIO(app, cors_allowed_origins=getattr(settings, "SOCKETIO_CORS_ORIGINS", "*"))
    connections = ConnectionRegistry()
    container = build_container(
        conn=conn,
        publisher=SocketIOEventPublisher(socketio),
        settings=PipelineSettings.from_settings(settings),
        connections=connections,
    )

    register_socket_handlers(socketio, connections)
    register_ingestion(app, container)
    register_attendance(app, container)
    register_realtime(app, container)

    return app


def run() -> None:
    app = create_app()
    socketio: SocketIO = app.extensions["socketio"]
    socketio.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        debug=app.config["DEBUG"],
        allow_unsafe_werkzeug=True,
    )


if __name__ == "__main__":
    run()
