from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..attendance.model import ProcessedScanResult
from ..core.enums import ScanOutcome
from ..core.exceptions import (
    AmbiguousScheduleError,
    InactiveIdentityError,
    PersistenceConflict,
    ValidationError,
)
from ..container import Container

logger = logging.getLogger(__name__)

_STATUS_BY_OUTCOME = {
    ScanOutcome.CHECK_IN: 201,
    ScanOutcome.NO_ACTIVE_SCHEDULE: 201,
    ScanOutcome.CHECK_OUT: 200,
    ScanOutcome.DUPLICATE_IGNORED: 200,
    ScanOutcome.UNKNOWN_TAG: 404,
}


def _status_for(result: ProcessedScanResult) -> int:
    if result.outcome == ScanOutcome.NO_ACTIVE_SCHEDULE and result.record and not result.record.is_open:
        return 200
    return _STATUS_BY_OUTCOME[result.outcome]


def register(app: Flask, container: Container) -> None:
    def _error(message: str, status: int, **extra):
        return jsonify({"success": False, "error": message, **extra}), status

    @app.route("/api/rfid/scan", methods=["POST"], endpoint="rfid_scan")
    @app.route("/api/attendance/mqtt", methods=["POST"], endpoint="attendance_mqtt")
    def rfid_scan():
        payload = request.get_json(silent=True)
        try:
            result = container.ingestion_gateway.ingest(payload, remote_addr=request.remote_addr)
        except ValidationError as e:
            return _error(str(e), 400)
        except InactiveIdentityError as e:
            return _error(str(e), 403)
        except AmbiguousScheduleError as e:
            return _error(str(e), 409, scheduleIds=list(e.schedule_ids))
        except PersistenceConflict:
            return _error("Attendance was updated concurrently, please scan again", 409)
        except Exception:
            logger.exception("Failed to process RFID payload")
            return _error("Failed to process attendance", 500)

        if isinstance(result, ProcessedScanResult):
            body = {"success": result.outcome != ScanOutcome.UNKNOWN_TAG, **result.to_dict()}
            return jsonify(body), _status_for(result)

        return jsonify({"success": True, "registered": True, "reader": result.to_dict()}), 201
