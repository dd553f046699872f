from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import optional_str, require_non_empty, require_positive_int
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)

_ENTITY_ROLES = {"student": Role.STUDENT, "instructor": Role.INSTRUCTOR}


def register(app: Flask, container: Container) -> None:
    def _parse_manual(body) -> dict:
        if not isinstance(body, dict):
            raise ValidationError("Payload must be a JSON object")
        if not body.get("entityType") or not body.get("entityId") or not body.get("status"):
            raise ValidationError("Missing required fields")

        role = _ENTITY_ROLES.get(require_non_empty(body["entityType"], "entityType").lower())
        if role is None:
            raise ValidationError("entityType must be 'student' or 'instructor'")
        try:
            status = AttendanceStatus(require_non_empty(body["status"], "status").upper())
        except ValueError as e:
            raise ValidationError(f"status must be one of {[s.value for s in AttendanceStatus]}") from e

        schedule_id = body.get("scheduleId", body.get("subjectSchedId"))
        timestamp = optional_str(body.get("timestamp"), "timestamp")
        return {
            "role": role,
            "identity_id": require_positive_int(body["entityId"], "entityId"),
            "status": status,
            "schedule_id": require_positive_int(schedule_id, "scheduleId") if schedule_id else None,
            "timestamp": parse_iso_datetime(timestamp) if timestamp else None,
            "notes": optional_str(body.get("notes"), "notes"),
        }

    @app.route("/api/attendance/manual", methods=["POST"], endpoint="attendance_manual")
    def attendance_manual():
        try:
            record = container.manual_attendance_service.record(**_parse_manual(request.get_json(silent=True)))
        except ValidationError as e:
            return jsonify({"success": False, "error": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"success": False, "error": str(e)}), 404
        except Exception:
            logger.exception("Manual attendance entry failed")
            return jsonify({"success": False, "error": "Internal Server Error"}), 500

        return jsonify({"success": True, "attendance": record.to_dict()}), 201
