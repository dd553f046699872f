from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from ..attendance.model import ProcessedScanResult, ScanEvent
from ..attendance.service import ScanProcessingService
from ..common.datetime_utils import now_local, parse_iso_datetime
from ..common.validators import optional_str, require_non_empty
from ..core.exceptions import ValidationError
from ..readers.model import DiscoveryPayload, Reader
from ..readers.service import ReaderRegistrationService

TAG_KEYS = ("tag", "rfid")
DEVICE_KEYS = ("deviceId", "id", "readerId", "deviceName")


def _first(payload: Mapping[str, Any], keys, field_name: str) -> Optional[str]:
    for key in keys:
        value = optional_str(payload.get(key), field_name)
        if value:
            return value
    return None


def _tag_key(payload: Mapping[str, Any]) -> Optional[str]:
    # null counts as absent; an empty string is still a broken scan.
    return next((k for k in TAG_KEYS if payload.get(k) is not None), None)


def parse_payload(
    payload: Any,
    *,
    received_at: datetime,
    remote_addr: Optional[str] = None,
) -> Union[ScanEvent, DiscoveryPayload]:
    """Validate a bridge payload and tell scans apart from reader discovery.

    Anything carrying a tag value is a scan. A payload whose tag is absent or null
    but which names a device is a reader announcing itself. Everything
    else is rejected.
    """

    if not isinstance(payload, Mapping):
        raise ValidationError("Payload must be a JSON object")

    tag_key = _tag_key(payload)
    if tag_key is not None:
        tag = require_non_empty(payload[tag_key], "tag")
        raw_ts = payload.get("timestamp")
        if raw_ts is None or raw_ts == "":
            scanned_at = received_at
        elif isinstance(raw_ts, str):
            scanned_at = parse_iso_datetime(raw_ts)
        else:
            raise ValidationError("timestamp must be an ISO 8601 string")
        return ScanEvent(
            tag=tag,
            scanned_at=scanned_at,
            device_id=_first(payload, ("deviceId", "readerId"), "deviceId"),
            location=optional_str(payload.get("location"), "location"),
        )

    device_id = _first(payload, DEVICE_KEYS, "deviceId")
    if device_id is None:
        raise ValidationError("tag is required")
    return DiscoveryPayload(
        device_id=device_id,
        device_name=optional_str(payload.get("deviceName"), "deviceName"),
        ip_address=optional_str(payload.get("ipAddress") or payload.get("ip"), "ipAddress") or remote_addr,
    )


class IngestionGateway:
    """Entry point for the serial/MQTT bridge."""

    def __init__(
        self,
        scans: ScanProcessingService,
        readers: ReaderRegistrationService,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._scans = scans
        self._readers = readers
        self._clock = clock

    def ingest(self, payload: Any, *, remote_addr: Optional[str] = None) -> Union[ProcessedScanResult, Reader]:
        received_at = self._clock()
        parsed = parse_payload(payload, received_at=received_at, remote_addr=remote_addr)
        if isinstance(parsed, DiscoveryPayload):
            return self._readers.register(parsed, seen_at=received_at)
        return self._scans.process(parsed)
