from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role, ScanLogStatus, ScanType


@dataclass(frozen=True)
class ScanLogEntry:
    """Audit row for one accepted (non-debounced) scan, successful or not."""

    rfid_tag: str
    scanned_at: datetime
    scan_type: ScanType
    scan_status: ScanLogStatus
    reader_device_id: Optional[str] = None
    location: Optional[str] = None
    role: Optional[Role] = None
    identity_id: Optional[int] = None
    reason: Optional[str] = None
