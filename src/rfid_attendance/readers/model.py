from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.enums import ReaderStatus


@dataclass(frozen=True)
class DiscoveryPayload:
    """A reader announcing itself; carries no person scan."""

    device_id: str
    device_name: Optional[str] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class Reader:
    reader_id: int
    device_id: str
    device_name: Optional[str]
    ip_address: Optional[str]
    status: ReaderStatus
    last_seen: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "readerId": self.reader_id,
            "deviceId": self.device_id,
            "deviceName": self.device_name,
            "ipAddress": self.ip_address,
            "status": self.status.value,
            "lastSeen": self.last_seen.isoformat() if self.last_seen else None,
        }
