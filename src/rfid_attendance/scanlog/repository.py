from __future__ import annotations

from typing import Protocol

from .model import ScanLogEntry


class ScanLogRepository(Protocol):
    def log_scan(self, entry: ScanLogEntry) -> int:
        raise NotImplementedError
