from __future__ import annotations

import threading
from datetime import datetime, timedelta
from typing import Dict

from ..core.constants import DEFAULT_SCAN_DEBOUNCE_SECONDS

_PRUNE_AT = 1024


class ScanDebouncer:
    """Suppresses reader chatter: repeated reads of one tag within a short interval.

    Every read refreshes the tag's last-seen time, ignored ones included, so a
    card held against the reader keeps being ignored. Timestamps that arrive out
    of order are compared by distance and never move last-seen backwards.
    """

    def __init__(self, window_seconds: float = DEFAULT_SCAN_DEBOUNCE_SECONDS):
        self._window = timedelta(seconds=float(window_seconds))
        self._last_seen: Dict[str, datetime] = {}
        self._lock = threading.Lock()

    def is_duplicate(self, tag: str, at: datetime) -> bool:
        with self._lock:
            last = self._last_seen.get(tag)
            duplicate = last is not None and abs(at - last) < self._window
            if last is None or at > last:
                self._last_seen[tag] = at
            if len(self._last_seen) > _PRUNE_AT:
                self._prune(at)
            return duplicate

    def release(self, tag: str, at: datetime) -> None:
        """Forget a read that did not get processed, so the next read of the tag counts."""
        with self._lock:
            if self._last_seen.get(tag) == at:
                del self._last_seen[tag]

    def _prune(self, now: datetime) -> None:
        cutoff = now - self._window
        for tag in [t for t, seen in self._last_seen.items() if seen < cutoff]:
            del self._last_seen[tag]
