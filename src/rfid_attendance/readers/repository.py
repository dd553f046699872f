from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Reader


class ReaderRepository(Protocol):
    def upsert_discovered_reader(
        self,
        *,
        device_id: str,
        device_name: Optional[str],
        ip_address: Optional[str],
        seen_at: datetime,
    ) -> Reader:
        """Create the reader on first discovery, otherwise refresh name/ip/last-seen.

        An existing reader keeps its administrative status.
        """

        raise NotImplementedError
