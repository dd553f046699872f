from __future__ import annotations

import logging
from datetime import datetime

from ..realtime.dispatcher import EventDispatcher
from .model import DiscoveryPayload, Reader
from .repository import ReaderRepository

logger = logging.getLogger(__name__)


class ReaderRegistrationService:
    def __init__(self, readers: ReaderRepository, dispatcher: EventDispatcher):
        self._readers = readers
        self._dispatcher = dispatcher

    def register(self, discovery: DiscoveryPayload, *, seen_at: datetime) -> Reader:
        reader = self._readers.upsert_discovered_reader(
            device_id=discovery.device_id,
            device_name=discovery.device_name,
            ip_address=discovery.ip_address,
            seen_at=seen_at,
        )
        logger.info("Reader %s discovered (%s)", reader.device_id, reader.device_name or "unnamed")
        self._dispatcher.announce_reader(reader)
        return reader
