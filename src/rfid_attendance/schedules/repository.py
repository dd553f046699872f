from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..identities.model import Identity
from .model import ScheduleWindow


class ScheduleRepository(Protocol):
    def find_active_schedules_for_identity(self, identity: Identity, at: datetime) -> Sequence[ScheduleWindow]:
        """Active windows on the weekday of ``at``.

        Students get the sections they are enrolled in, instructors the sections they teach.
        """

        raise NotImplementedError

    def get_schedule(self, schedule_id: int) -> Optional[ScheduleWindow]:
        raise NotImplementedError
