from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import Weekday


@dataclass(frozen=True)
class ScheduleWindow:
    """Domain entity: one weekly meeting of a subject section."""

    schedule_id: int
    day: Weekday
    start_time: time
    end_time: time
    instructor_id: int
    room_id: Optional[int] = None
    subject_name: Optional[str] = None
    section_name: Optional[str] = None
    room_no: Optional[str] = None

    def starts_on(self, day: date) -> datetime:
        return datetime.combine(day, self.start_time)

    def ends_on(self, day: date) -> datetime:
        return datetime.combine(day, self.end_time)
