from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..schedules.model import ScheduleWindow
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.normal_strategy import NormalStrategy
from .strategies.unscheduled_strategy import UnscheduledStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, now: datetime, window: Optional[ScheduleWindow], late_threshold_minutes: int) -> AttendanceStrategy:
        if not window:
            return UnscheduledStrategy()

        if now <= window.starts_on(now.date()) + timedelta(minutes=late_threshold_minutes):
            return NormalStrategy()
        return LateStrategy()
