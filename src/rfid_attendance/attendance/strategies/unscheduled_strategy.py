from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import ScheduleWindow
from .base import AttendanceStrategy, StatusDecision


class UnscheduledStrategy(AttendanceStrategy):
    """Scan outside every schedule window: kept as a schedule-less record."""

    def decide_checkin(self, *, now: datetime, window: Optional[ScheduleWindow]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note="No active schedule")
