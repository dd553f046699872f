from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import ScheduleWindow
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Check-in after the late threshold."""

    def decide_checkin(self, *, now: datetime, window: Optional[ScheduleWindow]) -> StatusDecision:
        if window is None:
            return StatusDecision(status=AttendanceStatus.LATE)
        minutes = int((now - window.starts_on(now.date())).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes} min")
