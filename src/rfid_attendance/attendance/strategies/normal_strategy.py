from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...schedules.model import ScheduleWindow
from .base import AttendanceStrategy, StatusDecision


class NormalStrategy(AttendanceStrategy):
    """On-time check-in."""

    def decide_checkin(self, *, now: datetime, window: Optional[ScheduleWindow]) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
