from __future__ import annotations

from datetime import datetime, timedelta
from typing import Collection

from ..common.datetime_utils import weekday_of
from ..core.constants import DEFAULT_EARLY_GRACE_MINUTES, DEFAULT_LATE_CHECKOUT_GRACE_MINUTES
from ..core.exceptions import AmbiguousScheduleError, NoActiveScheduleError
from ..identities.model import Identity
from .model import ScheduleWindow
from .repository import ScheduleRepository


class ScheduleWindowMatcher:
    """Attributes a scan to the schedule window it falls in.

    A window matches when the scan is on the window's weekday and inside
    ``[start - early_grace, end + late_checkout_grace]``. Among matches the
    earliest start wins; a tie on that start is ambiguous. Windows listed in
    ``skip`` are left out, which lets callers pass over slots already closed.
    """

    def __init__(
        self,
        schedules: ScheduleRepository,
        *,
        early_grace_minutes: int = DEFAULT_EARLY_GRACE_MINUTES,
        late_checkout_grace_minutes: int = DEFAULT_LATE_CHECKOUT_GRACE_MINUTES,
    ):
        self._schedules = schedules
        self._early_grace = timedelta(minutes=int(early_grace_minutes))
        self._late_checkout_grace = timedelta(minutes=int(late_checkout_grace_minutes))

    def covers(self, window: ScheduleWindow, at: datetime) -> bool:
        if window.day != weekday_of(at):
            return False
        day = at.date()
        return window.starts_on(day) - self._early_grace <= at <= window.ends_on(day) + self._late_checkout_grace

    def match(self, identity: Identity, at: datetime, *, skip: Collection[int] = ()) -> ScheduleWindow:
        candidates = [
            w
            for w in self._schedules.find_active_schedules_for_identity(identity, at)
            if w.schedule_id not in skip and self.covers(w, at)
        ]
        if not candidates:
            raise NoActiveScheduleError(
                f"No schedule for {identity.role.value.lower()} {identity.identity_id} at {at:%A %H:%M}"
            )

        earliest = min(w.start_time for w in candidates)
        best = [w for w in candidates if w.start_time == earliest]
        if len(best) > 1:
            ids = tuple(sorted(w.schedule_id for w in best))
            raise AmbiguousScheduleError(f"Schedules {list(ids)} all start at {earliest:%H:%M}", schedule_ids=ids)
        return best[0]
