from __future__ import annotations

from datetime import datetime

from ..core.enums import Weekday
from ..core.exceptions import ValidationError


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into a naive local datetime.

    Aware values (``Z`` or an explicit offset) are converted to local time first,
    since every stored timestamp is naive local time.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def weekday_of(moment: datetime) -> Weekday:
    return Weekday.from_index(moment.weekday())


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
