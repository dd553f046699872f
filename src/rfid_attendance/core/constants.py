"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SCAN_DEBOUNCE_SECONDS = 5
DEFAULT_LATE_THRESHOLD_MINUTES = 10
DEFAULT_EARLY_GRACE_MINUTES = 15
DEFAULT_LATE_CHECKOUT_GRACE_MINUTES = 15
DEFAULT_BROADCAST_ROOM = "reader-updates"
READER_ROOM_PREFIX = "reader:"
CONFLICT_RETRIES = 1
