"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MONTHS_BACK = 6
DEFAULT_MONTHS_FORWARD = 6
DEFAULT_LONG_DAY_HOURS = 8
DEFAULT_MAX_ENTRY_DAYS = 93
DEFAULT_UPCOMING_COUNT = 4

PERIOD_KEY_FORMAT = "%Y-%m"
ARN_LENGTH = 15
