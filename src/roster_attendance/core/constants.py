"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CASCADE_FETCH_LIMIT = 1000
DEFAULT_CASCADE_MAX_WORKERS = 8
DEFAULT_FIND_LIMIT = 10
DEFAULT_EVENT_ATTENDANCE_LIMIT = 1000
DEBUG_SAMPLE_LIMIT = 10
MIN_PASSWORD_LENGTH = 8
