"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HOURLY_RATE = 100
DEFAULT_RECENT_LIMIT = 3
DEFAULT_ACTIVITY_LIMIT = 10

MAX_IMAGES_PER_RECORD = 2
MAX_IMAGE_BYTES = 5 * 1024 * 1024
MIN_PASSWORD_LENGTH = 6

# Ranges up to this many days are charted per day, longer ones per month.
DAILY_CHART_MAX_DAYS = 31
DEFAULT_CHART_MONTHS = 6
DEFAULT_CHART_DAYS = 7

TICKET_PREFIX = "PARK-"
