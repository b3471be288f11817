"""Constants and defaults.

Note: Tenants may override any of these through attendance_settings; the
values here are what a tenant gets when nothing is configured.
"""

DEFAULT_TIMEZONE = "Asia/Kolkata"

DEFAULT_WORK_START = "09:00"
DEFAULT_WORK_END = "17:00"
DEFAULT_LUNCH_BREAK_START = "12:00"
DEFAULT_LUNCH_BREAK_END = "13:00"
DEFAULT_FLEX_MINUTES = 30
DEFAULT_MINIMUM_WORK_HOURS = 8
DEFAULT_ATTENDANCE_DEADLINE = "10:00"

MAX_LOCATION_ACCURACY_M = 200
MAX_TIME_GAP_SECONDS = 5 * 60
MAX_DUPLICATE_INTERVAL_SECONDS = 60 * 60

EARTH_RADIUS_M = 6_371_000

LOCATION_LOOKBACK_DAYS = 7
LOCATION_HISTORY_LIMIT = 20
LOCATION_DRIFT_M = 5000
TIME_LOOKBACK_DAYS = 30
TIME_HISTORY_LIMIT = 30
TIME_DRIFT_HOURS = 2
RAPID_RESUBMISSION_SECONDS = 5 * 60

DEFAULT_HISTORY_LIMIT = 30
