"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_WORKDAY_START_MINUTES = 8 * 60
DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_ANNUAL_LEAVE_QUOTA = 12
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_PENDING_LIMIT = 500
DEFAULT_REPORT_NAME = "attendance-report"
