"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_STATUS_REMARKS = ""
DEFAULT_LOW_ATTENDANCE_THRESHOLD = 75.0
DEFAULT_NOTIFY_MAX_WORKERS = 4
DEFAULT_COUNTRY_CODE = "91"

# Reconcile/lock re-read the document this many times on a concurrent write.
SYNC_MAX_ATTEMPTS = 3
