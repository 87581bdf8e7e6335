"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

REPORT_TITLE = "ABSENCE REPORT"
REPORT_SHEET_NAME = "Attendance Report"
REPORT_FILE_PREFIX = "attendance-report"
REPORT_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEALTH_CHECK_CRON = "0 2 * * *"
