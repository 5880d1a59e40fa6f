"""Common application-wide constants."""

# Seats per window when a course has no explicit capacity
DEFAULT_COURSE_CAPACITY = 12
POTTERY_WHEEL_CAPACITY = 4

# Legacy naming conventions, only used to default course attributes on creation
POTTERY_WHEEL_ID_MARKER = "topferscheibe"
POTTERY_WHEEL_COURSE_IDS = ("einsteiger-kurse-topferscheibe",)
FIRST_SUNDAY_COURSE_IDS = ("keramik-bemalen-sonntag",)

# Database day_of_week numbering
SUNDAY = 0
DECEMBER = 12

# Waitlist search window ahead of "today"
WAITLIST_HORIZON_DAYS = 90
WAITLIST_BOOKING_NOTE = "WARTELISTEN-BUCHUNG: Automatisch gebucht von der Warteliste"

SYSTEM_ACTOR = "system"


__all__ = [
    "DEFAULT_COURSE_CAPACITY",
    "POTTERY_WHEEL_CAPACITY",
    "POTTERY_WHEEL_ID_MARKER",
    "POTTERY_WHEEL_COURSE_IDS",
    "FIRST_SUNDAY_COURSE_IDS",
    "SUNDAY",
    "DECEMBER",
    "WAITLIST_HORIZON_DAYS",
    "WAITLIST_BOOKING_NOTE",
    "SYSTEM_ACTOR",
]
