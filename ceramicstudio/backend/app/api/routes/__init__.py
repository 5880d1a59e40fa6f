from . import (
    courses,
    schedule,
    overrides,
    bookings,
    waitlist,
)

__all__ = [
    "courses",
    "schedule",
    "overrides",
    "bookings",
    "waitlist",
]
