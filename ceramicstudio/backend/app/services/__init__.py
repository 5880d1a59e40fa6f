from . import (
    availability_service,
    booking_service,
    calendar_service,
    capacity_service,
    notification_service,
    schedule_service,
    waitlist_service,
)
__all__ = [
    "availability_service",
    "booking_service",
    "calendar_service",
    "capacity_service",
    "notification_service",
    "schedule_service",
    "waitlist_service",
]
