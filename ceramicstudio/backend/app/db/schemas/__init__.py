from .course import Course, CourseCreate, CourseUpdate
from .schedule import (
    TimeRange,
    WeeklyScheduleUpdate,
    RecurringSlot,
    RecurringSlotCreate,
    RecurringSlotUpdate,
    SpecialScheduleUpdate,
    SpecialSlot,
    OverrideUpsert,
    OverrideApply,
    OverrideSlot,
    DateOverride,
)
from .availability import AvailableSlot, CalendarDay, CalendarMonth
from .booking import (
    Booking,
    BookingCreate,
    BookingCancel,
    BookingCreated,
    BookingStatusUpdate,
    ParticipantAdd,
)
from .waitlist import WaitlistCreate, WaitlistEntry, WaitlistProcessResult
