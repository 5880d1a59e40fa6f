from .course import Course, ScheduleRule, CapacityClass
from .recurring_slot import RecurringSlot, SpecialRecurringSlot
from .date_override import DateOverride, OverrideSlot
from .booking import Booking, BookingStatus, ACTIVE_BOOKING_STATUSES
from .waitlist import WaitlistEntry, WaitlistStatus
