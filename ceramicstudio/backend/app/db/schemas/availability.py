from pydantic import BaseModel


class AvailableSlot(BaseModel):
    slot_id: str
    date: str
    start_time: str
    end_time: str
    source: str
    duration_minutes: int
    formatted_time: str
    total_capacity: int
    booked_seats: int
    remaining_seats: int
    fully_booked: bool
    overbooked: bool = False


class CalendarDay(BaseModel):
    has_slots: bool
    remaining_total: int
    state: str


class CalendarMonth(BaseModel):
    course_id: str
    month: str
    days: dict[str, CalendarDay]
