from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator
from ..models.booking import BookingStatus


class BookingBase(BaseModel):
    course_id: str
    booking_date: date
    participants: int = Field(default=1, ge=1)
    customer_name: str = Field(min_length=1)
    customer_email: str
    notes: str | None = None

    @field_validator("customer_email")
    @classmethod
    def check_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("A valid email address is required")
        return value


class BookingCreate(BookingBase):
    slot_id: str
    status: BookingStatus = BookingStatus.confirmed


class BookingCancel(BaseModel):
    reason: str | None = None


class BookingStatusUpdate(BaseModel):
    status: BookingStatus


class ParticipantAdd(BaseModel):
    participant_name: str = Field(min_length=1)


class Booking(BookingBase):
    id: int
    slot_reference_id: str
    start_time: str
    end_time: str
    status: BookingStatus
    created_at: datetime | None = None
    cancelled_at: datetime | None = None

    class Config:
        from_attributes = True


class BookingCreated(BaseModel):
    booking: Booking
    remaining_seats: int
    total_capacity: int
